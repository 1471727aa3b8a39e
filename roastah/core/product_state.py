"""Product lifecycle view-model.

Pure functions deriving UI affordances from a product's lifecycle state
and its tag flags. The authority owns the state itself; everything here is
re-derived from whatever record was last fetched.

States:
    draft -> pending_review -> published -> archived
                           \\-> rejected -> draft / pending_review

Tags are orthogonal booleans overlaid on the state and never take part in
transition guards.
"""

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import Literal, Protocol, assert_never


class ProductState(StrEnum):
    """Lifecycle stage of a catalog listing."""

    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    REJECTED = "rejected"


class ProductTag(StrEnum):
    """Boolean product flags, named as the authority names the fields."""

    IS_UNLISTED = "isUnlisted"
    IS_PREORDER = "isPreorder"
    IS_PRIVATE = "isPrivate"
    IS_OUT_OF_STOCK = "isOutOfStock"
    IS_SCHEDULED = "isScheduled"


Visibility = Literal["public", "private", "hidden"]


class TaggedProduct(Protocol):
    """Anything carrying a state and the five tag fields."""

    state: ProductState
    is_unlisted: bool
    is_preorder: bool
    is_private: bool
    is_out_of_stock: bool
    is_scheduled: bool


# Badge order follows the seller product list.
TAG_ORDER: tuple[ProductTag, ...] = (
    ProductTag.IS_UNLISTED,
    ProductTag.IS_PREORDER,
    ProductTag.IS_PRIVATE,
    ProductTag.IS_OUT_OF_STOCK,
    ProductTag.IS_SCHEDULED,
)

TRANSITIONS: Mapping[ProductState, tuple[ProductState, ...]] = MappingProxyType(
    {
        ProductState.DRAFT: (ProductState.PENDING_REVIEW, ProductState.PUBLISHED),
        ProductState.PENDING_REVIEW: (ProductState.PUBLISHED, ProductState.REJECTED),
        ProductState.PUBLISHED: (ProductState.ARCHIVED,),
        ProductState.ARCHIVED: (),
        ProductState.REJECTED: (ProductState.DRAFT, ProductState.PENDING_REVIEW),
    }
)


def get_state_label(state: ProductState) -> str:
    """Human-readable label for a state."""
    match state:
        case ProductState.DRAFT:
            return "Draft"
        case ProductState.PENDING_REVIEW:
            return "Pending Review"
        case ProductState.PUBLISHED:
            return "Published"
        case ProductState.ARCHIVED:
            return "Archived"
        case ProductState.REJECTED:
            return "Rejected"
        case _:
            assert_never(state)


def get_state_color(state: ProductState) -> str:
    """Badge color classes for a state."""
    match state:
        case ProductState.DRAFT:
            return "bg-yellow-100 text-yellow-800 border-yellow-200"
        case ProductState.PENDING_REVIEW:
            return "bg-blue-100 text-blue-800 border-blue-200"
        case ProductState.PUBLISHED:
            return "bg-green-100 text-green-800 border-green-200"
        case ProductState.ARCHIVED:
            return "bg-gray-100 text-gray-800 border-gray-200"
        case ProductState.REJECTED:
            return "bg-red-100 text-red-800 border-red-200"
        case _:
            assert_never(state)


def get_state_description(state: ProductState) -> str:
    """One-line explanation of what a state means for the seller."""
    match state:
        case ProductState.DRAFT:
            return "Editable, private to seller"
        case ProductState.PENDING_REVIEW:
            return "Awaiting admin approval"
        case ProductState.PUBLISHED:
            return "Public, live product"
        case ProductState.ARCHIVED:
            return "Retired, historical"
        case ProductState.REJECTED:
            return "Needs revision; visible to seller only"
        case _:
            assert_never(state)


def get_tag_label(tag: ProductTag) -> str:
    """Human-readable label for a tag badge."""
    match tag:
        case ProductTag.IS_UNLISTED:
            return "Unlisted"
        case ProductTag.IS_PREORDER:
            return "Pre-order"
        case ProductTag.IS_PRIVATE:
            return "Private"
        case ProductTag.IS_OUT_OF_STOCK:
            return "Out of Stock"
        case ProductTag.IS_SCHEDULED:
            return "Scheduled"
        case _:
            assert_never(tag)


def get_tag_color(tag: ProductTag) -> str:
    """Badge color classes for a tag."""
    match tag:
        case ProductTag.IS_UNLISTED:
            return "bg-purple-100 text-purple-800 border-purple-200"
        case ProductTag.IS_PREORDER:
            return "bg-orange-100 text-orange-800 border-orange-200"
        case ProductTag.IS_PRIVATE:
            return "bg-indigo-100 text-indigo-800 border-indigo-200"
        case ProductTag.IS_OUT_OF_STOCK:
            return "bg-red-100 text-red-800 border-red-200"
        case ProductTag.IS_SCHEDULED:
            return "bg-cyan-100 text-cyan-800 border-cyan-200"
        case _:
            assert_never(tag)


def get_available_transitions(state: ProductState) -> list[ProductState]:
    """States directly reachable from ``state``.

    Archived products are terminal and return an empty list.
    """
    return list(TRANSITIONS[state])


def is_valid_transition(current: ProductState, target: ProductState) -> bool:
    """Whether ``current -> target`` is an edge of the transition table."""
    return target in TRANSITIONS[current]


def can_edit_product(state: ProductState) -> bool:
    """Field mutation is allowed only before publication or after rejection."""
    return state in (ProductState.DRAFT, ProductState.REJECTED)


def can_publish_product(state: ProductState) -> bool:
    return state in (ProductState.DRAFT, ProductState.REJECTED)


def can_archive_product(state: ProductState) -> bool:
    return state in (ProductState.PUBLISHED, ProductState.REJECTED)


def can_delete_product(state: ProductState) -> bool:
    """Hard delete only for products that were never customer-facing."""
    return state in (ProductState.DRAFT, ProductState.REJECTED)


def tag_value(product: TaggedProduct, tag: ProductTag) -> bool:
    """Read one tag flag from a product record."""
    match tag:
        case ProductTag.IS_UNLISTED:
            return product.is_unlisted
        case ProductTag.IS_PREORDER:
            return product.is_preorder
        case ProductTag.IS_PRIVATE:
            return product.is_private
        case ProductTag.IS_OUT_OF_STOCK:
            return product.is_out_of_stock
        case ProductTag.IS_SCHEDULED:
            return product.is_scheduled
        case _:
            assert_never(tag)


def get_active_tags(product: TaggedProduct) -> list[ProductTag]:
    """Tags whose flag is set on ``product``, in badge order."""
    return [tag for tag in TAG_ORDER if tag_value(product, tag)]


def get_product_visibility(product: TaggedProduct) -> Visibility:
    """Who can see the listing: everyone, link holders only, or nobody."""
    if product.state != ProductState.PUBLISHED:
        return "hidden"
    if product.is_private or product.is_unlisted:
        return "private"
    return "public"
