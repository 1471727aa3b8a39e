"""Product edit surface.

Derives the edit form of a product from the lifecycle view-model and relays
seller actions to the catalog API under the view-model's gates:

- fields and tags are mutable only while ``can_edit_product`` holds
- transitions must be edges of the transition table
- delete needs ``can_delete_product`` and an explicit confirmation

Every mutation is applied to the cache only after the catalog confirmed it,
and invalidates the seller's product list. A control that has a request in
flight refuses a second one.
"""

from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager

from roastah.core.product_cache import ProductCache, get_product_cache
from roastah.core.product_state import (
    TAG_ORDER,
    ProductState,
    ProductTag,
    can_archive_product,
    can_delete_product,
    can_edit_product,
    can_publish_product,
    get_active_tags,
    get_available_transitions,
    get_product_visibility,
    get_state_color,
    get_state_description,
    get_state_label,
    get_tag_color,
    get_tag_label,
    is_valid_transition,
    tag_value,
)
from roastah.errors import (
    CatalogUnavailableError,
    ConfirmationRequiredError,
    ControlBusyError,
    InvalidTransitionError,
    ProductLockedError,
    ProductNotDeletableError,
)
from roastah.infra.logging import get_logger
from roastah.schemas.product import (
    EDITABLE_FIELDS,
    EditFormState,
    FieldState,
    ProductFieldsUpdate,
    ProductListItem,
    ProductRecord,
    StateOption,
    TagBadge,
    TagToggleState,
)
from roastah.services.catalog_client import CatalogClient, Credentials, get_catalog_client

logger = get_logger(__name__)


def tag_badges(product: ProductRecord) -> list[TagBadge]:
    return [
        TagBadge(tag=tag, label=get_tag_label(tag), color=get_tag_color(tag))
        for tag in get_active_tags(product)
    ]


def build_edit_form(product: ProductRecord) -> EditFormState:
    """Derive the complete edit form state of one product."""
    state = product.state
    editable = can_edit_product(state)

    return EditFormState(
        product=product,
        state_label=get_state_label(state),
        state_color=get_state_color(state),
        state_description=get_state_description(state),
        visibility=get_product_visibility(product),
        can_edit=editable,
        # Action buttons also need the matching edge of the transition table
        can_publish=(
            can_publish_product(state) and is_valid_transition(state, ProductState.PUBLISHED)
        ),
        can_archive=(
            can_archive_product(state) and is_valid_transition(state, ProductState.ARCHIVED)
        ),
        can_delete=can_delete_product(state),
        fields=[FieldState(name=name, enabled=editable) for name in EDITABLE_FIELDS],
        available_transitions=[
            StateOption(
                value=target,
                label=get_state_label(target),
                color=get_state_color(target),
            )
            for target in get_available_transitions(state)
        ],
        tag_badges=tag_badges(product),
        tag_toggles=[
            TagToggleState(
                tag=tag,
                label=get_tag_label(tag),
                value=tag_value(product, tag),
                enabled=editable,
            )
            for tag in TAG_ORDER
        ],
    )


def build_list_item(product: ProductRecord) -> ProductListItem:
    return ProductListItem(
        id=product.id,
        name=product.name,
        price=product.price,
        stock_quantity=product.stock_quantity,
        state=product.state,
        state_label=get_state_label(product.state),
        state_color=get_state_color(product.state),
        tag_badges=tag_badges(product),
        can_edit=can_edit_product(product.state),
        can_delete=can_delete_product(product.state),
    )


class ProductEditSurface:
    """Seller-facing product editing on top of the catalog API."""

    def __init__(
        self,
        client: CatalogClient | None = None,
        cache: ProductCache | None = None,
    ) -> None:
        self._client = client or get_catalog_client()
        self._cache = cache or get_product_cache()
        self._busy: set[tuple[str, int, str]] = set()

    async def close(self) -> None:
        await self._client.close()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_product(self, product_id: int, credentials: Credentials) -> ProductRecord:
        """Product from cache, fetched from the catalog on a miss."""
        scope = credentials.scope
        cached = await self._cache.get(scope, product_id)
        if cached is not None:
            return cached

        token = await self._cache.begin_fetch(scope, product_id)
        try:
            product = await self._client.fetch_product(product_id, credentials)
        except BaseException:
            await self._cache.abandon(token)
            raise
        if not await self._cache.store(token, product):
            # A mutation landed while fetching; its confirmed record wins.
            newer = await self._cache.get(scope, product_id)
            if newer is not None:
                return newer
        return product

    async def load(self, product_id: int, credentials: Credentials) -> EditFormState:
        """Edit form of a product."""
        product = await self.get_product(product_id, credentials)
        form = build_edit_form(product)

        logger.debug(
            "Edit form built",
            product_id=product_id,
            state=product.state.value,
            can_edit=form.can_edit,
            transitions=[t.value.value for t in form.available_transitions],
        )
        return form

    async def list_products(
        self,
        credentials: Credentials,
        state: ProductState | None = None,
        search: str | None = None,
    ) -> list[ProductListItem]:
        """Seller product list, optionally filtered by state and name."""
        scope = credentials.scope
        products = await self._cache.get_list(scope)
        if products is None:
            token = await self._cache.begin_fetch(scope)
            try:
                products = await self._client.list_products(credentials)
            except BaseException:
                await self._cache.abandon(token)
                raise
            await self._cache.store_list(token, products)

        needle = search.strip().lower() if search else ""
        return [
            build_list_item(product)
            for product in products
            if (state is None or product.state == state)
            and (not needle or needle in product.name.lower())
        ]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def request_transition(
        self,
        product_id: int,
        target: ProductState,
        credentials: Credentials,
    ) -> EditFormState:
        """Move a product to ``target``.

        Raises:
            InvalidTransitionError: If ``target`` is not reachable from the current state
            TransitionRejectedError: If the catalog refuses the change
        """
        async with self._control(credentials, product_id, "state"):
            current = await self.get_product(product_id, credentials)
            if not is_valid_transition(current.state, target):
                logger.info(
                    "Transition refused locally",
                    product_id=product_id,
                    current_state=current.state.value,
                    target_state=target.value,
                )
                raise InvalidTransitionError(current.state, target)

            updated = await self._confirmed(
                credentials,
                product_id,
                self._client.transition_state(product_id, target, credentials),
            )

        logger.info(
            "Product state changed",
            product_id=product_id,
            from_state=current.state.value,
            to_state=updated.state.value,
        )
        return build_edit_form(updated)

    async def toggle_tag(
        self,
        product_id: int,
        tag: ProductTag,
        value: bool,
        credentials: Credentials,
    ) -> EditFormState:
        """Set one tag flag. Tags follow the same edit gate as fields."""
        async with self._control(credentials, product_id, f"tags:{tag.value}"):
            current = await self.get_product(product_id, credentials)
            if not can_edit_product(current.state):
                raise ProductLockedError(product_id, current.state)

            updated = await self._confirmed(
                credentials,
                product_id,
                self._client.toggle_tag(product_id, tag, value, credentials),
            )

        logger.info(
            "Product tag toggled",
            product_id=product_id,
            tag=tag.value,
            value=tag_value(updated, tag),
        )
        return build_edit_form(updated)

    async def update_fields(
        self,
        product_id: int,
        update: ProductFieldsUpdate,
        credentials: Credentials,
    ) -> EditFormState:
        """Patch seller-editable fields of an editable product."""
        payload = update.to_payload()

        async with self._control(credentials, product_id, "fields"):
            current = await self.get_product(product_id, credentials)
            if not can_edit_product(current.state):
                raise ProductLockedError(product_id, current.state)
            if not payload:
                return build_edit_form(current)

            updated = await self._confirmed(
                credentials,
                product_id,
                self._client.update_fields(product_id, payload, credentials),
            )

        logger.info(
            "Product fields updated",
            product_id=product_id,
            fields=sorted(payload),
        )
        return build_edit_form(updated)

    async def delete_product(
        self,
        product_id: int,
        credentials: Credentials,
        confirm: bool = False,
    ) -> None:
        """Hard-delete a product.

        Raises:
            ProductNotDeletableError: If the product was ever customer-facing
            ConfirmationRequiredError: If ``confirm`` is not set
        """
        async with self._control(credentials, product_id, "delete"):
            current = await self.get_product(product_id, credentials)
            if not can_delete_product(current.state):
                raise ProductNotDeletableError(product_id, current.state)
            if not confirm:
                raise ConfirmationRequiredError(
                    f"Deleting product {product_id} cannot be undone; confirm to proceed"
                )

            try:
                await self._client.delete_product(product_id, credentials)
            finally:
                await self._cache.invalidate(credentials.scope, product_id)

        logger.info("Product deleted", product_id=product_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _control(
        self,
        credentials: Credentials,
        product_id: int,
        control: str,
    ) -> AsyncIterator[None]:
        """Mark a control busy for the duration of its request."""
        key = (credentials.scope, product_id, control)
        if key in self._busy:
            logger.info("Duplicate submission refused", product_id=product_id, control=control)
            raise ControlBusyError(product_id, control)

        self._busy.add(key)
        try:
            yield
        finally:
            self._busy.discard(key)

    async def _confirmed(
        self,
        credentials: Credentials,
        product_id: int,
        call: Awaitable[ProductRecord],
    ) -> ProductRecord:
        """Await a catalog mutation and cache its confirmed result.

        Rejections leave the cache untouched. When the outcome is unknown
        (catalog unreachable or malformed reply) the product is invalidated
        so the next read refetches it.
        """
        try:
            updated = await call
        except CatalogUnavailableError:
            await self._cache.invalidate(credentials.scope, product_id)
            raise

        await self._cache.apply_confirmed(credentials.scope, updated)
        return updated


# Singleton instance
_edit_surface: ProductEditSurface | None = None


def get_edit_surface() -> ProductEditSurface:
    """Get edit surface singleton."""
    global _edit_surface
    if _edit_surface is None:
        _edit_surface = ProductEditSurface()
    return _edit_surface
