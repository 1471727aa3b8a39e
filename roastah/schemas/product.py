"""Product schemas.

``ProductRecord`` mirrors the JSON the catalog API serves for a product
(camelCase keys). The remaining models are the request and response bodies
of the seller edit endpoints.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from roastah.core.product_state import ProductState, ProductTag, Visibility

# Seller-editable product fields, in form order (wire names).
EDITABLE_FIELDS: tuple[str, ...] = (
    "name",
    "description",
    "price",
    "stockQuantity",
    "origin",
    "roastLevel",
    "process",
    "altitude",
    "varietal",
    "tastingNotes",
)


class CamelModel(BaseModel):
    """Base for models exchanged with the catalog API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ProductRecord(CamelModel):
    """Product as served by the catalog API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: int
    roaster_id: int
    name: str
    description: str | None = None
    price: Decimal
    stock_quantity: int = 0
    origin: str | None = None
    roast_level: str
    process: str | None = None
    altitude: str | None = None
    varietal: str | None = None
    tasting_notes: str | None = None
    images: list[str] = Field(default_factory=list)

    state: ProductState = ProductState.DRAFT

    is_unlisted: bool = False
    is_preorder: bool = False
    is_private: bool = False
    is_out_of_stock: bool = False
    is_scheduled: bool = False

    published_at: datetime | None = None
    scheduled_publish_at: datetime | None = None
    preorder_shipping_date: datetime | None = None
    archived_at: datetime | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None

    @field_validator(
        "is_unlisted",
        "is_preorder",
        "is_private",
        "is_out_of_stock",
        "is_scheduled",
        mode="before",
    )
    @classmethod
    def null_tag_is_false(cls, v: bool | None) -> bool:
        """Tag columns are nullable on the catalog side."""
        return bool(v)

    @field_validator("images", mode="before")
    @classmethod
    def null_images_is_empty(cls, v: list[str] | None) -> list[str]:
        return v or []


class ProductFieldsUpdate(CamelModel):
    """Seller edits to product fields.

    Validated before anything is sent to the catalog. Only fields that were
    actually provided are forwarded.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    name: str | None = Field(default=None, min_length=1, description="Product name")
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=Decimal("0.01"), decimal_places=2)
    stock_quantity: int | None = Field(default=None, ge=0)
    origin: str | None = None
    roast_level: str | None = Field(default=None, min_length=1)
    process: str | None = None
    altitude: str | None = None
    varietal: str | None = None
    tasting_notes: str | None = None

    @field_validator("name", "roast_level")
    @classmethod
    def required_when_present(cls, v: str | None) -> str | None:
        """Name and roast level may be omitted but never blanked."""
        if v is None:
            raise ValueError("field cannot be null")
        if not v.strip():
            raise ValueError("field cannot be blank")
        return v.strip()

    def to_payload(self) -> dict:
        """Changed fields keyed by catalog wire name."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class StateTransitionRequest(BaseModel):
    state: ProductState

    model_config = {"extra": "forbid"}


class TagToggleRequest(BaseModel):
    """Flip exactly one tag."""

    tag: ProductTag
    value: bool

    model_config = {"extra": "forbid"}


class StateOption(BaseModel):
    """Entry of the transition selector."""

    value: ProductState
    label: str
    color: str


class TagBadge(BaseModel):
    tag: ProductTag
    label: str
    color: str


class TagToggleState(BaseModel):
    tag: ProductTag
    label: str
    value: bool
    enabled: bool


class FieldState(BaseModel):
    name: str
    enabled: bool


class EditFormState(BaseModel):
    """Everything the edit form needs to render one product."""

    product: ProductRecord
    state_label: str
    state_color: str
    state_description: str
    visibility: Visibility
    can_edit: bool
    can_publish: bool
    can_archive: bool
    can_delete: bool
    fields: list[FieldState]
    available_transitions: list[StateOption]
    tag_badges: list[TagBadge]
    tag_toggles: list[TagToggleState]


class ProductListItem(BaseModel):
    """Row of the seller product list."""

    id: int
    name: str
    price: Decimal
    stock_quantity: int
    state: ProductState
    state_label: str
    state_color: str
    tag_badges: list[TagBadge]
    can_edit: bool
    can_delete: bool


class DeleteResponse(BaseModel):
    success: bool = True
    product_id: int
