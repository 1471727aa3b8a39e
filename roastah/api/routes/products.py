"""Seller product endpoints.

Serve the edit form and the product list, and relay state transitions,
tag toggles, field updates and deletes to the catalog API.
"""

from typing import Annotated

from fastapi import APIRouter, Query

from roastah.api.deps import EditSurface, SellerCredentials
from roastah.core.product_state import ProductState
from roastah.infra.logging import get_logger
from roastah.schemas.common import ErrorResponse
from roastah.schemas.product import (
    DeleteResponse,
    EditFormState,
    ProductFieldsUpdate,
    ProductListItem,
    StateTransitionRequest,
    TagToggleRequest,
)

router = APIRouter()
logger = get_logger(__name__)

_ERRORS = {
    401: {"model": ErrorResponse, "description": "Session expired"},
    404: {"model": ErrorResponse, "description": "Product not found"},
    409: {"model": ErrorResponse, "description": "Action not allowed in the current state"},
    429: {"model": ErrorResponse, "description": "Same action already in progress"},
    502: {"model": ErrorResponse, "description": "Catalog unavailable"},
}


@router.get(
    "",
    response_model=list[ProductListItem],
    summary="List the seller's products",
    responses=_ERRORS,
)
async def list_products(
    surface: EditSurface,
    credentials: SellerCredentials,
    state: Annotated[ProductState | None, Query()] = None,
    search: Annotated[str | None, Query(max_length=200)] = None,
) -> list[ProductListItem]:
    return await surface.list_products(credentials, state=state, search=search)


@router.get(
    "/{product_id}/edit",
    response_model=EditFormState,
    summary="Edit form of a product",
    responses=_ERRORS,
)
async def get_edit_form(
    product_id: int,
    surface: EditSurface,
    credentials: SellerCredentials,
) -> EditFormState:
    return await surface.load(product_id, credentials)


@router.post(
    "/{product_id}/state",
    response_model=EditFormState,
    summary="Move a product to another lifecycle state",
    responses=_ERRORS,
)
async def transition_state(
    product_id: int,
    request: StateTransitionRequest,
    surface: EditSurface,
    credentials: SellerCredentials,
) -> EditFormState:
    """Request a state transition.

    The target must be offered by the edit form's transition selector.
    The returned form reflects the state the catalog confirmed.
    """
    logger.info(
        "Transition requested",
        product_id=product_id,
        target_state=request.state.value,
    )
    return await surface.request_transition(product_id, request.state, credentials)


@router.post(
    "/{product_id}/tags",
    response_model=EditFormState,
    summary="Set a single product tag",
    responses=_ERRORS,
)
async def toggle_tag(
    product_id: int,
    request: TagToggleRequest,
    surface: EditSurface,
    credentials: SellerCredentials,
) -> EditFormState:
    return await surface.toggle_tag(product_id, request.tag, request.value, credentials)


@router.patch(
    "/{product_id}",
    response_model=EditFormState,
    summary="Update product fields",
    responses=_ERRORS,
)
async def update_fields(
    product_id: int,
    update: ProductFieldsUpdate,
    surface: EditSurface,
    credentials: SellerCredentials,
) -> EditFormState:
    return await surface.update_fields(product_id, update, credentials)


@router.delete(
    "/{product_id}",
    response_model=DeleteResponse,
    summary="Delete a product",
    responses={
        **_ERRORS,
        428: {"model": ErrorResponse, "description": "Confirmation required"},
    },
)
async def delete_product(
    product_id: int,
    surface: EditSurface,
    credentials: SellerCredentials,
    confirm: Annotated[bool, Query(description="Must be true; deletion is irreversible")] = False,
) -> DeleteResponse:
    await surface.delete_product(product_id, credentials, confirm=confirm)
    return DeleteResponse(product_id=product_id)
