"""Pydantic schemas for request/response validation."""

from roastah.schemas.common import ErrorResponse, HealthResponse
from roastah.schemas.preferences import PreferencesResponse, PreferenceUpdate
from roastah.schemas.product import (
    DeleteResponse,
    EditFormState,
    ProductFieldsUpdate,
    ProductListItem,
    ProductRecord,
    StateTransitionRequest,
    TagToggleRequest,
)
from roastah.schemas.user import SessionUser

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "PreferencesResponse",
    "PreferenceUpdate",
    "DeleteResponse",
    "EditFormState",
    "ProductFieldsUpdate",
    "ProductListItem",
    "ProductRecord",
    "StateTransitionRequest",
    "TagToggleRequest",
    "SessionUser",
]
