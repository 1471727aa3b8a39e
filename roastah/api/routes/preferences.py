"""UI preference endpoints (buyer/seller mode, dashboard layout).

Preferences always belong to the user of the current session.
"""

from typing import Any

from fastapi import APIRouter

from roastah.api.deps import CurrentUser, Preferences
from roastah.schemas.common import ErrorResponse
from roastah.schemas.preferences import PreferencesResponse, PreferenceUpdate

router = APIRouter()

_ERRORS = {
    401: {"model": ErrorResponse, "description": "Session expired"},
    502: {"model": ErrorResponse, "description": "Catalog unavailable"},
}


@router.get("", response_model=PreferencesResponse, responses=_ERRORS)
async def get_preferences(user: CurrentUser, store: Preferences) -> PreferencesResponse:
    """All preferences of the session user, defaults filled in."""
    return PreferencesResponse(user_id=user.id, preferences=await store.get_all(user.id))


@router.put(
    "/{key}",
    responses={
        **_ERRORS,
        422: {"model": ErrorResponse, "description": "Unknown key or invalid value"},
    },
)
async def set_preference(
    key: str,
    update: PreferenceUpdate,
    user: CurrentUser,
    store: Preferences,
) -> dict[str, Any]:
    value = await store.set(user.id, key, update.value)
    return {"user_id": user.id, "key": key, "value": value}
