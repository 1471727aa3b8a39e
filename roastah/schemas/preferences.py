"""UI preference schemas."""

from typing import Any

from pydantic import BaseModel, Field


class PreferenceUpdate(BaseModel):
    value: Any = Field(description="New preference value (JSON)")

    model_config = {"extra": "forbid"}


class PreferencesResponse(BaseModel):
    """All preferences of one user, with defaults filled in."""

    user_id: str
    preferences: dict[str, Any] = Field(default_factory=dict)
