"""Session user schema."""

from typing import Any

from pydantic import ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from roastah.schemas.product import CamelModel


class SessionUser(CamelModel):
    """User the catalog API resolves from the forwarded session."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str
    role: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v: Any) -> Any:
        """Catalog user ids may arrive as numbers."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v
