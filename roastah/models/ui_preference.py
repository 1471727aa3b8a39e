"""UiPreference model - persisted per-user UI settings."""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from roastah.models.base import Base, TimestampMixin


class UiPreference(Base, TimestampMixin):
    """One UI preference value of one user (buyer/seller mode, dashboard layout)."""

    __tablename__ = "ui_preferences"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<UiPreference(user_id='{self.user_id}', key='{self.key}')>"
