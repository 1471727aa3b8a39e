"""SQLAlchemy models.

Products themselves live in the catalog API; the only table this service
owns is ``ui_preferences``.
"""

from roastah.models.base import Base, TimestampMixin
from roastah.models.ui_preference import UiPreference

__all__ = [
    "Base",
    "TimestampMixin",
    "UiPreference",
]
