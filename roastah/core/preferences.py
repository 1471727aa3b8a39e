"""UI preference store.

Process-wide key-value store for per-user UI preferences, held in memory
and written through to the ``ui_preferences`` table. Loaded once at
startup; every ``set`` persists immediately. Last write wins.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roastah.errors import InvalidPreferenceError
from roastah.infra.database import get_db_session
from roastah.infra.logging import get_logger
from roastah.models.ui_preference import UiPreference

logger = get_logger(__name__)

USER_MODE = "user_mode"
DASHBOARD_LAYOUT = "dashboard_layout"

USER_MODES = ("buyer", "seller")

DEFAULTS: dict[str, Any] = {
    USER_MODE: "buyer",
    DASHBOARD_LAYOUT: {},
}


def validate_preference(key: str, value: Any) -> Any:
    """Check a value against the rules of its key.

    Raises:
        InvalidPreferenceError: Unknown key or invalid value
    """
    match key:
        case "user_mode":
            if value not in USER_MODES:
                raise InvalidPreferenceError(
                    f"user_mode must be one of {', '.join(USER_MODES)}"
                )
        case "dashboard_layout":
            if not isinstance(value, dict):
                raise InvalidPreferenceError("dashboard_layout must be an object")
        case _:
            raise InvalidPreferenceError(f"Unknown preference '{key}'")
    return value


class PreferenceStore:
    """In-memory preference store with write-through persistence."""

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]] = get_db_session,
    ) -> None:
        """Initialize the store.

        Args:
            session_factory: Returns an async context manager yielding a database session
        """
        self._values: dict[str, dict[str, Any]] = {}
        self._session_factory = session_factory
        self._lock = asyncio.Lock()
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load(self, db_session: AsyncSession) -> None:
        """Load all stored preferences, replacing what is in memory."""
        result = await db_session.execute(
            select(UiPreference.user_id, UiPreference.key, UiPreference.value)
        )
        rows = result.fetchall()

        values: dict[str, dict[str, Any]] = {}
        for user_id, key, value in rows:
            if key not in DEFAULTS:
                logger.warning("Ignoring unknown stored preference", user_id=user_id, key=key)
                continue
            values.setdefault(user_id, {})[key] = value

        async with self._lock:
            self._values = values
            self._loaded = True

        logger.info("Loaded UI preferences", users=len(values), rows=len(rows))

    async def get(self, user_id: str, key: str) -> Any:
        """Stored value, or the key's default."""
        if key not in DEFAULTS:
            raise InvalidPreferenceError(f"Unknown preference '{key}'")
        async with self._lock:
            value = self._values.get(user_id, {}).get(key, DEFAULTS[key])
        return copy.deepcopy(value)

    async def get_all(self, user_id: str) -> dict[str, Any]:
        """Every known preference of a user, defaults filled in."""
        async with self._lock:
            stored = dict(self._values.get(user_id, {}))
        return copy.deepcopy({**DEFAULTS, **stored})

    async def set(self, user_id: str, key: str, value: Any) -> Any:
        """Validate, persist, then update memory."""
        validate_preference(key, value)

        async with self._session_factory() as session:
            await session.merge(UiPreference(user_id=user_id, key=key, value=value))

        async with self._lock:
            self._values.setdefault(user_id, {})[key] = copy.deepcopy(value)

        logger.info("Preference saved", user_id=user_id, key=key)
        return value


# Global singleton instance
_preference_store: PreferenceStore | None = None


def get_preference_store() -> PreferenceStore:
    """Get or create the global preference store singleton."""
    global _preference_store

    if _preference_store is None:
        _preference_store = PreferenceStore()
        logger.info("Created global PreferenceStore singleton")

    return _preference_store
