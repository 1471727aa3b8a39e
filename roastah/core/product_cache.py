"""In-memory product cache shared by the edit view and the list view.

Entries are scoped per seller session. A single counter orders every write.
A fetch records the counter before it is sent; if the product (or list) is
written or invalidated while that fetch is in flight, its result is dropped.
Write markers are kept only for keys with fetches in flight, and expired
entries are swept, so memory is bounded by live sessions. Mutation results
are written only after the catalog confirmed them.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import cast

from roastah.config import settings
from roastah.infra.logging import get_logger
from roastah.schemas.product import ProductRecord

logger = get_logger(__name__)

CacheKey = tuple[str, int | None]


@dataclass(frozen=True)
class FetchToken:
    """Write counter snapshot taken when a fetch is issued."""

    scope: str
    key: int | None
    generation: int


@dataclass
class _Entry:
    value: ProductRecord | list[ProductRecord]
    stored_at: float


class ProductCache:
    """Per-seller cache of product records and product lists.

    Safe for concurrent use from the event loop; last write wins.
    """

    # Key used for the list entry of a scope
    _LIST = None

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime (defaults to settings)
            clock: Monotonic time source
        """
        self._clock = clock
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.product_cache_ttl_seconds
        self._entries: dict[CacheKey, _Entry] = {}
        self._generation = 0
        # Fetches in flight per key, and the last write to each such key
        self._in_flight: dict[CacheKey, int] = {}
        self._written: dict[CacheKey, int] = {}
        self._last_sweep = clock()
        self._lock = asyncio.Lock()

    async def get(self, scope: str, product_id: int) -> ProductRecord | None:
        """Cached product, or None when missing or expired."""
        async with self._lock:
            value = self._get_fresh((scope, product_id))
        if value is None:
            logger.debug("Product cache miss", product_id=product_id)
            return None
        return cast(ProductRecord, value)

    async def get_list(self, scope: str) -> list[ProductRecord] | None:
        """Cached product list of the seller, or None when missing or expired."""
        async with self._lock:
            value = self._get_fresh((scope, self._LIST))
        if value is None:
            return None
        return list(cast(list[ProductRecord], value))

    async def begin_fetch(self, scope: str, product_id: int | None = None) -> FetchToken:
        """Register a fetch of a product (or of the list when ``product_id`` is None).

        Every token must be handed back through ``store``, ``store_list``
        or ``abandon``.
        """
        key = (scope, product_id)
        async with self._lock:
            self._in_flight[key] = self._in_flight.get(key, 0) + 1
            generation = self._generation
        return FetchToken(scope=scope, key=product_id, generation=generation)

    async def store(self, token: FetchToken, record: ProductRecord) -> bool:
        """Store a fetched product unless a newer write happened meanwhile.

        Returns:
            True if stored, False if the response was stale and dropped
        """
        return await self._store_if_current(token, record)

    async def store_list(self, token: FetchToken, records: list[ProductRecord]) -> bool:
        """Store a fetched product list unless it went stale."""
        return await self._store_if_current(token, list(records))

    async def abandon(self, token: FetchToken) -> None:
        """Release the token of a fetch that failed."""
        async with self._lock:
            self._finish_fetch((token.scope, token.key))

    async def apply_confirmed(self, scope: str, record: ProductRecord) -> None:
        """Write a record the catalog returned from a successful mutation.

        In-flight fetches of the product are dropped, and the seller's list
        is invalidated.
        """
        key = (scope, record.id)
        async with self._lock:
            generation = self._next_generation()
            self._mark_written(key, generation)
            self._entries[key] = _Entry(value=record, stored_at=self._clock())
            self._invalidate_list(scope, generation)
            self._sweep_expired()

        logger.debug(
            "Applied confirmed product",
            product_id=record.id,
            state=record.state.value,
        )

    async def invalidate(self, scope: str, product_id: int) -> None:
        """Forget a product and the seller's list so both are refetched."""
        key = (scope, product_id)
        async with self._lock:
            generation = self._next_generation()
            self._mark_written(key, generation)
            self._entries.pop(key, None)
            self._invalidate_list(scope, generation)

        logger.debug("Invalidated product", product_id=product_id)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
            self._in_flight.clear()
            self._written.clear()

    async def _store_if_current(
        self,
        token: FetchToken,
        value: ProductRecord | list[ProductRecord],
    ) -> bool:
        key = (token.scope, token.key)
        async with self._lock:
            written = self._written.get(key, 0)
            self._finish_fetch(key)
            if written > token.generation:
                logger.info(
                    "Dropped stale catalog response",
                    product_id=token.key,
                    fetched_generation=token.generation,
                    written_generation=written,
                )
                return False
            self._entries[key] = _Entry(value=value, stored_at=self._clock())
            self._sweep_expired()
        return True

    def _get_fresh(self, key: CacheKey) -> ProductRecord | list[ProductRecord] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            return None
        return entry.value

    def _is_expired(self, entry: _Entry, now: float) -> bool:
        return now - entry.stored_at > self._ttl

    def _sweep_expired(self) -> None:
        """Drop expired entries, at most once per TTL."""
        now = self._clock()
        if now - self._last_sweep < self._ttl:
            return
        self._last_sweep = now
        expired = [k for k, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Swept expired cache entries", count=len(expired))

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _mark_written(self, key: CacheKey, generation: int) -> None:
        # Only fetches already in flight can be overtaken by this write
        if key in self._in_flight:
            self._written[key] = generation

    def _finish_fetch(self, key: CacheKey) -> None:
        remaining = self._in_flight.get(key, 0) - 1
        if remaining > 0:
            self._in_flight[key] = remaining
        else:
            self._in_flight.pop(key, None)
            self._written.pop(key, None)

    def _invalidate_list(self, scope: str, generation: int) -> None:
        list_key = (scope, self._LIST)
        self._mark_written(list_key, generation)
        self._entries.pop(list_key, None)


# Global singleton instance
_product_cache: ProductCache | None = None


def get_product_cache() -> ProductCache:
    """Get or create the global product cache singleton."""
    global _product_cache

    if _product_cache is None:
        _product_cache = ProductCache()
        logger.info("Created global ProductCache singleton")

    return _product_cache
