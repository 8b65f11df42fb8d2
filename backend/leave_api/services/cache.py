"""Cache for derived report aggregates, keyed ``<kind>:<company_id>:<year>``.

Lifecycle transitions evict entries; readers recompute and repopulate on a
miss. Eviction happens after the write commits and is not transactional
with it: an entry that fails to evict stays stale until its TTL expires.
"""

from __future__ import annotations

import enum
import logging
import time
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable

    from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class AggregateKind(enum.StrEnum):
    """Report aggregates that depend on leave counts."""

    MONTHLY_TRENDS = "monthly_trends"
    DASHBOARD = "dashboard"


def cache_key(kind: AggregateKind, company_id: uuid.UUID, year: int) -> str:
    return f"{kind.value}:{company_id}:{year}"


def aggregate_cache_keys(company_id: uuid.UUID, *years: int) -> list[str]:
    """Every aggregate key for ``company_id`` across the distinct ``years``."""
    return [cache_key(kind, company_id, year) for year in dict.fromkeys(years) for kind in AggregateKind]


@runtime_checkable
class Cache(Protocol):
    """Interface for the aggregate cache."""

    async def get(self, key: str) -> str | None:
        """Return the cached value, or None on a miss."""
        ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store ``value`` for ``ttl_seconds``."""
        ...

    async def evict(self, key: str) -> None:
        """Remove ``key``. Evicting a missing key is a no-op."""
        ...


class InMemoryCache:
    """In-process implementation for development and tests."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, float]] = {}
        self.evicted: list[str] = []

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= time.monotonic():
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = (value, time.monotonic() + ttl_seconds)

    async def evict(self, key: str) -> None:
        self._entries.pop(key, None)
        self.evicted.append(key)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


class RedisCache:
    """Redis-backed cache shared by every API process."""

    def __init__(self, client: Redis) -> None:
        self._client = client

    async def get(self, key: str) -> str | None:
        value = await self._client.get(key)
        if value is None:
            return None
        return value if isinstance(value, str) else value.decode()

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._client.set(key, value, ex=ttl_seconds)

    async def evict(self, key: str) -> None:
        await self._client.delete(key)


async def evict_keys(cache: Cache, keys: Iterable[str]) -> list[str]:
    """Evict each key unconditionally. Returns the keys that failed to evict."""
    failed: list[str] = []
    for key in keys:
        try:
            await cache.evict(key)
        except Exception:
            logger.exception("Cache eviction failed for %s; entry stays until TTL expiry", key)
            failed.append(key)
    return failed


_cache: Cache = InMemoryCache()


def get_cache() -> Cache:
    return _cache


def set_cache(cache: Cache) -> None:
    """Override the cache (for testing or production wiring)."""
    global _cache
    _cache = cache
