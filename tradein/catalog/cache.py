"""
Trade-In Client — Reference Data Cache

In-memory TTL cache for idempotent catalog lookups (sets, languages).
Keys are the full request, facet parameters included, so switching game
never serves another game's sets. Not persisted across restarts.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Mapping

import structlog

from tradein.config import settings

logger = structlog.get_logger(__name__)


def request_key(path: str, params: Mapping[str, Any] | None = None) -> str:
    """Stable cache key for a GET request."""
    if not params:
        return path
    query = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] is not None)
    return f"{path}?{query}"


class TTLCache:
    """Expiring key/value cache. Expired entries are evicted lazily on read."""

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.CACHE_TTL_SECONDS
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            logger.debug("catalog_cache_expired", key=key)
            return None

        logger.debug("catalog_cache_hit", key=key)
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self._clock() + self._ttl, value)

    def invalidate(self) -> None:
        """Drop everything (user-initiated refresh or game switch)."""
        count = len(self._entries)
        self._entries.clear()
        logger.info("catalog_cache_invalidated", entries=count)
