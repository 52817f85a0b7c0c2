"""
In-process TTL cache for upstream Webflow responses.

Entries expire lazily: an expired entry is only removed when it is read,
so ``get_stats`` may still list keys whose TTL has elapsed.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from shared.errors import ValidationError
from shared.logging import get_logger


class CacheTTL:
    """TTL presets in milliseconds."""

    SHORT = 2 * 60 * 1000       # frequently changing data
    MEDIUM = 5 * 60 * 1000      # semi-static data
    LONG = 15 * 60 * 1000       # static data
    VERY_LONG = 60 * 60 * 1000  # very static data


def _epoch_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class CacheEntry:
    data: Any
    timestamp: int
    ttl: int

    def is_valid(self, now: int) -> bool:
        return now - self.timestamp <= self.ttl


class TTLCache:
    """Key -> value store with per-entry expiry and regex invalidation."""

    def __init__(self, clock: Optional[Callable[[], int]] = None, metrics=None):
        self._entries: Dict[str, CacheEntry] = {}
        self._clock = clock or _epoch_ms
        self.metrics = metrics
        self.logger = get_logger("webflow.cache")

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self._record(key, hit=False)
            return None

        if not entry.is_valid(self._clock()):
            del self._entries[key]
            self.logger.debug("Expired cache entry purged", cache_key=key, ttl=entry.ttl)
            self._record(key, hit=False)
            return None

        self._record(key, hit=True)
        return entry.data

    def set(self, key: str, data: Any, ttl: int = CacheTTL.MEDIUM) -> None:
        """Store ``data`` under ``key`` for ``ttl`` milliseconds, replacing any previous entry."""
        self._entries[key] = CacheEntry(data=data, timestamp=self._clock(), ttl=ttl)
        self.logger.debug("Cached value", cache_key=key, ttl=ttl)

    def invalidate(self, key: str) -> None:
        """Remove ``key``; absent keys are ignored."""
        if self._entries.pop(key, None) is not None:
            self.logger.debug("Invalidated cache key", cache_key=key)

    def invalidate_pattern(self, pattern: Union[str, re.Pattern]) -> int:
        """Remove every key the regular expression matches anywhere in; returns the count."""
        try:
            regex = re.compile(pattern)
        except re.error as exc:
            raise ValidationError(
                "Invalid cache key pattern",
                details={"pattern": str(pattern), "error": str(exc)},
            )

        matched = [key for key in list(self._entries) if regex.search(key)]
        for key in matched:
            del self._entries[key]

        self.logger.info("Cleared cache pattern", pattern=regex.pattern, keys_count=len(matched))
        return len(matched)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()
        self.logger.info("Cache cleared")

    def get_stats(self) -> Dict[str, Any]:
        keys: List[str] = list(self._entries)
        return {"size": len(keys), "keys": keys}

    def _record(self, key: str, hit: bool) -> None:
        self.logger.debug("Cache operation", operation="get", cache_key=key, cache_hit=hit)
        if self.metrics:
            self.metrics.record_cache_access(key, hit)
