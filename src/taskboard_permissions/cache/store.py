"""Thread-safe expiring, size-bounded key/value store.

PermissionCache keeps resolved permission contexts in memory for a bounded
time.  Entries expire lazily: a stale entry is only removed when it is read.
When the store is full, the least recently accessed quarter of the entries
is evicted before the next insert.

A single :class:`threading.Lock` guards the internal map, so concurrent
``get``/``set``/``invalidate*`` calls never observe a torn entry.

Example
-------
>>> cache: PermissionCache[str] = PermissionCache()
>>> cache.set("user-1:project-9", "context")
>>> cache.get("user-1:project-9")
'context'
>>> cache.invalidate_pattern("user-1")
1
>>> cache.get("user-1:project-9") is None
True
"""
from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

CACHE_TTL: timedelta = timedelta(minutes=5)
MAX_CACHE_SIZE: int = 1000
EVICTION_FRACTION: float = 0.25

T = TypeVar("T")


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class CacheEntry(Generic[T]):
    """A single stored value and its access bookkeeping.

    Attributes
    ----------
    key:
        The cache key (``"{user_id}:{resource_id}"`` for permission caches).
    data:
        The cached value.
    stored_at:
        UTC datetime when the value was written.
    access_count:
        Number of times the value was written or read while live.
    last_accessed_at:
        UTC datetime of the most recent write or live read.
    """

    key: str
    data: T
    stored_at: datetime
    access_count: int = 1
    last_accessed_at: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class CacheEntryStats:
    """Diagnostic snapshot of one entry."""

    key: str
    age_seconds: float
    access_count: int
    last_accessed_at: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "key": self.key,
            "age_seconds": self.age_seconds,
            "access_count": self.access_count,
            "last_accessed_at": self.last_accessed_at.isoformat(),
        }


@dataclass(frozen=True)
class CacheStats:
    """Diagnostic snapshot of a whole cache."""

    size: int
    max_size: int
    ttl_seconds: float
    entries: tuple[CacheEntryStats, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "size": self.size,
            "max_size": self.max_size,
            "ttl_seconds": self.ttl_seconds,
            "entries": [e.to_dict() for e in self.entries],
        }


class PermissionCache(Generic[T]):
    """Expiring, size-bounded, thread-safe key/value store.

    Parameters
    ----------
    ttl:
        Maximum age of an entry before it is treated as stale on read.
    max_size:
        Entry count at which the next ``set`` triggers eviction.
    eviction_fraction:
        Share of entries removed per eviction (at least one entry).
    clock:
        Callable returning the current UTC datetime.  Override in tests.
    """

    def __init__(
        self,
        ttl: timedelta = CACHE_TTL,
        max_size: int = MAX_CACHE_SIZE,
        eviction_fraction: float = EVICTION_FRACTION,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1; got {max_size}.")
        if not 0 < eviction_fraction <= 1:
            raise ValueError(
                f"eviction_fraction must be in (0, 1]; got {eviction_fraction}."
            )
        self._ttl = ttl
        self._max_size = max_size
        self._eviction_fraction = eviction_fraction
        self._clock = clock or _utc_now
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Write API
    # ------------------------------------------------------------------

    def set(self, key: str, value: T) -> None:
        """Insert or overwrite ``key``, evicting first when the store is full."""
        with self._lock:
            if len(self._entries) >= self._max_size:
                self._evict_locked()
            now = self._clock()
            self._entries[key] = CacheEntry(
                key=key,
                data=value,
                stored_at=now,
                access_count=1,
                last_accessed_at=now,
            )

    def invalidate(self, key: str) -> None:
        """Remove ``key``.  Absent keys are ignored."""
        with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            logger.debug("Invalidated cache key %r", key)

    def invalidate_pattern(self, pattern: str) -> int:
        """Remove every entry whose key contains ``pattern``.

        Returns
        -------
        int
            Number of entries removed.
        """
        with self._lock:
            doomed = [k for k in self._entries if pattern in k]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug(
                "Invalidated %d cache entries matching %r", len(doomed), pattern
            )
        return len(doomed)

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def get(self, key: str) -> T | None:
        """Return the live value for ``key`` or ``None``.

        A stale entry is deleted on the way out.  A live hit bumps the
        entry's access count and last-access time.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            now = self._clock()
            if now - entry.stored_at > self._ttl:
                del self._entries[key]
                logger.debug("Cache entry %r expired", key)
                return None
            entry.access_count += 1
            entry.last_accessed_at = now
            return entry.data

    def get_stats(self) -> CacheStats:
        """Return a snapshot of the store for monitoring."""
        with self._lock:
            now = self._clock()
            entries = tuple(
                CacheEntryStats(
                    key=e.key,
                    age_seconds=(now - e.stored_at).total_seconds(),
                    access_count=e.access_count,
                    last_accessed_at=e.last_accessed_at,
                )
                for e in self._entries.values()
            )
        return CacheStats(
            size=len(entries),
            max_size=self._max_size,
            ttl_seconds=self._ttl.total_seconds(),
            entries=entries,
        )

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        return self.size

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Current number of entries, live or stale."""
        with self._lock:
            return len(self._entries)

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _evict_locked(self) -> None:
        """Drop the least recently accessed entries.  Caller holds the lock."""
        size = len(self._entries)
        if size == 0:
            return
        count = max(1, math.floor(size * self._eviction_fraction))
        # sorted() is stable, so ties keep insertion order.
        oldest = sorted(self._entries.values(), key=lambda e: e.last_accessed_at)
        for entry in oldest[:count]:
            del self._entries[entry.key]
        logger.warning(
            "Permission cache at capacity (%d/%d); evicted %d least recently used entries",
            size,
            self._max_size,
            count,
        )
