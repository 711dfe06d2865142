"""Permission context caching and event-driven invalidation."""
from __future__ import annotations

from taskboard_permissions.cache.invalidation import CacheInvalidationManager
from taskboard_permissions.cache.scoped import (
    ProjectContextCache,
    TeamContextCache,
    cache_key,
)
from taskboard_permissions.cache.store import (
    CACHE_TTL,
    EVICTION_FRACTION,
    MAX_CACHE_SIZE,
    CacheEntry,
    CacheEntryStats,
    CacheStats,
    PermissionCache,
)

__all__ = [
    "CACHE_TTL",
    "EVICTION_FRACTION",
    "MAX_CACHE_SIZE",
    "CacheEntry",
    "CacheEntryStats",
    "CacheInvalidationManager",
    "CacheStats",
    "PermissionCache",
    "ProjectContextCache",
    "TeamContextCache",
    "cache_key",
]
