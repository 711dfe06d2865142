"""Per-resource-type permission caches.

There is one :class:`ProjectContextCache` and one :class:`TeamContextCache`
per process, built by the composition root and shared by every checker of
the matching type.  Each owns its key format ``"{user_id}:{resource_id}"``
and the scoped invalidation operations.

User-wide and resource-wide invalidation use substring matching on
``"{user_id}:"`` and ``":{resource_id}"``.  Substring matching can only
remove *more* entries than strictly needed, never fewer.
"""
from __future__ import annotations

import logging

from taskboard_permissions.cache.store import PermissionCache
from taskboard_permissions.context.models import (
    ProjectPermissionContext,
    TeamPermissionContext,
)

logger = logging.getLogger(__name__)


def cache_key(user_id: str, resource_id: str) -> str:
    """Return the cache key for a ``(user, resource)`` pair."""
    return f"{user_id}:{resource_id}"


class ProjectContextCache(PermissionCache[ProjectPermissionContext]):
    """Cache of :class:`ProjectPermissionContext` values."""

    def invalidate_user(self, user_id: str, project_id: str | None = None) -> None:
        """Drop one user's contexts, for a single project or for all of them."""
        if project_id is not None:
            self.invalidate(cache_key(user_id, project_id))
            return
        removed = self.invalidate_pattern(f"{user_id}:")
        logger.debug("Project cache: invalidated user=%s (%d entries)", user_id, removed)

    def invalidate_project(self, project_id: str) -> None:
        """Drop every user's context for ``project_id``."""
        removed = self.invalidate_pattern(f":{project_id}")
        logger.debug("Project cache: invalidated project=%s (%d entries)", project_id, removed)


class TeamContextCache(PermissionCache[TeamPermissionContext]):
    """Cache of :class:`TeamPermissionContext` values."""

    def invalidate_user(self, user_id: str, team_id: str | None = None) -> None:
        """Drop one user's contexts, for a single team or for all of them."""
        if team_id is not None:
            self.invalidate(cache_key(user_id, team_id))
            return
        removed = self.invalidate_pattern(f"{user_id}:")
        logger.debug("Team cache: invalidated user=%s (%d entries)", user_id, removed)

    def invalidate_team(self, team_id: str) -> None:
        """Drop every user's context for ``team_id``."""
        removed = self.invalidate_pattern(f":{team_id}")
        logger.debug("Team cache: invalidated team=%s (%d entries)", team_id, removed)
