"""Domain-event driven invalidation of the permission caches.

Every code path that writes a role, a membership, or an ownership change
must call the matching ``on_*`` handler as part of the same operation.
Handlers only evict cache entries; they do no storage I/O and calling one
twice has the same effect as calling it once.

Example
-------
>>> from taskboard_permissions.cache.scoped import ProjectContextCache, TeamContextCache
>>> manager = CacheInvalidationManager(ProjectContextCache(), TeamContextCache())
>>> manager.on_user_added_to_team("user-1", "team-1")
>>> manager.get_cache_stats()["projects"].size
0
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from taskboard_permissions.cache.scoped import ProjectContextCache, TeamContextCache
from taskboard_permissions.cache.store import CacheStats
from taskboard_permissions.roles.enums import ProjectTeamRole, TeamRole

logger = logging.getLogger(__name__)


class CacheInvalidationManager:
    """Translates membership, role and ownership events into cache evictions.

    Parameters
    ----------
    project_cache:
        The process-wide project context cache.
    team_cache:
        The process-wide team context cache.
    """

    def __init__(
        self,
        project_cache: ProjectContextCache,
        team_cache: TeamContextCache,
    ) -> None:
        self._project_cache = project_cache
        self._team_cache = team_cache

    # ------------------------------------------------------------------
    # Team events
    # ------------------------------------------------------------------

    def on_user_added_to_team(self, user_id: str, team_id: str) -> None:
        """A user joined a team.  Their project access may have widened."""
        logger.debug("Event user_added_to_team user=%s team=%s", user_id, team_id)
        self._team_cache.invalidate_user(user_id, team_id)
        self._project_cache.invalidate_user(user_id)

    def on_user_removed_from_team(self, user_id: str, team_id: str) -> None:
        """A user left or was removed from a team."""
        logger.debug("Event user_removed_from_team user=%s team=%s", user_id, team_id)
        self._team_cache.invalidate_user(user_id, team_id)
        self._project_cache.invalidate_user(user_id)

    def on_user_team_role_changed(
        self,
        user_id: str,
        team_id: str,
        old_role: TeamRole | None = None,
        new_role: TeamRole | None = None,
    ) -> None:
        """A user's role inside a team changed."""
        logger.debug(
            "Event user_team_role_changed user=%s team=%s %s -> %s",
            user_id,
            team_id,
            old_role.value if old_role else None,
            new_role.value if new_role else None,
        )
        self._team_cache.invalidate_user(user_id, team_id)
        self._project_cache.invalidate_user(user_id)

    def on_team_ownership_transferred(
        self, team_id: str, old_owner_id: str, new_owner_id: str
    ) -> None:
        """Team creator/ownership moved from one user to another."""
        logger.debug(
            "Event team_ownership_transferred team=%s %s -> %s",
            team_id,
            old_owner_id,
            new_owner_id,
        )
        self._team_cache.invalidate_team(team_id)
        self._project_cache.invalidate_user(old_owner_id)
        self._project_cache.invalidate_user(new_owner_id)

    def on_team_deleted(
        self, team_id: str, project_ids: Iterable[str] | None = None
    ) -> None:
        """A team was deleted.

        ``project_ids`` lists the projects the team had been granted; their
        cached contexts are dropped because the grant disappears with the team.
        When it is ``None`` the affected projects are unknown and the whole
        project cache is cleared.
        """
        self._team_cache.invalidate_team(team_id)
        if project_ids is None:
            logger.debug("Event team_deleted team=%s projects=unknown", team_id)
            self._project_cache.clear()
            return
        project_ids = list(project_ids)
        logger.debug("Event team_deleted team=%s projects=%s", team_id, project_ids)
        for project_id in project_ids:
            self._project_cache.invalidate_project(project_id)

    def on_team_settings_changed(self, team_id: str) -> None:
        logger.debug("Event team_settings_changed team=%s", team_id)
        self._team_cache.invalidate_team(team_id)

    # ------------------------------------------------------------------
    # Project events
    # ------------------------------------------------------------------

    def on_team_added_to_project(self, team_id: str, project_id: str) -> None:
        """A team was granted access to a project."""
        logger.debug("Event team_added_to_project team=%s project=%s", team_id, project_id)
        self._project_cache.invalidate_project(project_id)

    def on_team_removed_from_project(self, team_id: str, project_id: str) -> None:
        """A team's access to a project was revoked."""
        logger.debug("Event team_removed_from_project team=%s project=%s", team_id, project_id)
        self._project_cache.invalidate_project(project_id)

    def on_team_project_role_changed(
        self,
        team_id: str,
        project_id: str,
        old_role: ProjectTeamRole | None = None,
        new_role: ProjectTeamRole | None = None,
    ) -> None:
        """The role a team's grant carries on a project changed."""
        logger.debug(
            "Event team_project_role_changed team=%s project=%s %s -> %s",
            team_id,
            project_id,
            old_role.value if old_role else None,
            new_role.value if new_role else None,
        )
        self._project_cache.invalidate_project(project_id)

    def on_user_project_role_changed(
        self,
        user_id: str,
        project_id: str,
        old_role: ProjectTeamRole | None = None,
        new_role: ProjectTeamRole | None = None,
    ) -> None:
        """One user's effective role on a project changed."""
        logger.debug(
            "Event user_project_role_changed user=%s project=%s %s -> %s",
            user_id,
            project_id,
            old_role.value if old_role else None,
            new_role.value if new_role else None,
        )
        self._project_cache.invalidate_user(user_id, project_id)

    def on_project_ownership_transferred(
        self, project_id: str, old_owner_id: str, new_owner_id: str
    ) -> None:
        logger.debug(
            "Event project_ownership_transferred project=%s %s -> %s",
            project_id,
            old_owner_id,
            new_owner_id,
        )
        self._project_cache.invalidate_project(project_id)

    def on_project_deleted(self, project_id: str) -> None:
        logger.debug("Event project_deleted project=%s", project_id)
        self._project_cache.invalidate_project(project_id)

    def on_project_settings_changed(self, project_id: str) -> None:
        logger.debug("Event project_settings_changed project=%s", project_id)
        self._project_cache.invalidate_project(project_id)

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def invalidate_user_caches(self, user_id: str) -> None:
        """Drop everything cached for a user (suspended, deleted, ...)."""
        logger.debug("Event invalidate_user_caches user=%s", user_id)
        self._project_cache.invalidate_user(user_id)
        self._team_cache.invalidate_user(user_id)

    def clear_all_caches(self) -> None:
        """Empty both caches.  Intended for maintenance, not request paths."""
        logger.info("Clearing all permission caches")
        self._project_cache.clear()
        self._team_cache.clear()

    def get_cache_stats(self) -> dict[str, CacheStats]:
        """Return ``{"projects": ..., "teams": ...}`` cache snapshots."""
        return {
            "projects": self._project_cache.get_stats(),
            "teams": self._team_cache.get_stats(),
        }
