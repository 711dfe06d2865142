"""Composition root for the permission engine.

PermissionEngine builds exactly one project cache, one team cache, one
loader and one invalidation manager, and hands out a fresh checker per
request.  Create one engine per process and share it.

Example
-------
::

    engine = PermissionEngine(repository)
    checker = engine.project_checker()
    checker.load_context(user_id, project_id)
    if not checker.can_create_cards():
        ...  # 403

    # after a role change has been written:
    engine.invalidation.on_team_project_role_changed(team_id, project_id)
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from taskboard_permissions.cache.invalidation import CacheInvalidationManager
from taskboard_permissions.cache.scoped import ProjectContextCache, TeamContextCache
from taskboard_permissions.checkers.project import ProjectPermissionChecker
from taskboard_permissions.checkers.team import TeamPermissionChecker
from taskboard_permissions.config import PermissionsConfig
from taskboard_permissions.context.loader import ContextLoader
from taskboard_permissions.context.repository import PermissionRepository

logger = logging.getLogger(__name__)


class PermissionEngine:
    """Owns the shared caches and wires checkers to them.

    Parameters
    ----------
    repository:
        The persistence collaborator.
    config:
        Cache sizing; defaults apply when omitted.
    clock:
        Callable returning the current UTC datetime, shared by the caches
        and the loader.  Override in tests.
    """

    def __init__(
        self,
        repository: PermissionRepository,
        config: PermissionsConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or PermissionsConfig()
        self._repository = repository
        self.project_cache = ProjectContextCache(
            ttl=self._config.project_cache.ttl,
            max_size=self._config.project_cache.max_size,
            eviction_fraction=self._config.project_cache.eviction_fraction,
            clock=clock,
        )
        self.team_cache = TeamContextCache(
            ttl=self._config.team_cache.ttl,
            max_size=self._config.team_cache.max_size,
            eviction_fraction=self._config.team_cache.eviction_fraction,
            clock=clock,
        )
        self.loader = ContextLoader(repository, clock=clock)
        self.invalidation = CacheInvalidationManager(self.project_cache, self.team_cache)
        logger.debug(
            "Permission engine ready (project ttl=%ss size=%d, team ttl=%ss size=%d)",
            self._config.project_cache.ttl_seconds,
            self._config.project_cache.max_size,
            self._config.team_cache.ttl_seconds,
            self._config.team_cache.max_size,
        )

    def project_checker(self) -> ProjectPermissionChecker:
        """Return a new checker bound to the shared project cache."""
        return ProjectPermissionChecker(self.project_cache, self.loader)

    def team_checker(self) -> TeamPermissionChecker:
        """Return a new checker bound to the shared team cache."""
        return TeamPermissionChecker(self.team_cache, self.loader)

    @property
    def config(self) -> PermissionsConfig:
        return self._config

    @property
    def repository(self) -> PermissionRepository:
        return self._repository
