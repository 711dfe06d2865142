"""taskboard-permissions: permission resolution and caching for team/project boards.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import taskboard_permissions as tp
>>> repo = tp.InMemoryRepository()
>>> engine = tp.PermissionEngine(repo)
>>> repo.attach(engine.invalidation)
>>> _ = repo.add_team("design", creator_id="alice")
>>> _ = repo.add_project("board", owner_id="alice")
>>> repo.add_team_member("design", "bob", tp.TeamRole.MEMBER)
>>> repo.grant_project_access("board", "design", tp.ProjectTeamRole.EDITOR)
>>> checker = engine.project_checker()
>>> _ = checker.load_context("bob", "board")
>>> checker.can_create_cards(), checker.can_delete_project()
(True, False)
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------
from taskboard_permissions.roles.enums import (
    ProjectPermission,
    ProjectTeamRole,
    TeamPermission,
    TeamRole,
)
from taskboard_permissions.roles.table import max_project_role, permissions_for, role_includes

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from taskboard_permissions.errors import (
    ConfigError,
    ContextNotLoadedError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    TaskboardPermissionError,
)

# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------
from taskboard_permissions.context.loader import ContextLoader
from taskboard_permissions.context.models import (
    ProjectMembership,
    ProjectPermissionContext,
    ProjectRecord,
    TeamGrant,
    TeamMembershipRecord,
    TeamPermissionContext,
    TeamRecord,
)
from taskboard_permissions.context.repository import PermissionRepository

# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------
from taskboard_permissions.cache.store import CacheStats, PermissionCache
from taskboard_permissions.cache.scoped import ProjectContextCache, TeamContextCache
from taskboard_permissions.cache.invalidation import CacheInvalidationManager

# ---------------------------------------------------------------------------
# Checkers, guards and wiring
# ---------------------------------------------------------------------------
from taskboard_permissions.checkers.analytics import AnalyticsPermissions, filter_analytics_data
from taskboard_permissions.checkers.project import ProjectPermissionChecker, ProjectPermissions
from taskboard_permissions.checkers.team import TeamPermissionChecker, TeamPermissions
from taskboard_permissions.guards import (
    ProjectAccess,
    TeamAccess,
    require_project_permission,
    require_team_permission,
    resolve_project_access,
    resolve_team_access,
)
from taskboard_permissions.config import CacheConfig, ConfigLoader, PermissionsConfig
from taskboard_permissions.engine import PermissionEngine
from taskboard_permissions.storage.memory import InMemoryRepository

__all__ = [
    "__version__",
    # Roles
    "ProjectPermission",
    "ProjectTeamRole",
    "TeamPermission",
    "TeamRole",
    "max_project_role",
    "permissions_for",
    "role_includes",
    # Errors
    "ConfigError",
    "ContextNotLoadedError",
    "NotFoundError",
    "PermissionDeniedError",
    "StorageError",
    "TaskboardPermissionError",
    # Context
    "ContextLoader",
    "PermissionRepository",
    "ProjectMembership",
    "ProjectPermissionContext",
    "ProjectRecord",
    "TeamGrant",
    "TeamMembershipRecord",
    "TeamPermissionContext",
    "TeamRecord",
    # Cache
    "CacheInvalidationManager",
    "CacheStats",
    "PermissionCache",
    "ProjectContextCache",
    "TeamContextCache",
    # Checkers and guards
    "AnalyticsPermissions",
    "ProjectAccess",
    "ProjectPermissionChecker",
    "ProjectPermissions",
    "TeamAccess",
    "TeamPermissionChecker",
    "TeamPermissions",
    "require_project_permission",
    "require_team_permission",
    "resolve_project_access",
    "resolve_team_access",
    "filter_analytics_data",
    # Wiring
    "CacheConfig",
    "ConfigLoader",
    "InMemoryRepository",
    "PermissionEngine",
    "PermissionsConfig",
]
