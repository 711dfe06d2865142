"""Roles, permissions and the static grant tables that connect them."""
from __future__ import annotations

from taskboard_permissions.roles.enums import (
    ProjectPermission,
    ProjectTeamRole,
    TeamPermission,
    TeamRole,
)
from taskboard_permissions.roles.table import (
    PROJECT_ROLE_PERMISSIONS,
    TEAM_ROLE_PERMISSIONS,
    max_project_role,
    permissions_for,
    role_includes,
)

__all__ = [
    "PROJECT_ROLE_PERMISSIONS",
    "ProjectPermission",
    "ProjectTeamRole",
    "TEAM_ROLE_PERMISSIONS",
    "TeamPermission",
    "TeamRole",
    "max_project_role",
    "permissions_for",
    "role_includes",
]
