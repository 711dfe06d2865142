"""Permission contexts, the storage contract, and the uncached loader."""
from __future__ import annotations

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

__all__ = [
    "ContextLoader",
    "PermissionRepository",
    "ProjectMembership",
    "ProjectPermissionContext",
    "ProjectRecord",
    "TeamGrant",
    "TeamMembershipRecord",
    "TeamPermissionContext",
    "TeamRecord",
]
