"""Per-request permission checkers for projects and teams."""
from __future__ import annotations

from taskboard_permissions.checkers.analytics import AnalyticsPermissions, filter_analytics_data
from taskboard_permissions.checkers.project import ProjectPermissionChecker, ProjectPermissions
from taskboard_permissions.checkers.team import TeamPermissionChecker, TeamPermissions

__all__ = [
    "AnalyticsPermissions",
    "ProjectPermissionChecker",
    "ProjectPermissions",
    "TeamPermissionChecker",
    "TeamPermissions",
    "filter_analytics_data",
]
