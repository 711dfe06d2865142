"""Analytics access derived from project permissions.

Analytics has no permissions of its own.  Every flag is computed from a
:class:`ProjectPermissions` summary, so it follows role and ownership
changes through the same cache and invalidation path.

Example
-------
::

    perms = checker.get_all_permissions()
    analytics = AnalyticsPermissions.from_project(perms)
    if not analytics.can_view_basic_metrics:
        ...  # 403
    payload = filter_analytics_data(raw_payload, analytics)
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from taskboard_permissions.checkers.project import ProjectPermissions

_UNASSIGNED = "Unassigned"


@dataclass(frozen=True)
class AnalyticsPermissions:
    """What a user may see on a project's analytics page."""

    can_view_basic_metrics: bool
    can_view_team_performance: bool
    can_view_detailed_analytics: bool
    can_export_data: bool

    @classmethod
    def from_project(cls, permissions: ProjectPermissions) -> AnalyticsPermissions:
        return cls(
            can_view_basic_metrics=permissions.can_view_project,
            can_view_team_performance=(
                permissions.can_view_project and permissions.can_manage_teams
            ),
            can_view_detailed_analytics=(
                permissions.can_edit_project or permissions.can_manage_teams
            ),
            can_export_data=permissions.can_edit_project,
        )

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


def filter_analytics_data(
    data: dict[str, Any], permissions: AnalyticsPermissions
) -> dict[str, Any]:
    """Return a copy of ``data`` with metrics the user may not see removed.

    Without detailed analytics, per-person productivity is dropped and
    assignee names are anonymised.  Without team performance, every
    team-related breakdown is dropped.  The input is not modified.
    """
    filtered = dict(data)

    if not permissions.can_view_detailed_analytics:
        filtered["team_productivity"] = []
        if filtered.get("cards_by_assignee"):
            filtered["cards_by_assignee"] = [
                {
                    **row,
                    "assignee_name": (
                        _UNASSIGNED
                        if row.get("assignee_name") == _UNASSIGNED
                        else "Team Member"
                    ),
                }
                for row in filtered["cards_by_assignee"]
            ]

    if not permissions.can_view_team_performance:
        filtered["cards_by_assignee"] = []
        filtered["team_productivity"] = []

    return filtered
