"""Boundary contract with the persistence collaborator."""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from taskboard_permissions.context.models import (
    ProjectRecord,
    TeamMembershipRecord,
    TeamRecord,
)


@runtime_checkable
class PermissionRepository(Protocol):
    """Read operations the context loader needs from storage.

    Implementations return ``None`` for a missing row and raise for any
    other failure; the loader turns those failures into
    :class:`~taskboard_permissions.errors.StorageError`.
    """

    def find_project_by_id(self, project_id: str) -> ProjectRecord | None: ...

    def find_team_by_id(self, team_id: str) -> TeamRecord | None: ...

    def find_team_memberships_for_user(
        self, user_id: str
    ) -> list[TeamMembershipRecord]: ...

    def find_user_team_membership(
        self, team_id: str, user_id: str
    ) -> TeamMembershipRecord | None: ...
