"""Shared fixtures: a controllable clock and a call-counting repository."""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone

import pytest

from taskboard_permissions.context.models import (
    ProjectRecord,
    TeamMembershipRecord,
    TeamRecord,
)
from taskboard_permissions.engine import PermissionEngine
from taskboard_permissions.roles.enums import ProjectTeamRole, TeamRole
from taskboard_permissions.storage.memory import InMemoryRepository


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class CountingRepository(InMemoryRepository):
    """InMemoryRepository that counts every read."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: Counter[str] = Counter()

    def find_project_by_id(self, project_id: str) -> ProjectRecord | None:
        self.calls["find_project_by_id"] += 1
        return super().find_project_by_id(project_id)

    def find_team_by_id(self, team_id: str) -> TeamRecord | None:
        self.calls["find_team_by_id"] += 1
        return super().find_team_by_id(team_id)

    def find_team_memberships_for_user(self, user_id: str) -> list[TeamMembershipRecord]:
        self.calls["find_team_memberships_for_user"] += 1
        return super().find_team_memberships_for_user(user_id)

    def find_user_team_membership(
        self, team_id: str, user_id: str
    ) -> TeamMembershipRecord | None:
        self.calls["find_user_team_membership"] += 1
        return super().find_user_team_membership(team_id, user_id)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def repo() -> CountingRepository:
    """Board owned by alice; bob is an editor through team 'design'.

    - team ``design`` (creator alice): bob=member, carol=admin
    - team ``qa`` (creator dave): carol=viewer
    - project ``board`` (owner alice): design=editor, qa=viewer
    - project ``ops`` (owner dave): no grants
    """
    repository = CountingRepository()
    repository.add_team("design", creator_id="alice")
    repository.add_team("qa", creator_id="dave")
    repository.add_team_member("design", "bob", TeamRole.MEMBER)
    repository.add_team_member("design", "carol", TeamRole.ADMIN)
    repository.add_team_member("qa", "carol", TeamRole.VIEWER)
    repository.add_project("board", owner_id="alice")
    repository.add_project("ops", owner_id="dave")
    repository.grant_project_access("board", "design", ProjectTeamRole.EDITOR)
    repository.grant_project_access("board", "qa", ProjectTeamRole.VIEWER)
    repository.calls.clear()
    return repository


@pytest.fixture()
def engine(repo: CountingRepository, clock: FakeClock) -> PermissionEngine:
    permission_engine = PermissionEngine(repo, clock=clock)
    repo.attach(permission_engine.invalidation)
    return permission_engine
