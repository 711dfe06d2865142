"""Tests for ContextLoader."""
from __future__ import annotations

import pytest

from conftest import CountingRepository, FakeClock
from taskboard_permissions.context.loader import ContextLoader
from taskboard_permissions.context.models import (
    ProjectMembership,
    ProjectRecord,
    TeamGrant,
    TeamMembershipRecord,
)
from taskboard_permissions.errors import NotFoundError, StorageError
from taskboard_permissions.roles.enums import ProjectTeamRole, TeamRole


class BrokenRepository:
    """Repository whose every call fails like a dropped connection."""

    def find_project_by_id(self, project_id: str) -> ProjectRecord | None:
        raise ConnectionError("database unavailable")

    def find_team_by_id(self, team_id: str) -> None:
        raise TimeoutError("query timed out")

    def find_team_memberships_for_user(self, user_id: str) -> list[TeamMembershipRecord]:
        raise ConnectionError("database unavailable")

    def find_user_team_membership(self, team_id: str, user_id: str) -> None:
        raise ConnectionError("database unavailable")


class DuplicateGrantRepository(BrokenRepository):
    def find_project_by_id(self, project_id: str) -> ProjectRecord | None:
        return ProjectRecord(
            id=project_id,
            owner_id="someone",
            team_grants=(
                TeamGrant("t1", ProjectTeamRole.VIEWER),
                TeamGrant("t1", ProjectTeamRole.ADMIN),
            ),
        )

    def find_team_memberships_for_user(self, user_id: str) -> list[TeamMembershipRecord]:
        return [TeamMembershipRecord("t1", user_id, TeamRole.MEMBER)]


@pytest.fixture()
def loader(repo: CountingRepository, clock: FakeClock) -> ContextLoader:
    return ContextLoader(repo, clock=clock)


class TestLoadProjectContext:
    def test_owner_flag(self, loader: ContextLoader) -> None:
        context = loader.load_project_context("alice", "board")
        assert context.is_project_owner is True
        assert context.team_memberships == ()

    def test_memberships_intersect_user_teams_and_grants(self, loader: ContextLoader) -> None:
        context = loader.load_project_context("carol", "board")
        assert context.is_project_owner is False
        assert set(context.team_memberships) == {
            ProjectMembership("design", ProjectTeamRole.EDITOR, TeamRole.ADMIN),
            ProjectMembership("qa", ProjectTeamRole.VIEWER, TeamRole.VIEWER),
        }

    def test_team_without_grant_is_excluded(self, loader: ContextLoader) -> None:
        context = loader.load_project_context("bob", "ops")
        assert context.team_memberships == ()
        assert context.has_access is False

    def test_stranger_has_no_access(self, loader: ContextLoader) -> None:
        context = loader.load_project_context("mallory", "board")
        assert context.has_access is False

    def test_resolved_at_stamped(self, loader: ContextLoader, clock: FakeClock) -> None:
        assert loader.load_project_context("bob", "board").resolved_at == clock.now

    def test_missing_project_raises_not_found(self, loader: ContextLoader) -> None:
        with pytest.raises(NotFoundError, match="Project not found") as exc_info:
            loader.load_project_context("bob", "nope")
        assert exc_info.value.resource_type == "project"
        assert exc_info.value.resource_id == "nope"

    def test_one_entry_per_team(self) -> None:
        loader = ContextLoader(DuplicateGrantRepository())
        context = loader.load_project_context("u", "p")
        assert len(context.team_memberships) == 1
        assert context.team_memberships[0].project_role is ProjectTeamRole.ADMIN

    def test_storage_failure_wrapped(self) -> None:
        loader = ContextLoader(BrokenRepository())
        with pytest.raises(StorageError) as exc_info:
            loader.load_project_context("u", "p")
        assert exc_info.value.operation == "find_project_by_id"
        assert isinstance(exc_info.value.__cause__, ConnectionError)


class TestLoadTeamContext:
    def test_creator(self, loader: ContextLoader) -> None:
        context = loader.load_team_context("alice", "design")
        assert context.is_team_creator is True
        assert context.user_role is None

    def test_member_role(self, loader: ContextLoader) -> None:
        context = loader.load_team_context("carol", "design")
        assert context.user_role is TeamRole.ADMIN
        assert context.is_team_creator is False

    def test_non_member(self, loader: ContextLoader) -> None:
        context = loader.load_team_context("bob", "qa")
        assert context.user_role is None
        assert context.has_access is False

    def test_missing_team_raises_not_found(self, loader: ContextLoader) -> None:
        with pytest.raises(NotFoundError, match="Team not found"):
            loader.load_team_context("bob", "ghosts")

    def test_storage_failure_wrapped(self) -> None:
        loader = ContextLoader(BrokenRepository())
        with pytest.raises(StorageError, match="find_team_by_id"):
            loader.load_team_context("u", "t")
