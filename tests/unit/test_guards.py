"""Tests for the require_* and resolve_* call-site helpers."""
from __future__ import annotations

import pytest

from conftest import FakeClock
from taskboard_permissions.cache.scoped import ProjectContextCache, TeamContextCache
from taskboard_permissions.checkers.project import ProjectPermissionChecker
from taskboard_permissions.checkers.team import TeamPermissionChecker
from taskboard_permissions.context.loader import ContextLoader
from taskboard_permissions.engine import PermissionEngine
from taskboard_permissions.errors import NotFoundError, PermissionDeniedError, StorageError
from taskboard_permissions.guards import (
    ProjectAccess,
    TeamAccess,
    require_project_permission,
    require_team_permission,
    resolve_project_access,
    resolve_team_access,
)
from taskboard_permissions.roles.enums import (
    ProjectPermission,
    ProjectTeamRole,
    TeamPermission,
    TeamRole,
)


class _DownRepository:
    def find_project_by_id(self, project_id: str) -> None:
        raise OSError("disk on fire")

    def find_team_by_id(self, team_id: str) -> None:
        raise OSError("disk on fire")

    def find_team_memberships_for_user(self, user_id: str) -> list[object]:
        raise OSError("disk on fire")

    def find_user_team_membership(self, team_id: str, user_id: str) -> None:
        raise OSError("disk on fire")


@pytest.fixture()
def down_loader(clock: FakeClock) -> ContextLoader:
    return ContextLoader(_DownRepository(), clock=clock)


class TestRequireProjectPermission:
    def test_allowed_returns_loaded_checker(self, engine: PermissionEngine) -> None:
        checker = require_project_permission(
            engine.project_checker(), "bob", "board", ProjectPermission.CARD_CREATE
        )
        assert checker.context.user_id == "bob"

    def test_denied_raises(self, engine: PermissionEngine) -> None:
        with pytest.raises(PermissionDeniedError) as exc_info:
            require_project_permission(
                engine.project_checker(), "bob", "board", ProjectPermission.PROJECT_DELETE
            )
        assert exc_info.value.permission == "project:delete"
        assert exc_info.value.resource_id == "board"

    def test_not_found_propagates(self, engine: PermissionEngine) -> None:
        with pytest.raises(NotFoundError):
            require_project_permission(
                engine.project_checker(), "bob", "nope", ProjectPermission.PROJECT_VIEW
            )

    def test_storage_error_propagates(self, down_loader: ContextLoader) -> None:
        checker = ProjectPermissionChecker(ProjectContextCache(), down_loader)
        with pytest.raises(StorageError):
            require_project_permission(checker, "u", "p", ProjectPermission.PROJECT_VIEW)


class TestRequireTeamPermission:
    def test_allowed(self, engine: PermissionEngine) -> None:
        require_team_permission(
            engine.team_checker(), "carol", "design", TeamPermission.TEAM_REMOVE_MEMBERS
        )

    def test_denied(self, engine: PermissionEngine) -> None:
        with pytest.raises(PermissionDeniedError, match="team:delete"):
            require_team_permission(
                engine.team_checker(), "carol", "design", TeamPermission.TEAM_DELETE
            )


class TestResolveProjectAccess:
    def test_editor_summary(self, engine: PermissionEngine) -> None:
        access = resolve_project_access(engine.project_checker(), "carol", "board")
        assert access.role is ProjectTeamRole.EDITOR
        assert access.has_access is True
        assert access.is_project_owner is False
        assert access.team_memberships == 2
        assert access.permissions.can_create_cards is True

    def test_owner_summary(self, engine: PermissionEngine) -> None:
        access = resolve_project_access(engine.project_checker(), "alice", "board")
        assert access.role is ProjectTeamRole.ADMIN
        assert access.is_project_owner is True
        assert access.permissions.can_delete_project is True

    def test_not_found_fails_closed(self, engine: PermissionEngine) -> None:
        assert resolve_project_access(engine.project_checker(), "bob", "nope") == (
            ProjectAccess.denied()
        )

    def test_storage_error_fails_closed(self, down_loader: ContextLoader) -> None:
        checker = ProjectPermissionChecker(ProjectContextCache(), down_loader)
        access = resolve_project_access(checker, "u", "p")
        assert access.has_access is False
        assert not any(access.permissions.to_dict().values())


class TestResolveTeamAccess:
    def test_member_summary(self, engine: PermissionEngine) -> None:
        access = resolve_team_access(engine.team_checker(), "bob", "design")
        assert access.role is TeamRole.MEMBER
        assert access.has_access is True
        assert access.permissions.can_leave_team is True

    def test_non_member(self, engine: PermissionEngine) -> None:
        access = resolve_team_access(engine.team_checker(), "bob", "qa")
        assert access.has_access is False
        assert access.role is None

    def test_storage_error_fails_closed(self, down_loader: ContextLoader) -> None:
        checker = TeamPermissionChecker(TeamContextCache(), down_loader)
        assert resolve_team_access(checker, "u", "t") == TeamAccess.denied()
