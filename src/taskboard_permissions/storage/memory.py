"""Thread-safe in-memory implementation of :class:`PermissionRepository`.

Besides the four read operations the loader needs, InMemoryRepository
offers the writes that change roles, memberships and ownership.  Each
write calls exactly one :class:`CacheInvalidationManager` handler when a
manager is attached, so the caches never outlive the facts they were
built from.

Fixtures can be loaded from a plain dict or a YAML file::

    projects:
      - id: board
        owner: alice
        teams:
          - team: design
            role: editor
    teams:
      - id: design
        creator: alice
        members:
          - user: bob
            role: member
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

from taskboard_permissions.context.models import (
    ProjectRecord,
    TeamGrant,
    TeamMembershipRecord,
    TeamRecord,
)
from taskboard_permissions.errors import ConfigError
from taskboard_permissions.roles.enums import ProjectTeamRole, TeamRole

if TYPE_CHECKING:
    from taskboard_permissions.cache.invalidation import CacheInvalidationManager

logger = logging.getLogger(__name__)


class InMemoryRepository:
    """Dict-backed storage for projects, teams and memberships.

    Parameters
    ----------
    invalidation:
        Optional manager notified after every role, membership or
        ownership write.  May also be attached later via :meth:`attach`.
    """

    def __init__(self, invalidation: "CacheInvalidationManager | None" = None) -> None:
        self._projects: dict[str, ProjectRecord] = {}
        self._teams: dict[str, TeamRecord] = {}
        # team_id -> user_id -> role
        self._members: dict[str, dict[str, TeamRole]] = {}
        self._lock = threading.Lock()
        self._invalidation = invalidation

    def attach(self, invalidation: "CacheInvalidationManager") -> None:
        """Route write notifications to ``invalidation``."""
        self._invalidation = invalidation

    # ------------------------------------------------------------------
    # Fixtures
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> InMemoryRepository:
        """Build a repository from a fixture mapping.

        Raises
        ------
        ConfigError
            When a role name is unknown, a required key is missing, or an
            id is declared twice.
        """
        repo = cls()
        try:
            for team in data.get("teams", []) or []:  # type: ignore[union-attr]
                repo.add_team(str(team["id"]), creator_id=str(team["creator"]))
                members = repo._members[str(team["id"])]
                for member in team.get("members", []) or []:
                    user_id = str(member["user"])
                    if user_id in members:
                        raise ValueError(f"User '{user_id}' listed twice in team '{team['id']}'.")
                    members[user_id] = _team_role(member.get("role", "member"))
            for project in data.get("projects", []) or []:  # type: ignore[union-attr]
                grants = tuple(
                    TeamGrant(team_id=str(g["team"]), project_role=_project_role(g["role"]))
                    for g in project.get("teams", []) or []
                )
                project_id = str(project["id"])
                if project_id in repo._projects:
                    raise ValueError(f"Project '{project_id}' already exists.")
                repo._projects[project_id] = ProjectRecord(
                    id=project_id,
                    owner_id=str(project["owner"]),
                    team_grants=grants,
                )
        except ConfigError:
            raise
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            raise ConfigError(f"Invalid permissions fixture: {exc!r}") from exc
        return repo

    @classmethod
    def from_yaml(cls, path: Path) -> InMemoryRepository:
        if not path.exists():
            raise ConfigError(f"Fixture file not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in fixture {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"Fixture must be a mapping; got {type(raw).__name__}.")
        return cls.from_dict(raw)

    # ------------------------------------------------------------------
    # PermissionRepository reads
    # ------------------------------------------------------------------

    def find_project_by_id(self, project_id: str) -> ProjectRecord | None:
        with self._lock:
            return self._projects.get(project_id)

    def find_team_by_id(self, team_id: str) -> TeamRecord | None:
        with self._lock:
            return self._teams.get(team_id)

    def find_team_memberships_for_user(self, user_id: str) -> list[TeamMembershipRecord]:
        with self._lock:
            return [
                TeamMembershipRecord(team_id=team_id, user_id=user_id, role=members[user_id])
                for team_id, members in self._members.items()
                if user_id in members
            ]

    def find_user_team_membership(
        self, team_id: str, user_id: str
    ) -> TeamMembershipRecord | None:
        with self._lock:
            role = self._members.get(team_id, {}).get(user_id)
        if role is None:
            return None
        return TeamMembershipRecord(team_id=team_id, user_id=user_id, role=role)

    # ------------------------------------------------------------------
    # Creation (no cached facts can depend on a resource that did not exist)
    # ------------------------------------------------------------------

    def add_project(self, project_id: str, owner_id: str) -> ProjectRecord:
        record = ProjectRecord(id=project_id, owner_id=owner_id)
        with self._lock:
            if project_id in self._projects:
                raise ValueError(f"Project '{project_id}' already exists.")
            self._projects[project_id] = record
        return record

    def add_team(self, team_id: str, creator_id: str) -> TeamRecord:
        record = TeamRecord(id=team_id, creator_id=creator_id)
        with self._lock:
            if team_id in self._teams:
                raise ValueError(f"Team '{team_id}' already exists.")
            self._teams[team_id] = record
            self._members[team_id] = {}
        return record

    # ------------------------------------------------------------------
    # Team writes
    # ------------------------------------------------------------------

    def add_team_member(self, team_id: str, user_id: str, role: TeamRole) -> None:
        with self._lock:
            members = self._team_members(team_id)
            if user_id in members:
                raise ValueError(f"User '{user_id}' is already a member of '{team_id}'.")
            members[user_id] = role
        if self._invalidation is not None:
            self._invalidation.on_user_added_to_team(user_id, team_id)

    def remove_team_member(self, team_id: str, user_id: str) -> None:
        with self._lock:
            members = self._team_members(team_id)
            if user_id not in members:
                raise KeyError(f"User '{user_id}' is not a member of '{team_id}'.")
            del members[user_id]
        if self._invalidation is not None:
            self._invalidation.on_user_removed_from_team(user_id, team_id)

    def change_team_member_role(self, team_id: str, user_id: str, role: TeamRole) -> None:
        with self._lock:
            members = self._team_members(team_id)
            if user_id not in members:
                raise KeyError(f"User '{user_id}' is not a member of '{team_id}'.")
            old_role = members[user_id]
            members[user_id] = role
        if self._invalidation is not None:
            self._invalidation.on_user_team_role_changed(user_id, team_id, old_role, role)

    def transfer_team_ownership(self, team_id: str, new_creator_id: str) -> None:
        with self._lock:
            team = self._require_team(team_id)
            self._teams[team_id] = TeamRecord(id=team_id, creator_id=new_creator_id)
        if self._invalidation is not None:
            self._invalidation.on_team_ownership_transferred(
                team_id, team.creator_id, new_creator_id
            )

    def delete_team(self, team_id: str) -> None:
        """Delete a team, its memberships, and every project grant it held."""
        with self._lock:
            self._require_team(team_id)
            del self._teams[team_id]
            self._members.pop(team_id, None)
            affected: list[str] = []
            for project_id, project in list(self._projects.items()):
                kept = tuple(g for g in project.team_grants if g.team_id != team_id)
                if len(kept) != len(project.team_grants):
                    affected.append(project_id)
                    self._projects[project_id] = ProjectRecord(
                        id=project.id, owner_id=project.owner_id, team_grants=kept
                    )
        if self._invalidation is not None:
            self._invalidation.on_team_deleted(team_id, affected)

    # ------------------------------------------------------------------
    # Project writes
    # ------------------------------------------------------------------

    def grant_project_access(
        self, project_id: str, team_id: str, role: ProjectTeamRole
    ) -> None:
        with self._lock:
            project = self._require_project(project_id)
            self._require_team(team_id)
            if any(g.team_id == team_id for g in project.team_grants):
                raise ValueError(f"Team '{team_id}' already has access to '{project_id}'.")
            self._projects[project_id] = ProjectRecord(
                id=project.id,
                owner_id=project.owner_id,
                team_grants=project.team_grants + (TeamGrant(team_id, role),),
            )
        if self._invalidation is not None:
            self._invalidation.on_team_added_to_project(team_id, project_id)

    def revoke_project_access(self, project_id: str, team_id: str) -> None:
        with self._lock:
            project = self._require_project(project_id)
            kept = tuple(g for g in project.team_grants if g.team_id != team_id)
            if len(kept) == len(project.team_grants):
                raise KeyError(f"Team '{team_id}' has no access to '{project_id}'.")
            self._projects[project_id] = ProjectRecord(
                id=project.id, owner_id=project.owner_id, team_grants=kept
            )
        if self._invalidation is not None:
            self._invalidation.on_team_removed_from_project(team_id, project_id)

    def change_team_project_role(
        self, project_id: str, team_id: str, role: ProjectTeamRole
    ) -> None:
        with self._lock:
            project = self._require_project(project_id)
            old_role: ProjectTeamRole | None = None
            grants: list[TeamGrant] = []
            for grant in project.team_grants:
                if grant.team_id == team_id:
                    old_role = grant.project_role
                    grant = TeamGrant(team_id, role)
                grants.append(grant)
            if old_role is None:
                raise KeyError(f"Team '{team_id}' has no access to '{project_id}'.")
            self._projects[project_id] = ProjectRecord(
                id=project.id, owner_id=project.owner_id, team_grants=tuple(grants)
            )
        if self._invalidation is not None:
            self._invalidation.on_team_project_role_changed(team_id, project_id, old_role, role)

    def transfer_project_ownership(self, project_id: str, new_owner_id: str) -> None:
        with self._lock:
            project = self._require_project(project_id)
            self._projects[project_id] = ProjectRecord(
                id=project.id, owner_id=new_owner_id, team_grants=project.team_grants
            )
        if self._invalidation is not None:
            self._invalidation.on_project_ownership_transferred(
                project_id, project.owner_id, new_owner_id
            )

    def delete_project(self, project_id: str) -> None:
        with self._lock:
            self._require_project(project_id)
            del self._projects[project_id]
        if self._invalidation is not None:
            self._invalidation.on_project_deleted(project_id)

    # ------------------------------------------------------------------
    # User writes
    # ------------------------------------------------------------------

    def remove_user(self, user_id: str) -> None:
        """Drop every team membership held by ``user_id``."""
        with self._lock:
            for members in self._members.values():
                members.pop(user_id, None)
        if self._invalidation is not None:
            self._invalidation.invalidate_user_caches(user_id)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def project_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._projects)

    def team_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._teams)

    # ------------------------------------------------------------------
    # Internal helpers (caller holds the lock)
    # ------------------------------------------------------------------

    def _require_project(self, project_id: str) -> ProjectRecord:
        project = self._projects.get(project_id)
        if project is None:
            raise KeyError(f"Project '{project_id}' does not exist.")
        return project

    def _require_team(self, team_id: str) -> TeamRecord:
        team = self._teams.get(team_id)
        if team is None:
            raise KeyError(f"Team '{team_id}' does not exist.")
        return team

    def _team_members(self, team_id: str) -> dict[str, TeamRole]:
        self._require_team(team_id)
        return self._members[team_id]


def _team_role(value: object) -> TeamRole:
    role = TeamRole.parse(value)
    if role is None:
        raise ConfigError(f"Unknown team role {value!r}.")
    return role


def _project_role(value: object) -> ProjectTeamRole:
    role = ProjectTeamRole.parse(value)
    if role is None:
        raise ConfigError(f"Unknown project role {value!r}.")
    return role
