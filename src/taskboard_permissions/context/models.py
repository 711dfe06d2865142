"""Permission contexts and persistence records.

Contexts are frozen, so the instance handed out of the cache can be
shared by every caller without anyone being able to mutate the cached
copy.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from taskboard_permissions.roles.enums import ProjectTeamRole, TeamRole

# ---------------------------------------------------------------------------
# Persistence records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TeamGrant:
    """A team's access grant on a project."""

    team_id: str
    project_role: ProjectTeamRole


@dataclass(frozen=True)
class ProjectRecord:
    """A project as seen by the permission engine."""

    id: str
    owner_id: str
    team_grants: tuple[TeamGrant, ...] = ()


@dataclass(frozen=True)
class TeamRecord:
    """A team as seen by the permission engine."""

    id: str
    creator_id: str


@dataclass(frozen=True)
class TeamMembershipRecord:
    """One row of team membership for a user."""

    team_id: str
    user_id: str
    role: TeamRole


# ---------------------------------------------------------------------------
# Contexts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProjectMembership:
    """A team through which a user reaches a project.

    Attributes
    ----------
    team_id:
        The team that was granted access to the project.
    project_role:
        The role that grant carries on the project.
    team_role:
        The user's own role inside the team, or ``None`` if unknown.
    """

    team_id: str
    project_role: ProjectTeamRole
    team_role: TeamRole | None = None


@dataclass(frozen=True)
class ProjectPermissionContext:
    """Facts needed to answer permission questions for one user on one project.

    Attributes
    ----------
    user_id:
        The user being checked.
    project_id:
        The project being checked.
    is_project_owner:
        ``True`` when the user owns the project (unconditional allow).
    team_memberships:
        At most one entry per team.
    resolved_at:
        UTC datetime when the facts were read from storage.
    """

    user_id: str
    project_id: str
    is_project_owner: bool
    team_memberships: tuple[ProjectMembership, ...]
    resolved_at: datetime

    @property
    def has_access(self) -> bool:
        """``True`` when the user owns the project or reaches it through a team."""
        return self.is_project_owner or bool(self.team_memberships)


@dataclass(frozen=True)
class TeamPermissionContext:
    """Facts needed to answer permission questions for one user on one team."""

    user_id: str
    team_id: str
    user_role: TeamRole | None
    is_team_creator: bool
    resolved_at: datetime | None = None

    @property
    def has_access(self) -> bool:
        return self.is_team_creator or self.user_role is not None
