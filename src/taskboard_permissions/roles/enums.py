"""Role and permission enumerations.

Roles are declared in strictly increasing order of privilege, and that
declaration order *is* the ordering used for comparisons::

    >>> ProjectTeamRole.VIEWER < ProjectTeamRole.EDITOR < ProjectTeamRole.ADMIN
    True
    >>> TeamRole.parse("superuser") is None
    True

Permissions are opaque string values of the form ``"<resource>:<action>"``.
"""
from __future__ import annotations

from enum import Enum


class _OrderedRole(str, Enum):
    """String enum ordered by declaration position."""

    @property
    def rank(self) -> int:
        """Zero-based privilege rank (higher is more privileged)."""
        return list(type(self)).index(self)

    @classmethod
    def parse(cls, value: object):
        """Return the member for ``value``, or ``None`` when it is unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return None

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.rank < other.rank  # type: ignore[attr-defined]

    def __le__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.rank <= other.rank  # type: ignore[attr-defined]

    def __gt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.rank > other.rank  # type: ignore[attr-defined]

    def __ge__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.rank >= other.rank  # type: ignore[attr-defined]


class TeamRole(_OrderedRole):
    """A user's role inside a team."""

    VIEWER = "viewer"
    MEMBER = "member"
    ADMIN = "admin"
    OWNER = "owner"


class ProjectTeamRole(_OrderedRole):
    """The role a team holds on a project it has been granted access to."""

    VIEWER = "viewer"
    EDITOR = "editor"
    ADMIN = "admin"


class _Permission(str, Enum):
    @property
    def resource(self) -> str:
        return self.value.split(":", 1)[0]

    @property
    def action(self) -> str:
        return self.value.split(":", 1)[1]


class ProjectPermission(_Permission):
    """Permissions on a project and its columns, cards and attachments."""

    PROJECT_VIEW = "project:view"
    PROJECT_EDIT = "project:edit"
    PROJECT_DELETE = "project:delete"
    PROJECT_ARCHIVE = "project:archive"
    PROJECT_MANAGE_TEAMS = "project:manage_teams"

    COLUMN_CREATE = "column:create"
    COLUMN_EDIT = "column:edit"
    COLUMN_DELETE = "column:delete"
    COLUMN_REORDER = "column:reorder"

    CARD_CREATE = "card:create"
    CARD_EDIT = "card:edit"
    CARD_DELETE = "card:delete"
    CARD_ASSIGN = "card:assign"
    CARD_MOVE = "card:move"

    COMMENT_CREATE = "comment:create"
    COMMENT_EDIT = "comment:edit"
    COMMENT_DELETE = "comment:delete"

    LABEL_CREATE = "label:create"
    LABEL_EDIT = "label:edit"
    LABEL_DELETE = "label:delete"

    ATTACHMENT_UPLOAD = "attachment:upload"
    ATTACHMENT_DELETE = "attachment:delete"


class TeamPermission(_Permission):
    """Permissions on a team itself."""

    TEAM_VIEW = "team:view"
    TEAM_EDIT = "team:edit"
    TEAM_DELETE = "team:delete"
    TEAM_MANAGE_MEMBERS = "team:manage_members"
    TEAM_MANAGE_ROLES = "team:manage_roles"
    TEAM_INVITE_MEMBERS = "team:invite_members"
    TEAM_REMOVE_MEMBERS = "team:remove_members"
    TEAM_LEAVE = "team:leave"
