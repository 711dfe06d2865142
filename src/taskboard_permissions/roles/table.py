"""Static role → permission grant tables.

Both tables are monotonic: every role is granted everything the role
directly below it is granted.  Permissions that no role receives are
reserved for the override flags on the context (``PROJECT_DELETE`` for the
project owner, ``TEAM_DELETE`` for the team creator).

Unknown or missing roles resolve to the empty set so that every lookup
fails closed.
"""
from __future__ import annotations

from collections.abc import Iterable

from taskboard_permissions.roles.enums import (
    ProjectPermission,
    ProjectTeamRole,
    TeamPermission,
    TeamRole,
)

_P = ProjectPermission
_T = TeamPermission

_PROJECT_VIEWER: frozenset[ProjectPermission] = frozenset(
    [_P.PROJECT_VIEW, _P.COMMENT_CREATE]
)

_PROJECT_EDITOR: frozenset[ProjectPermission] = _PROJECT_VIEWER | frozenset(
    [
        _P.COLUMN_CREATE,
        _P.COLUMN_EDIT,
        _P.COLUMN_REORDER,
        _P.CARD_CREATE,
        _P.CARD_EDIT,
        _P.CARD_ASSIGN,
        _P.CARD_MOVE,
        _P.COMMENT_EDIT,
        _P.LABEL_CREATE,
        _P.LABEL_EDIT,
        _P.ATTACHMENT_UPLOAD,
    ]
)

# Everything except deletion of the project itself.
_PROJECT_ADMIN: frozenset[ProjectPermission] = frozenset(_P) - {_P.PROJECT_DELETE}

PROJECT_ROLE_PERMISSIONS: dict[ProjectTeamRole, frozenset[ProjectPermission]] = {
    ProjectTeamRole.VIEWER: _PROJECT_VIEWER,
    ProjectTeamRole.EDITOR: _PROJECT_EDITOR,
    ProjectTeamRole.ADMIN: _PROJECT_ADMIN,
}

_TEAM_VIEWER: frozenset[TeamPermission] = frozenset([_T.TEAM_VIEW, _T.TEAM_LEAVE])
_TEAM_MEMBER: frozenset[TeamPermission] = _TEAM_VIEWER | {_T.TEAM_INVITE_MEMBERS}
_TEAM_ADMIN: frozenset[TeamPermission] = _TEAM_MEMBER | {
    _T.TEAM_EDIT,
    _T.TEAM_MANAGE_MEMBERS,
    _T.TEAM_REMOVE_MEMBERS,
}
_TEAM_OWNER: frozenset[TeamPermission] = _TEAM_ADMIN | {_T.TEAM_MANAGE_ROLES}

TEAM_ROLE_PERMISSIONS: dict[TeamRole, frozenset[TeamPermission]] = {
    TeamRole.VIEWER: _TEAM_VIEWER,
    TeamRole.MEMBER: _TEAM_MEMBER,
    TeamRole.ADMIN: _TEAM_ADMIN,
    TeamRole.OWNER: _TEAM_OWNER,
}


def permissions_for(
    role: ProjectTeamRole | TeamRole | None,
) -> frozenset[ProjectPermission] | frozenset[TeamPermission]:
    """Return the permissions granted to ``role``.

    Parameters
    ----------
    role:
        A project-team role or a team role.  ``None`` yields the empty set.

    Returns
    -------
    frozenset
        Immutable set of permissions; empty for unknown roles.
    """
    if isinstance(role, ProjectTeamRole):
        return PROJECT_ROLE_PERMISSIONS.get(role, frozenset())
    if isinstance(role, TeamRole):
        return TEAM_ROLE_PERMISSIONS.get(role, frozenset())
    return frozenset()


def role_includes(
    role: ProjectTeamRole | TeamRole | None,
    permission: ProjectPermission | TeamPermission,
) -> bool:
    """Return ``True`` when ``role`` is granted ``permission``."""
    return permission in permissions_for(role)


def max_project_role(roles: Iterable[ProjectTeamRole | None]) -> ProjectTeamRole | None:
    """Return the most privileged role in ``roles``, or ``None`` if there is none."""
    present = [r for r in roles if r is not None]
    return max(present) if present else None
