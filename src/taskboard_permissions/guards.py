"""Call-site helpers for gating operations.

Two styles are offered:

- ``require_*`` loads the context and raises :class:`PermissionDeniedError`
  on deny.  :class:`NotFoundError` and :class:`StorageError` propagate so
  the caller can map them to not-found and server-error responses.
- ``resolve_*`` never raises.  It returns an access summary and fails
  closed (no permissions, no access) on any error.

Example
-------
::

    checker = require_project_permission(
        engine.project_checker(), user_id, project_id, ProjectPermission.CARD_CREATE
    )
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from taskboard_permissions.checkers.project import ProjectPermissionChecker, ProjectPermissions
from taskboard_permissions.checkers.team import TeamPermissionChecker, TeamPermissions
from taskboard_permissions.errors import NotFoundError, PermissionDeniedError
from taskboard_permissions.roles.enums import (
    ProjectPermission,
    ProjectTeamRole,
    TeamPermission,
    TeamRole,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectAccess:
    """What a user may do on a project, as shown to a client."""

    role: ProjectTeamRole | None
    permissions: ProjectPermissions
    has_access: bool
    is_project_owner: bool
    team_memberships: int = 0

    @classmethod
    def denied(cls) -> ProjectAccess:
        return cls(
            role=None,
            permissions=ProjectPermissions.none(),
            has_access=False,
            is_project_owner=False,
        )


@dataclass(frozen=True)
class TeamAccess:
    """What a user may do on a team, as shown to a client."""

    role: TeamRole | None
    permissions: TeamPermissions
    has_access: bool
    is_team_creator: bool

    @classmethod
    def denied(cls) -> TeamAccess:
        return cls(
            role=None,
            permissions=TeamPermissions.none(),
            has_access=False,
            is_team_creator=False,
        )


def require_project_permission(
    checker: ProjectPermissionChecker,
    user_id: str,
    project_id: str,
    permission: ProjectPermission,
) -> ProjectPermissionChecker:
    """Load the project context and insist on ``permission``.

    Returns
    -------
    ProjectPermissionChecker
        The same checker, with its context loaded, for follow-up checks.

    Raises
    ------
    PermissionDeniedError
        When the permission is not granted.
    NotFoundError
        When the project does not exist.
    StorageError
        When storage fails.
    """
    checker.load_context(user_id, project_id)
    if not checker.has_permission(permission):
        logger.info(
            "Denied %s for user=%s project=%s", permission.value, user_id, project_id
        )
        raise PermissionDeniedError(user_id, project_id, permission.value)
    return checker


def require_team_permission(
    checker: TeamPermissionChecker,
    user_id: str,
    team_id: str,
    permission: TeamPermission,
) -> TeamPermissionChecker:
    """Team counterpart of :func:`require_project_permission`."""
    checker.load_context(user_id, team_id)
    if not checker.has_permission(permission):
        logger.info("Denied %s for user=%s team=%s", permission.value, user_id, team_id)
        raise PermissionDeniedError(user_id, team_id, permission.value)
    return checker


def resolve_project_access(
    checker: ProjectPermissionChecker, user_id: str, project_id: str
) -> ProjectAccess:
    """Summarise project access for ``user_id``, failing closed on any error."""
    try:
        context = checker.load_context(user_id, project_id)
        return ProjectAccess(
            role=checker.display_role(),
            permissions=checker.get_all_permissions(),
            has_access=checker.has_access(),
            is_project_owner=context.is_project_owner,
            team_memberships=len(context.team_memberships),
        )
    except NotFoundError:
        logger.debug("Project %s not found while resolving access", project_id)
        return ProjectAccess.denied()
    except Exception:
        logger.warning(
            "Failing closed resolving project access user=%s project=%s",
            user_id,
            project_id,
            exc_info=True,
        )
        return ProjectAccess.denied()


def resolve_team_access(
    checker: TeamPermissionChecker, user_id: str, team_id: str
) -> TeamAccess:
    """Summarise team access for ``user_id``, failing closed on any error."""
    try:
        context = checker.load_context(user_id, team_id)
        return TeamAccess(
            role=checker.display_role(),
            permissions=checker.get_all_permissions(),
            has_access=checker.has_access(),
            is_team_creator=context.is_team_creator,
        )
    except NotFoundError:
        logger.debug("Team %s not found while resolving access", team_id)
        return TeamAccess.denied()
    except Exception:
        logger.warning(
            "Failing closed resolving team access user=%s team=%s",
            user_id,
            team_id,
            exc_info=True,
        )
        return TeamAccess.denied()
