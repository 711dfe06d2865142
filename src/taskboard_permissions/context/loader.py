"""Uncached computation of permission contexts from storage.

ContextLoader reads the minimal facts for a ``(user, resource)`` pair and
knows nothing about caching.  It raises :class:`NotFoundError` for a missing
project or team and wraps every other repository failure in
:class:`StorageError`.

Example
-------
>>> from taskboard_permissions.storage.memory import InMemoryRepository
>>> repo = InMemoryRepository()
>>> repo.add_project("p1", owner_id="alice")
>>> ContextLoader(repo).load_project_context("alice", "p1").is_project_owner
True
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, TypeVar

from taskboard_permissions.context.models import (
    ProjectMembership,
    ProjectPermissionContext,
    TeamPermissionContext,
)
from taskboard_permissions.context.repository import PermissionRepository
from taskboard_permissions.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ContextLoader:
    """Builds fresh permission contexts from a :class:`PermissionRepository`.

    Parameters
    ----------
    repository:
        The persistence collaborator.
    clock:
        Callable returning the current UTC datetime, stamped as
        ``resolved_at``.
    """

    def __init__(
        self,
        repository: PermissionRepository,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._clock = clock or (lambda: datetime.now(tz=timezone.utc))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load_project_context(self, user_id: str, project_id: str) -> ProjectPermissionContext:
        """Compute the project context for ``user_id`` on ``project_id``.

        Raises
        ------
        NotFoundError
            When the project does not exist.
        StorageError
            When the repository fails.
        """
        project = self._call(
            "find_project_by_id", lambda: self._repository.find_project_by_id(project_id)
        )
        if project is None:
            raise NotFoundError("project", project_id)

        memberships = self._call(
            "find_team_memberships_for_user",
            lambda: self._repository.find_team_memberships_for_user(user_id),
        )
        team_roles = {m.team_id: m.role for m in memberships}

        # One entry per team; a duplicated grant keeps the stronger role.
        granted: dict[str, ProjectMembership] = {}
        for grant in project.team_grants:
            if grant.team_id not in team_roles:
                continue
            existing = granted.get(grant.team_id)
            if existing is None or grant.project_role > existing.project_role:
                granted[grant.team_id] = ProjectMembership(
                    team_id=grant.team_id,
                    project_role=grant.project_role,
                    team_role=team_roles[grant.team_id],
                )

        context = ProjectPermissionContext(
            user_id=user_id,
            project_id=project_id,
            is_project_owner=project.owner_id == user_id,
            team_memberships=tuple(granted.values()),
            resolved_at=self._clock(),
        )
        logger.debug(
            "Loaded project context user=%s project=%s owner=%s teams=%d",
            user_id,
            project_id,
            context.is_project_owner,
            len(context.team_memberships),
        )
        return context

    def load_team_context(self, user_id: str, team_id: str) -> TeamPermissionContext:
        """Compute the team context for ``user_id`` on ``team_id``.

        Raises
        ------
        NotFoundError
            When the team does not exist.
        StorageError
            When the repository fails.
        """
        team = self._call("find_team_by_id", lambda: self._repository.find_team_by_id(team_id))
        if team is None:
            raise NotFoundError("team", team_id)

        membership = self._call(
            "find_user_team_membership",
            lambda: self._repository.find_user_team_membership(team_id, user_id),
        )
        context = TeamPermissionContext(
            user_id=user_id,
            team_id=team_id,
            user_role=membership.role if membership is not None else None,
            is_team_creator=team.creator_id == user_id,
            resolved_at=self._clock(),
        )
        logger.debug(
            "Loaded team context user=%s team=%s role=%s creator=%s",
            user_id,
            team_id,
            context.user_role.value if context.user_role else None,
            context.is_team_creator,
        )
        return context

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _call(self, operation: str, fn: Callable[[], R]) -> R:
        """Run one repository call, wrapping unexpected failures."""
        try:
            return fn()
        except NotFoundError:
            raise
        except Exception as exc:
            logger.error("Repository call %s failed: %s", operation, exc)
            raise StorageError(operation, str(exc)) from exc
