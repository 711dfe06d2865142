"""Team permission checker.

Mirrors :mod:`taskboard_permissions.checkers.project` for teams: the team
creator holds every permission, other users are resolved by their
:class:`TeamRole`, and non-members hold nothing.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from taskboard_permissions.cache.scoped import TeamContextCache, cache_key
from taskboard_permissions.context.loader import ContextLoader
from taskboard_permissions.context.models import TeamPermissionContext
from taskboard_permissions.errors import ContextNotLoadedError
from taskboard_permissions.roles.enums import TeamPermission, TeamRole
from taskboard_permissions.roles.table import role_includes

logger = logging.getLogger(__name__)

_T = TeamPermission


@dataclass(frozen=True)
class TeamPermissions:
    """Every team permission flag for one user, plus computed summaries."""

    can_view_team: bool
    can_edit_team: bool
    can_delete_team: bool
    can_manage_members: bool
    can_manage_roles: bool
    can_invite_members: bool
    can_remove_members: bool
    can_leave_team: bool
    can_view_settings: bool
    has_any_settings_permission: bool
    has_any_member_permission: bool

    @classmethod
    def none(cls) -> TeamPermissions:
        return cls(**{name: False for name in cls.__dataclass_fields__})

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


class TeamPermissionChecker:
    """Answers permission questions for one user on one team.

    Parameters
    ----------
    cache:
        The shared team context cache.
    loader:
        Loader used on cache misses.
    """

    def __init__(self, cache: TeamContextCache, loader: ContextLoader) -> None:
        self._cache = cache
        self._loader = loader
        self._context: TeamPermissionContext | None = None

    def load_context(
        self, user_id: str, team_id: str, use_cache: bool = True
    ) -> TeamPermissionContext:
        """Load (or fetch from cache) the context for ``user_id`` on ``team_id``.

        Raises
        ------
        NotFoundError
            When the team does not exist.
        StorageError
            When storage fails.
        """
        key = cache_key(user_id, team_id)
        if use_cache:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Team context cache hit %s", key)
                self._context = cached
                return cached
            logger.debug("Team context cache miss %s", key)

        context = self._loader.load_team_context(user_id, team_id)
        if use_cache:
            self._cache.set(key, context)
        self._context = context
        return context

    @property
    def context(self) -> TeamPermissionContext:
        if self._context is None:
            raise ContextNotLoadedError()
        return self._context

    def display_role(self) -> TeamRole | None:
        """Role to show in a UI.  Creators without a membership row show as owner."""
        context = self.context
        if context.user_role is None and context.is_team_creator:
            return TeamRole.OWNER
        return context.user_role

    def has_permission(self, permission: TeamPermission) -> bool:
        context = self.context
        if context.is_team_creator:
            return True
        if context.user_role is None:
            return False
        return role_includes(context.user_role, permission)

    def has_access(self) -> bool:
        return self.has_permission(_T.TEAM_VIEW)

    # ------------------------------------------------------------------
    # Convenience predicates
    # ------------------------------------------------------------------

    def can_view_team(self) -> bool:
        return self.has_permission(_T.TEAM_VIEW)

    def can_edit_team(self) -> bool:
        return self.has_permission(_T.TEAM_EDIT)

    def can_delete_team(self) -> bool:
        return self.has_permission(_T.TEAM_DELETE)

    def can_manage_members(self) -> bool:
        return self.has_permission(_T.TEAM_MANAGE_MEMBERS)

    def can_manage_roles(self) -> bool:
        return self.has_permission(_T.TEAM_MANAGE_ROLES)

    def can_invite_members(self) -> bool:
        return self.has_permission(_T.TEAM_INVITE_MEMBERS)

    def can_remove_members(self) -> bool:
        return self.has_permission(_T.TEAM_REMOVE_MEMBERS)

    def can_leave_team(self) -> bool:
        return self.has_permission(_T.TEAM_LEAVE)

    def get_all_permissions(self) -> TeamPermissions:
        can_edit = self.can_edit_team()
        can_manage_members = self.can_manage_members()
        can_manage_roles = self.can_manage_roles()
        can_invite = self.can_invite_members()
        can_remove = self.can_remove_members()
        any_settings = can_edit or can_manage_members or can_manage_roles
        return TeamPermissions(
            can_view_team=self.can_view_team(),
            can_edit_team=can_edit,
            can_delete_team=self.can_delete_team(),
            can_manage_members=can_manage_members,
            can_manage_roles=can_manage_roles,
            can_invite_members=can_invite,
            can_remove_members=can_remove,
            can_leave_team=self.can_leave_team(),
            can_view_settings=any_settings,
            has_any_settings_permission=any_settings,
            has_any_member_permission=can_manage_members or can_invite or can_remove,
        )
