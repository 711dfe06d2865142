"""Project permission checker.

A checker is created per request (or per check sequence) and is not shared
between threads.  It reads through the process-wide
:class:`ProjectContextCache`: on a miss it asks the :class:`ContextLoader`
and stores the result; errors from the loader are never cached.

Resolution rules:

1. The project owner holds every permission.
2. Otherwise the most privileged ``project_role`` across the user's team
   memberships decides, via the static grant table.
3. No ownership and no membership means no permissions at all.

Example
-------
::

    checker = ProjectPermissionChecker(cache, loader)
    checker.load_context("user-1", "project-1")
    if not checker.can_create_cards():
        ...
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from taskboard_permissions.cache.scoped import ProjectContextCache, cache_key
from taskboard_permissions.context.loader import ContextLoader
from taskboard_permissions.context.models import ProjectPermissionContext
from taskboard_permissions.errors import ContextNotLoadedError
from taskboard_permissions.roles.enums import ProjectPermission, ProjectTeamRole
from taskboard_permissions.roles.table import max_project_role, role_includes

logger = logging.getLogger(__name__)

_P = ProjectPermission


@dataclass(frozen=True)
class ProjectPermissions:
    """Every project permission flag for one user, plus computed summaries."""

    can_view_project: bool
    can_edit_project: bool
    can_delete_project: bool
    can_archive_project: bool
    can_manage_teams: bool
    can_create_columns: bool
    can_edit_columns: bool
    can_delete_columns: bool
    can_reorder_columns: bool
    can_create_cards: bool
    can_edit_cards: bool
    can_delete_cards: bool
    can_assign_cards: bool
    can_move_cards: bool
    can_create_comments: bool
    can_edit_comments: bool
    can_delete_comments: bool
    can_create_labels: bool
    can_edit_labels: bool
    can_delete_labels: bool
    can_upload_attachments: bool
    can_delete_attachments: bool
    has_any_edit_permission: bool
    has_any_management_permission: bool
    can_view_settings: bool

    @classmethod
    def none(cls) -> ProjectPermissions:
        """All flags ``False``."""
        return cls(**{name: False for name in cls.__dataclass_fields__})

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


class ProjectPermissionChecker:
    """Answers permission questions for one user on one project.

    Parameters
    ----------
    cache:
        The shared project context cache.
    loader:
        Loader used on cache misses.
    """

    def __init__(self, cache: ProjectContextCache, loader: ContextLoader) -> None:
        self._cache = cache
        self._loader = loader
        self._context: ProjectPermissionContext | None = None

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    def load_context(
        self, user_id: str, project_id: str, use_cache: bool = True
    ) -> ProjectPermissionContext:
        """Load (or fetch from cache) the context for ``user_id`` on ``project_id``.

        Parameters
        ----------
        user_id:
            The user being checked.
        project_id:
            The project being checked.
        use_cache:
            When ``False`` the cache is neither read nor written.

        Returns
        -------
        ProjectPermissionContext

        Raises
        ------
        NotFoundError
            When the project does not exist.
        StorageError
            When storage fails.  Callers must treat this as a deny.
        """
        key = cache_key(user_id, project_id)
        if use_cache:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Project context cache hit %s", key)
                self._context = cached
                return cached
            logger.debug("Project context cache miss %s", key)

        context = self._loader.load_project_context(user_id, project_id)
        if use_cache:
            self._cache.set(key, context)
        self._context = context
        return context

    @property
    def context(self) -> ProjectPermissionContext:
        if self._context is None:
            raise ContextNotLoadedError()
        return self._context

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def effective_role(self) -> ProjectTeamRole | None:
        """The most privileged project role across memberships, ignoring ownership."""
        return max_project_role(m.project_role for m in self.context.team_memberships)

    def display_role(self) -> ProjectTeamRole | None:
        """Role to show in a UI.  Owners are shown as ``admin``."""
        if self.context.is_project_owner:
            return ProjectTeamRole.ADMIN
        return self.effective_role()

    def has_permission(self, permission: ProjectPermission) -> bool:
        """Return ``True`` when the loaded context grants ``permission``."""
        context = self.context
        if context.is_project_owner:
            return True
        if not context.team_memberships:
            return False
        return role_includes(self.effective_role(), permission)

    def has_access(self) -> bool:
        return self.has_permission(_P.PROJECT_VIEW)

    # ------------------------------------------------------------------
    # Convenience predicates
    # ------------------------------------------------------------------

    def can_view_project(self) -> bool:
        return self.has_permission(_P.PROJECT_VIEW)

    def can_edit_project(self) -> bool:
        return self.has_permission(_P.PROJECT_EDIT)

    def can_delete_project(self) -> bool:
        return self.has_permission(_P.PROJECT_DELETE)

    def can_archive_project(self) -> bool:
        return self.has_permission(_P.PROJECT_ARCHIVE)

    def can_manage_teams(self) -> bool:
        return self.has_permission(_P.PROJECT_MANAGE_TEAMS)

    def can_create_cards(self) -> bool:
        return self.has_permission(_P.CARD_CREATE)

    def can_edit_cards(self) -> bool:
        return self.has_permission(_P.CARD_EDIT)

    def can_delete_cards(self) -> bool:
        return self.has_permission(_P.CARD_DELETE)

    def can_modify_comment(self, author_id: str) -> bool:
        """Whether the user may edit or delete a comment written by ``author_id``.

        Holders of ``COMMENT_DELETE`` may modify any comment; holders of
        ``COMMENT_EDIT`` only their own.
        """
        if self.has_permission(_P.COMMENT_DELETE):
            return True
        if self.has_permission(_P.COMMENT_EDIT):
            return author_id == self.context.user_id
        return False

    def get_all_permissions(self) -> ProjectPermissions:
        """Evaluate every project permission at once."""
        flags = {
            "can_view_project": self.has_permission(_P.PROJECT_VIEW),
            "can_edit_project": self.has_permission(_P.PROJECT_EDIT),
            "can_delete_project": self.has_permission(_P.PROJECT_DELETE),
            "can_archive_project": self.has_permission(_P.PROJECT_ARCHIVE),
            "can_manage_teams": self.has_permission(_P.PROJECT_MANAGE_TEAMS),
            "can_create_columns": self.has_permission(_P.COLUMN_CREATE),
            "can_edit_columns": self.has_permission(_P.COLUMN_EDIT),
            "can_delete_columns": self.has_permission(_P.COLUMN_DELETE),
            "can_reorder_columns": self.has_permission(_P.COLUMN_REORDER),
            "can_create_cards": self.has_permission(_P.CARD_CREATE),
            "can_edit_cards": self.has_permission(_P.CARD_EDIT),
            "can_delete_cards": self.has_permission(_P.CARD_DELETE),
            "can_assign_cards": self.has_permission(_P.CARD_ASSIGN),
            "can_move_cards": self.has_permission(_P.CARD_MOVE),
            "can_create_comments": self.has_permission(_P.COMMENT_CREATE),
            "can_edit_comments": self.has_permission(_P.COMMENT_EDIT),
            "can_delete_comments": self.has_permission(_P.COMMENT_DELETE),
            "can_create_labels": self.has_permission(_P.LABEL_CREATE),
            "can_edit_labels": self.has_permission(_P.LABEL_EDIT),
            "can_delete_labels": self.has_permission(_P.LABEL_DELETE),
            "can_upload_attachments": self.has_permission(_P.ATTACHMENT_UPLOAD),
            "can_delete_attachments": self.has_permission(_P.ATTACHMENT_DELETE),
        }
        return ProjectPermissions(
            **flags,
            has_any_edit_permission=(
                flags["can_edit_project"] or flags["can_edit_cards"] or flags["can_edit_columns"]
            ),
            has_any_management_permission=(
                flags["can_edit_project"]
                or flags["can_manage_teams"]
                or flags["can_delete_project"]
            ),
            can_view_settings=flags["can_edit_project"] or flags["can_manage_teams"],
        )
