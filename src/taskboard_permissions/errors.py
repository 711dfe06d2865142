"""Exception taxonomy for permission resolution.

Callers map these onto their own transport:

- :class:`NotFoundError`         → 404-equivalent
- :class:`PermissionDeniedError` → 403-equivalent
- :class:`StorageError`          → server error, and always a deny

None of these is ever cached.  A successfully loaded context that grants
nothing is *not* an error; it is a cacheable ``False`` result.
"""
from __future__ import annotations


class TaskboardPermissionError(Exception):
    """Base class for every error raised by this package."""


class NotFoundError(TaskboardPermissionError):
    """Raised when the project or team being checked does not exist.

    Attributes
    ----------
    resource_type:
        ``"project"`` or ``"team"``.
    resource_id:
        Identifier that was looked up.
    """

    def __init__(self, resource_type: str, resource_id: str) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type.capitalize()} not found")


class StorageError(TaskboardPermissionError):
    """Raised when the persistence collaborator fails for any other reason.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"Storage operation '{operation}' failed: {message}")


class ContextNotLoadedError(TaskboardPermissionError):
    """Raised when a checker is queried before ``load_context`` was called."""

    def __init__(self) -> None:
        super().__init__("Permission context not loaded. Call load_context() first.")


class PermissionDeniedError(TaskboardPermissionError):
    """Raised by the guard helpers when a loaded context lacks a permission.

    Attributes
    ----------
    user_id:
        User whose access was checked.
    resource_id:
        Project or team identifier.
    permission:
        The permission value that was required.
    """

    def __init__(self, user_id: str, resource_id: str, permission: str) -> None:
        self.user_id = user_id
        self.resource_id = resource_id
        self.permission = permission
        super().__init__(
            f"Permission '{permission}' denied for user '{user_id}' on '{resource_id}'."
        )


class ConfigError(TaskboardPermissionError, ValueError):
    """Raised when a permissions configuration file is missing or invalid."""
