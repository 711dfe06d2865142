"""Storage implementations of the permission repository contract."""
from __future__ import annotations

from taskboard_permissions.storage.memory import InMemoryRepository

__all__ = ["InMemoryRepository"]
