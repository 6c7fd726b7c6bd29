"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Repositories expose one method per store transaction, so every service
      operation maps to exactly one commit
"""

from datetime import datetime
from typing import Protocol

from tasktracker.core.domain_types import OwnerId, TaskId


class TaskLike(Protocol):
    """Structural contract for task records returned by the store."""
    id: TaskId
    owner_id: OwnerId
    title: str
    description: str
    status: str
    created_at: datetime
    updated_at: datetime


class TaskRepository(Protocol):
    """Contract for task persistence — implemented by shell."""
    async def list_by_owner(self, owner_id: OwnerId) -> list[TaskLike]: ...
    async def get(self, task_id: TaskId) -> TaskLike | None: ...
    async def add(
        self, owner_id: OwnerId, title: str, description: str, status: str,
        now: datetime,
    ) -> TaskLike: ...
    async def apply_changes(
        self, task: TaskLike, changes: dict, now: datetime,
    ) -> TaskLike: ...
    async def remove(self, task: TaskLike) -> None: ...

