"""Task Service — the sole authority for validating and applying task mutations.

Invariants:
    - Field validation runs before any store access
    - update/delete: existence check, then ownership gate, then mutation
    - Ownership is re-checked on every call; nothing is cached across requests
    - owner_id is taken from the authenticated caller, never from input fields
    - Store failures arrive as StoreError from the repository and propagate unchanged

Design Decisions:
    - Depends on the TaskRepository protocol, not on SQLAlchemy: the functional
      core (validation, ownership, filtering) stays pure and the shell does IO
    - Delete is not idempotent: a second delete of the same id is a 404
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from tasktracker.core.domain_types import OwnerId, TaskId
from tasktracker.core.enforce_ownership import check_ownership
from tasktracker.core.enforce_task_fields import (
    validate_new_task, validate_task_changes,
)
from tasktracker.core.errors import AuthorizationError, ResourceNotFoundError
from tasktracker.core.repository_protocols import TaskLike, TaskRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskService:
    """Owner-scoped task operations."""

    def __init__(
        self,
        repository: TaskRepository,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.clock = clock

    async def list_tasks(self, owner_id: OwnerId) -> list[TaskLike]:
        """All of the owner's tasks, newest first."""
        return await self.repository.list_by_owner(owner_id)

    async def create_task(
        self,
        owner_id: OwnerId,
        title: str | None,
        description: str | None,
        status: str | None = None,
    ) -> TaskLike:
        fields = validate_new_task(title, description, status)
        task = await self.repository.add(
            owner_id,
            fields["title"],
            fields["description"],
            fields["status"].value,
            self.clock(),
        )
        logger.info(
            "Task created",
            extra={"owner_id": owner_id, "task_id": task.id, "operation": "create"},
        )
        return task

    async def update_task(
        self, owner_id: OwnerId, task_id: TaskId, fields: dict,
    ) -> TaskLike:
        """Apply a partial update. Fields not present are left unchanged."""
        changes = validate_task_changes(fields)
        if "status" in changes:
            changes["status"] = changes["status"].value
        task = await self._get_owned(owner_id, task_id, "update")
        task = await self.repository.apply_changes(task, changes, self.clock())
        logger.info(
            f"Task updated ({', '.join(sorted(changes)) or 'no fields'})",
            extra={"owner_id": owner_id, "task_id": task_id, "operation": "update"},
        )
        return task

    async def delete_task(self, owner_id: OwnerId, task_id: TaskId) -> None:
        task = await self._get_owned(owner_id, task_id, "delete")
        await self.repository.remove(task)
        logger.info(
            "Task deleted",
            extra={"owner_id": owner_id, "task_id": task_id, "operation": "delete"},
        )

    async def _get_owned(
        self, owner_id: OwnerId, task_id: TaskId, operation: str,
    ) -> TaskLike:
        task = await self.repository.get(task_id)
        if task is None:
            raise ResourceNotFoundError("Task", str(task_id))
        try:
            check_ownership(task.owner_id, owner_id)
        except AuthorizationError:
            logger.warning(
                "Ownership gate rejected caller",
                extra={"owner_id": owner_id, "task_id": task_id, "operation": operation},
            )
            raise
        return task
