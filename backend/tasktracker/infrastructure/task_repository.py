"""SQL Task Repository — TaskRepository implementation over an AsyncSession.

Invariants:
    - Each mutating method is one transaction: flush + commit, or rollback
    - Every statement runs inside store_operation(): SQLAlchemy errors are
      logged, rolled back, and raised as StoreError
    - owner_id is written only by add(); apply_changes() ignores it

Design Decisions:
    - Repository owns commit (not the service): the service stays free of
      SQLAlchemy imports and can be exercised with an in-memory fake
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.core.domain_types import OwnerId, TaskId
from tasktracker.core.enforce_task_fields import EDITABLE_FIELDS
from tasktracker.infrastructure.database import store_operation
from tasktracker.models.task import Task


class SqlTaskRepository:
    """Task persistence backed by SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_by_owner(self, owner_id: OwnerId) -> list[Task]:
        async with store_operation(self.db, "list"):
            result = await self.db.execute(
                select(Task)
                .where(Task.owner_id == owner_id)
                .order_by(Task.created_at.desc()),
            )
            return list(result.scalars().all())

    async def get(self, task_id: TaskId) -> Task | None:
        async with store_operation(self.db, "get"):
            result = await self.db.execute(
                select(Task).where(Task.id == task_id),
            )
            return result.scalar_one_or_none()

    async def add(
        self, owner_id: OwnerId, title: str, description: str, status: str,
        now: datetime,
    ) -> Task:
        async with store_operation(self.db, "create"):
            task = Task(
                owner_id=owner_id,
                title=title,
                description=description,
                status=status,
                created_at=now,
                updated_at=now,
            )
            self.db.add(task)
            await self.db.commit()
            await self.db.refresh(task)
            return task

    async def apply_changes(
        self, task: Task, changes: dict, now: datetime,
    ) -> Task:
        async with store_operation(self.db, "update"):
            for name, value in changes.items():
                if name in EDITABLE_FIELDS:
                    setattr(task, name, value)
            task.updated_at = now
            await self.db.commit()
            await self.db.refresh(task)
            return task

    async def remove(self, task: Task) -> None:
        async with store_operation(self.db, "delete"):
            await self.db.delete(task)
            await self.db.commit()
