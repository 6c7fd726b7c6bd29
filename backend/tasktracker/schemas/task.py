"""Task Schemas — request bodies and the public Task shape.

Invariants:
    - Task JSON: {id, ownerId, title, description, status, createdAt, updatedAt}
    - Timestamps always carry a timezone (naive values are treated as UTC)
    - TaskUpdate.changes() returns only the fields the caller actually sent

Design Decisions:
    - Unknown request keys are ignored, so a client may send a whole task
      (id, ownerId, ...) and only the editable fields are considered
    - Request fields typed loosely (str | None): emptiness and status membership
      are checked by the service so every caller gets the same field errors
"""

from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )


class TaskCreate(_CamelModel):
    title: str | None = None
    description: str | None = None
    status: str | None = None


class TaskUpdate(_CamelModel):
    title: str | None = None
    description: str | None = None
    status: str | None = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class Task(_CamelModel):
    """Public task record."""
    id: UUID
    owner_id: UUID
    title: str
    description: str
    status: str
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class TaskListResponse(_CamelModel):
    tasks: list[Task]


class TaskResponse(_CamelModel):
    task: Task
    message: str


class MessageResponse(_CamelModel):
    message: str
