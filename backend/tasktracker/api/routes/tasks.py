"""Task Routes — owner-scoped CRUD over the task service.

Invariants:
    - Every route depends on get_current_user; the owner id always comes from it
    - Path ids that are not valid UUIDs are reported as 404, like a missing task
    - Success bodies: {tasks}, {task, message} (201 on create), {message}

Design Decisions:
    - Validation, existence and ownership errors are raised by TaskService and
      rendered by the global TaskTrackerError handler; routes do not catch them
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from tasktracker.api.dependencies import get_current_user, get_task_service
from tasktracker.core.domain_types import OwnerId, TaskId
from tasktracker.core.errors import ResourceNotFoundError
from tasktracker.models.user import User
from tasktracker.schemas.task import (
    Task, TaskCreate, TaskUpdate,
    TaskListResponse, TaskResponse, MessageResponse,
)
from tasktracker.services.task_service import TaskService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])


def parse_task_id(raw: str) -> TaskId:
    try:
        return TaskId(UUID(raw))
    except ValueError:
        raise ResourceNotFoundError("Task", raw) from None


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """All of the caller's tasks, newest first."""
    tasks = await service.list_tasks(OwnerId(user.id))
    return TaskListResponse(tasks=[Task.model_validate(t) for t in tasks])


@router.post(
    "", response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    body: TaskCreate,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    task = await service.create_task(
        OwnerId(user.id), body.title, body.description, body.status,
    )
    return TaskResponse(
        task=Task.model_validate(task), message="Task created successfully",
    )


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Partial update: only fields present in the body change."""
    task = await service.update_task(
        OwnerId(user.id), parse_task_id(task_id), body.changes(),
    )
    return TaskResponse(
        task=Task.model_validate(task), message="Task updated successfully",
    )


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    await service.delete_task(OwnerId(user.id), parse_task_id(task_id))
    return MessageResponse(message="Task deleted successfully")
