"""Service test fixtures — TaskService over the real SQL repository.

Invariants:
    - The clock is deterministic: each call advances one second
    - fetch_task reads through a fresh session, so assertions see committed state
"""

from datetime import datetime, timedelta, timezone

import pytest

from tasktracker.infrastructure.task_repository import SqlTaskRepository
from tasktracker.models.task import Task
from tasktracker.services.task_service import TaskService


class StepClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return StepClock(datetime(2026, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def service(test_db, clock):
    return TaskService(SqlTaskRepository(test_db), clock=clock)


@pytest.fixture
def fetch_task(test_session_factory):
    async def _fetch(task_id):
        async with test_session_factory() as db:
            return await db.get(Task, task_id)
    return _fetch
