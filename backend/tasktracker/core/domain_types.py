"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - OwnerId, TaskId wrap UUIDs — never use bare strings for identity in domain logic
    - TaskStatus is the only source of valid status values
    - StatusFilter adds ALL on top of TaskStatus for client-side filtering

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

OwnerId = NewType("OwnerId", UUID)
TaskId = NewType("TaskId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class TaskStatus(str, Enum):
    """Task lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    COMPLETED = "completed"

    def toggled(self) -> "TaskStatus":
        if self is TaskStatus.PENDING:
            return TaskStatus.COMPLETED
        return TaskStatus.PENDING


class StatusFilter(str, Enum):
    """Status selector for the client task view."""
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"


class ViewState(str, Enum):
    """Client task view lifecycle."""
    LOADING = "loading"
    READY = "ready"
    MUTATING = "mutating"
