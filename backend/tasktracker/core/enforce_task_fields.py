"""Task Field Enforcement — pure validation of task content before persistence.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - title and description are non-empty after trimming; returned values are trimmed
    - status is always a TaskStatus member; anything else is rejected
    - Only EDITABLE_FIELDS may appear in an update; id/owner/timestamps never do

Design Decisions:
    - Raise TaskValidationError (not return dicts): the service propagates it
      straight to the global error handler, which renders the field detail
    - collect_field_errors returns every problem at once for client forms,
      while the raising validators stop at the first bad field
"""

from typing import Any

from tasktracker.core.domain_types import TaskStatus
from tasktracker.core.errors import TaskValidationError

EDITABLE_FIELDS = ("title", "description", "status")


def normalize_text(field: str, value: Any) -> str:
    """Trim a required text field, rejecting missing or blank values."""
    if value is None:
        raise TaskValidationError(f"{field.capitalize()} is required", field)
    if not isinstance(value, str):
        raise TaskValidationError(f"{field.capitalize()} must be text", field)
    value = value.strip()
    if not value:
        raise TaskValidationError(f"{field.capitalize()} is required", field)
    return value


def normalize_status(value: Any) -> TaskStatus:
    """Coerce a status value to TaskStatus or reject it."""
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise TaskValidationError(
            f"Status must be one of: {allowed}", "status",
        ) from None


def validate_new_task(
    title: Any, description: Any, status: Any = None,
) -> dict:
    """Validate creation input. Missing status defaults to pending."""
    return {
        "title": normalize_text("title", title),
        "description": normalize_text("description", description),
        "status": (
            TaskStatus.PENDING if status is None else normalize_status(status)
        ),
    }


def validate_task_changes(fields: dict) -> dict:
    """Validate a partial update. Only fields present are checked and returned."""
    unknown = sorted(set(fields) - set(EDITABLE_FIELDS))
    if unknown:
        raise TaskValidationError(
            f"Field '{unknown[0]}' cannot be updated", unknown[0],
        )
    changes: dict = {}
    for name in ("title", "description"):
        if name in fields:
            changes[name] = normalize_text(name, fields[name])
    if "status" in fields:
        changes["status"] = normalize_status(fields["status"])
    return changes


def collect_field_errors(
    title: Any, description: Any, status: Any = None,
) -> dict[str, str]:
    """Return {field: message} for every invalid field (empty dict when valid)."""
    errors: dict[str, str] = {}
    for name, value in (("title", title), ("description", description)):
        try:
            normalize_text(name, value)
        except TaskValidationError as e:
            errors[name] = e.message
    if status is not None:
        try:
            normalize_status(status)
        except TaskValidationError as e:
            errors["status"] = e.message
    return errors
