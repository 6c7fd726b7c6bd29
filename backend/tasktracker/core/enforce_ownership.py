"""Ownership Gate — the single owner-identity comparison used by every mutation.

Invariants:
    - PURE: no IO, no async
    - Both sides must be UUIDs; a string or None is a programming error, not a mismatch
    - A mismatch raises AuthorizationError with no task or owner detail attached

Design Decisions:
    - One gate, used by update and delete alike, instead of ad-hoc comparisons
      in each handler
"""

from uuid import UUID

from tasktracker.core.domain_types import OwnerId
from tasktracker.core.errors import AuthorizationError


def same_owner(task_owner: OwnerId, caller: OwnerId) -> bool:
    """Typed owner-identity equality."""
    if not isinstance(task_owner, UUID) or not isinstance(caller, UUID):
        raise TypeError("owner identities must be UUIDs")
    return task_owner == caller


def check_ownership(task_owner: OwnerId, caller: OwnerId) -> None:
    """Raise AuthorizationError unless caller owns the task."""
    if not same_owner(task_owner, caller):
        raise AuthorizationError()
