"""Task Filter — pure derived view over a cached task sequence.

Invariants:
    - Input sequence is never mutated; a new list is returned
    - Input order is preserved (newest-first, as returned by list)
    - filter_tasks(filter_tasks(c, q, s), q, s) == filter_tasks(c, q, s)
    - Only the empty search text matches everything; search text is not trimmed

Design Decisions:
    - Works on any object with title/description/status attributes so the same
      function serves ORM rows and client-side Task schemas
"""

from collections.abc import Iterable
from typing import Protocol

from tasktracker.core.domain_types import StatusFilter


class Filterable(Protocol):
    title: str
    description: str
    status: str


def matches_search(task: Filterable, search_text: str) -> bool:
    """Case-insensitive substring match on title OR description."""
    needle = search_text.casefold()
    if not needle:
        return True
    return (
        needle in task.title.casefold()
        or needle in task.description.casefold()
    )


def matches_status(task: Filterable, status_filter: StatusFilter | str) -> bool:
    selector = StatusFilter(status_filter)
    if selector is StatusFilter.ALL:
        return True
    return _status_value(task.status) == selector.value


def filter_tasks(
    tasks: Iterable[Filterable],
    search_text: str = "",
    status_filter: StatusFilter | str = StatusFilter.ALL,
) -> list:
    """Tasks matching both the search text and the status selector, in input order."""
    selector = StatusFilter(status_filter)
    return [
        t for t in tasks
        if matches_search(t, search_text) and matches_status(t, selector)
    ]


def _status_value(status) -> str:
    return getattr(status, "value", status)
