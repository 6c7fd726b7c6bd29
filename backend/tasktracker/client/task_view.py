"""Task View — client-side cache of one user's tasks with local filtering.

Invariants:
    - The cache changes only after the API confirms a mutation:
        create → prepend, update/toggle → replace in place, delete → remove
    - A failed mutation leaves the cache untouched, sets `error`, and is not retried
    - `visible` is filter_tasks(cache, search_text, status_filter), recomputed
      explicitly after every cache or filter change; the cache itself is never filtered
    - At most one mutation per task id (and one create) is in flight; a second
      one is refused without sending a request
    - Toggle carries the cached title and description along with the flipped status

Design Decisions:
    - Mutation methods report failure through `error` / `form_errors` and a
      None/False return instead of raising: every failure is terminal for that
      attempt and the caller only needs to redraw
    - AuthenticationError clears the AuthContext: the user has to sign in again
    - Form input is pre-checked with the same validators the service uses, so an
      empty title never costs a round trip
"""

import logging
from uuid import UUID

from tasktracker.client.api_client import TaskApiClient
from tasktracker.client.auth_context import AuthContext
from tasktracker.core.domain_types import StatusFilter, TaskStatus, ViewState
from tasktracker.core.enforce_task_fields import (
    collect_field_errors, validate_task_changes,
)
from tasktracker.core.errors import (
    AuthenticationError, ConcurrencyError, ResourceNotFoundError,
    TaskTrackerError, TaskValidationError,
)
from tasktracker.core.task_filter import filter_tasks
from tasktracker.schemas.task import Task

logger = logging.getLogger(__name__)

NEW_TASK_SLOT = "new"


class TaskView:
    """Filterable, server-confirmed view over the signed-in user's tasks."""

    def __init__(self, api: TaskApiClient, auth: AuthContext):
        self.api = api
        self.auth = auth
        self._cache: list[Task] = []
        self._visible: list[Task] = []
        self._busy: set[UUID | str] = set()
        self._loaded = False
        self.search_text = ""
        self.status_filter = StatusFilter.ALL
        self.error: str | None = None
        self.form_errors: dict[str, str] = {}

    # ─── Read side ───────────────────────────────────────────────

    @property
    def state(self) -> ViewState:
        if not self._loaded:
            return ViewState.LOADING
        if self._busy:
            return ViewState.MUTATING
        return ViewState.READY

    @property
    def cache(self) -> tuple[Task, ...]:
        return tuple(self._cache)

    @property
    def visible(self) -> tuple[Task, ...]:
        return tuple(self._visible)

    def is_busy(self, task_id: UUID | str) -> bool:
        return task_id in self._busy

    def get(self, task_id: UUID) -> Task | None:
        return next((t for t in self._cache if t.id == task_id), None)

    def set_search(self, text: str) -> None:
        self.search_text = text
        self._refresh_visible()

    def set_status_filter(self, selector: StatusFilter | str) -> None:
        self.status_filter = StatusFilter(selector)
        self._refresh_visible()

    def clear_error(self) -> None:
        self.error = None
        self.form_errors = {}

    # ─── Loading ─────────────────────────────────────────────────

    async def load(self) -> bool:
        """Fetch profile and tasks, replacing the cache. Re-callable to refresh."""
        self._loaded = False
        self.clear_error()
        try:
            self.auth.update_user(await self.api.get_profile())
            tasks = await self.api.list_tasks()
        except TaskTrackerError as e:
            self._fail("load", e)
            return False
        finally:
            self._loaded = True
        self._cache = list(tasks)
        self._refresh_visible()
        return True

    # ─── Mutations ───────────────────────────────────────────────

    async def create_task(
        self, title: str, description: str, status: str | None = None,
    ) -> Task | None:
        self.clear_error()
        errors = collect_field_errors(title, description, status)
        if errors:
            self._reject_form(errors)
            return None
        if not self._claim(NEW_TASK_SLOT):
            return None
        try:
            task = await self.api.create_task(title, description, status)
        except TaskTrackerError as e:
            self._fail("create", e)
            return None
        finally:
            self._busy.discard(NEW_TASK_SLOT)
        self._cache.insert(0, task)
        self._refresh_visible()
        return task

    async def edit_task(self, task_id: UUID, **fields) -> Task | None:
        """Send the given fields as a partial update."""
        self.clear_error()
        try:
            validate_task_changes(fields)
        except TaskValidationError as e:
            self._reject_form({e.field: e.message})
            return None
        return await self._update(task_id, fields)

    async def toggle_status(self, task_id: UUID) -> Task | None:
        """Flip pending/completed, carrying title and description unchanged."""
        self.clear_error()
        current = self.get(task_id)
        if current is None:
            self._fail("toggle", ResourceNotFoundError("Task", str(task_id)))
            return None
        flipped = TaskStatus(current.status).toggled()
        return await self._update(task_id, {
            "title": current.title,
            "description": current.description,
            "status": flipped.value,
        })

    async def delete_task(self, task_id: UUID) -> bool:
        self.clear_error()
        if not self._claim(task_id):
            return False
        try:
            await self.api.delete_task(task_id)
        except TaskTrackerError as e:
            self._fail("delete", e)
            return False
        finally:
            self._busy.discard(task_id)
        self._cache = [t for t in self._cache if t.id != task_id]
        self._refresh_visible()
        return True

    # ─── Internals ───────────────────────────────────────────────

    async def _update(self, task_id: UUID, fields: dict) -> Task | None:
        if not self._claim(task_id):
            return None
        try:
            task = await self.api.update_task(task_id, fields)
        except TaskTrackerError as e:
            self._fail("update", e)
            return None
        finally:
            self._busy.discard(task_id)
        self._cache = [task if t.id == task_id else t for t in self._cache]
        self._refresh_visible()
        return task

    def _claim(self, slot: UUID | str) -> bool:
        if slot in self._busy:
            self._fail(
                "claim",
                ConcurrencyError("Another change to this task is still in progress"),
            )
            return False
        self._busy.add(slot)
        return True

    def _refresh_visible(self) -> None:
        self._visible = filter_tasks(
            self._cache, self.search_text, self.status_filter,
        )

    def _reject_form(self, errors: dict[str, str]) -> None:
        self.form_errors = errors
        self.error = next(iter(errors.values()))

    def _fail(self, operation: str, exc: TaskTrackerError) -> None:
        self.error = exc.context.user_message or exc.message
        if isinstance(exc, TaskValidationError):
            self.form_errors = {exc.field: exc.message}
        if isinstance(exc, AuthenticationError):
            self.auth.logout()
        logger.warning(
            f"Task {operation} failed: {exc.message}",
            extra={"operation": operation, "error_code": exc.code},
        )
