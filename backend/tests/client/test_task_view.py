"""Task View — cache reconciliation, filtering, and in-flight exclusion.

Invariants:
    - create prepends, update/toggle replace in place, delete removes
    - failures leave the cache untouched and set `error`
    - visible == filter_tasks(cache, search, status) after every change
    - a second mutation on a busy task is refused without a request
    - concurrent sessions: the later write wins, no conflict is reported
"""

import asyncio
from uuid import uuid4

import httpx
import pytest

from tasktracker.client.api_client import TaskApiClient
from tasktracker.client.task_view import TaskView
from tasktracker.core.domain_types import ViewState
from tasktracker.core.errors import AuthenticationError
from tasktracker.core.task_filter import filter_tasks
from tasktracker.infrastructure.identity_repository import SqlIdentityRepository


async def _loaded(view: TaskView, *titles: str) -> TaskView:
    """Load, then create tasks in order (last title ends up first)."""
    assert await view.load()
    for title in titles:
        assert await view.create_task(title, f"{title} details") is not None
    return view


# ─── Loading ─────────────────────────────────────────────────────

async def test_view_starts_loading_then_ready(view):
    assert view.state is ViewState.LOADING
    assert await view.load() is True
    assert view.state is ViewState.READY
    assert view.cache == ()
    assert view.auth.user.name == "Alice"


async def test_load_mirrors_server_order(view, api):
    await api.create_task("First", "a")
    await api.create_task("Second", "b")
    await view.load()
    assert [t.title for t in view.cache] == ["Second", "First"]
    assert view.visible == view.cache


# ─── Create ──────────────────────────────────────────────────────

async def test_create_prepends_and_defaults_to_pending(view):
    await _loaded(view, "Older")
    task = await view.create_task("Buy milk", "2%")

    assert task.status == "pending"
    assert view.cache[0].id == task.id
    assert [t.title for t in view.cache] == ["Buy milk", "Older"]
    assert view.state is ViewState.READY


async def test_create_with_empty_title_sends_nothing(view, api):
    await view.load()
    assert await view.create_task("", "x") is None
    assert view.form_errors == {"title": "Title is required"}
    assert view.cache == ()
    assert await api.list_tasks() == []


# ─── Update / toggle ─────────────────────────────────────────────

async def test_toggle_pending_to_completed_keeps_content(view):
    await _loaded(view, "A", "B")
    target = view.cache[1]

    updated = await view.toggle_status(target.id)

    assert updated.status == "completed"
    assert (updated.title, updated.description) == (target.title, target.description)
    assert [t.id for t in view.cache] == [view.cache[0].id, target.id]
    assert view.cache[1].status == "completed"


async def test_toggle_twice_returns_to_pending(view):
    await _loaded(view, "A")
    task_id = view.cache[0].id
    await view.toggle_status(task_id)
    again = await view.toggle_status(task_id)
    assert again.status == "pending"


async def test_edit_replaces_entry_in_place(view):
    await _loaded(view, "A", "B", "C")
    order = [t.id for t in view.cache]

    await view.edit_task(order[1], title="Renamed")

    assert [t.id for t in view.cache] == order
    assert view.cache[1].title == "Renamed"
    assert view.cache[1].description == "B details"


async def test_edit_with_blank_field_is_rejected_locally(view):
    await _loaded(view, "A")
    before = view.cache
    assert await view.edit_task(before[0].id, description="  ") is None
    assert "description" in view.form_errors
    assert view.cache == before


async def test_failed_update_leaves_cache_untouched(view, api):
    await _loaded(view, "A")
    before = view.cache
    await api.delete_task(before[0].id)  # deleted behind the view's back

    assert await view.toggle_status(before[0].id) is None

    assert view.cache == before
    assert "not found" in view.error
    assert view.state is ViewState.READY


async def test_toggle_unknown_task_reports_error(view):
    await view.load()
    assert await view.toggle_status(uuid4()) is None
    assert view.error is not None


# ─── Delete ──────────────────────────────────────────────────────

async def test_delete_removes_entry(view):
    await _loaded(view, "A", "B")
    doomed = view.cache[0]
    assert await view.delete_task(doomed.id) is True
    assert [t.title for t in view.cache] == ["A"]


async def test_second_delete_surfaces_not_found(view, api):
    await _loaded(view, "A")
    task_id = view.cache[0].id
    await api.delete_task(task_id)

    assert await view.delete_task(task_id) is False
    assert len(view.cache) == 1
    assert view.error is not None


async def test_foreign_task_mutation_is_not_authorized(view, bob, open_session):
    await view.load()
    bob_api = await open_session(bob["token"])
    foreign = await bob_api.create_task("Bob's", "private")
    view._cache.append(foreign)  # simulate a stale or forged cache entry

    assert await view.toggle_status(foreign.id) is None
    assert view.error == "Not authorized"
    assert (await bob_api.list_tasks())[0].status == "pending"


# ─── Filtering ───────────────────────────────────────────────────

async def test_filters_are_pure_and_recomputed(view):
    await _loaded(view, "Buy milk", "Write report", "Call about milk")
    await view.toggle_status(view.cache[1].id)  # "Write report" → completed
    cache = view.cache

    view.set_search("MILK")
    assert [t.title for t in view.visible] == ["Call about milk", "Buy milk"]

    view.set_status_filter("completed")
    assert view.visible == ()

    view.set_search("")
    assert [t.title for t in view.visible] == ["Write report"]

    view.set_status_filter("all")
    assert view.visible == cache
    assert view.cache == cache


async def test_visible_tracks_cache_after_mutation(view):
    await _loaded(view, "alpha")
    view.set_search("beta")
    assert view.visible == ()

    await view.create_task("beta", "new")
    assert [t.title for t in view.visible] == ["beta"]
    assert list(view.visible) == filter_tasks(view.cache, "beta", "all")


# ─── In-flight exclusion ─────────────────────────────────────────

class _GatedTransport(httpx.AsyncBaseTransport):
    """Holds PUT requests until released."""

    def __init__(self, inner: httpx.AsyncBaseTransport):
        self.inner = inner
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def handle_async_request(self, request):
        if request.method == "PUT":
            self.entered.set()
            await self.release.wait()
        return await self.inner.handle_async_request(request)


async def test_second_mutation_on_busy_task_is_refused(
    app_transport, auth, alice,
):
    gate = _GatedTransport(app_transport)
    async with TaskApiClient(auth, "http://test", transport=gate) as api:
        await api.sign_in(alice["token"])
        view = TaskView(api, auth)
        await _loaded(view, "Alpha", "Bravo")
        busy_id, other_id = view.cache[0].id, view.cache[1].id

        first = asyncio.create_task(view.toggle_status(busy_id))
        await gate.entered.wait()

        assert view.state is ViewState.MUTATING
        assert view.is_busy(busy_id)
        assert not view.is_busy(other_id)
        assert await view.toggle_status(busy_id) is None
        assert "in progress" in view.error

        view.set_search("alpha")  # filters stay responsive on the stale cache
        assert [t.id for t in view.visible] == [other_id]

        gate.release.set()
        result = await first

    assert result.status == "completed"
    assert view.state is ViewState.READY
    assert not view.is_busy(busy_id)


# ─── Transport failures ──────────────────────────────────────────

class _DroppingTransport(httpx.AsyncBaseTransport):
    """Fails every mutating request with a connection error once armed."""

    def __init__(self, inner: httpx.AsyncBaseTransport):
        self.inner = inner
        self.armed = False

    async def handle_async_request(self, request):
        if self.armed and request.method != "GET":
            raise httpx.ConnectError("connection refused", request=request)
        return await self.inner.handle_async_request(request)


async def test_unreachable_api_leaves_cache_untouched(app_transport, auth, alice):
    dropping = _DroppingTransport(app_transport)
    async with TaskApiClient(auth, "http://test", transport=dropping) as api:
        await api.sign_in(alice["token"])
        view = TaskView(api, auth)
        await _loaded(view, "Alpha", "Bravo")
        before = view.cache
        dropping.armed = True

        assert await view.toggle_status(before[0].id) is None
        assert view.cache == before
        assert view.error == "Task API unreachable"

        assert await view.delete_task(before[1].id) is False
        assert await view.create_task("Charlie", "c") is None
        assert view.cache == before
        assert view.visible == before
        assert view.state is ViewState.READY
        assert auth.is_authenticated
        assert not view.is_busy(before[0].id)


# ─── Session lifecycle ───────────────────────────────────────────

async def test_authentication_failure_clears_session(view, alice, test_session_factory):
    await view.load()
    async with test_session_factory() as db:
        await SqlIdentityRepository(db).revoke_token(alice["token"])

    assert await view.create_task("t", "d") is None
    assert view.auth.is_authenticated is False
    assert view.auth.user is None


async def test_signed_out_client_sends_nothing(api):
    with pytest.raises(AuthenticationError):
        await api.list_tasks()


async def test_sign_in_with_bad_token_leaves_context_empty(api, auth):
    with pytest.raises(AuthenticationError):
        await api.sign_in("bogus")
    assert auth.is_authenticated is False


# ─── Concurrent sessions ─────────────────────────────────────────

async def test_concurrent_sessions_last_write_wins(view, alice, open_session):
    """No version check exists: the later write silently replaces the earlier one."""
    await _loaded(view, "Shared")
    task_id = view.cache[0].id
    other_device = await open_session(alice["token"])

    await view.edit_task(task_id, title="From laptop")
    await other_device.update_task(task_id, {"title": "From phone"})

    assert view.error is None
    assert view.cache[0].title == "From laptop"  # stale until re-fetched
    await view.load()
    assert view.cache[0].title == "From phone"
