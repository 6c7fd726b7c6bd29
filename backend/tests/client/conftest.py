"""Client fixtures — TaskApiClient/TaskView wired to the in-process app."""

import pytest

from tasktracker.client.api_client import TaskApiClient
from tasktracker.client.auth_context import AuthContext
from tasktracker.client.task_view import TaskView


@pytest.fixture
def auth():
    return AuthContext()


@pytest.fixture
async def api(app_transport, auth):
    async with TaskApiClient(
        auth, base_url="http://test", transport=app_transport,
    ) as client:
        yield client


@pytest.fixture
async def view(api, auth, alice):
    """Signed in as Alice, not yet loaded."""
    await api.sign_in(alice["token"])
    return TaskView(api, auth)


@pytest.fixture
async def open_session(app_transport):
    """Second, independent session (another user or another device)."""
    clients = []

    async def _make(token: str) -> TaskApiClient:
        client = TaskApiClient(
            AuthContext(), base_url="http://test", transport=app_transport,
        )
        await client.sign_in(token)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()
