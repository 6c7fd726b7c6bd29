"""Identity boundary — credentials resolved before any task route runs."""

import pytest

from tasktracker.infrastructure.identity_repository import SqlIdentityRepository

TASKS = "/api/v1/tasks"


@pytest.mark.parametrize("method,path", [
    ("GET", TASKS),
    ("POST", TASKS),
    ("PUT", f"{TASKS}/00000000-0000-0000-0000-000000000000"),
    ("DELETE", f"{TASKS}/00000000-0000-0000-0000-000000000000"),
    ("GET", "/api/v1/users/me"),
])
async def test_missing_credential_is_401(client, method, path):
    res = await client.request(method, path, json={})
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"


async def test_unknown_credential_is_401(client):
    res = await client.get(TASKS, headers={"Authorization": "Bearer nope"})
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"


async def test_revoked_credential_is_401(client, alice, test_session_factory):
    async with test_session_factory() as db:
        assert await SqlIdentityRepository(db).revoke_token(alice["token"])

    res = await client.get(TASKS, headers=alice["headers"])
    assert res.status_code == 401


async def test_revoking_twice_reports_false(alice, test_session_factory):
    async with test_session_factory() as db:
        identity = SqlIdentityRepository(db)
        assert await identity.revoke_token(alice["token"]) is True
        assert await identity.revoke_token(alice["token"]) is False


async def test_profile_returns_current_user(client, alice):
    res = await client.get("/api/v1/users/me", headers=alice["headers"])
    assert res.status_code == 200
    assert res.json() == {
        "user": {
            "id": str(alice["user"].id),
            "name": "Alice",
            "email": "alice@example.com",
        },
    }


async def test_raw_token_is_not_stored(alice, test_session_factory):
    from sqlalchemy import select
    from tasktracker.models.auth_token import AuthToken

    async with test_session_factory() as db:
        digests = (await db.execute(select(AuthToken.token_digest))).scalars().all()
    assert alice["token"] not in digests
