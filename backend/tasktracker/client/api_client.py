"""Task API Client — httpx wrapper that speaks the task REST contract.

Invariants:
    - Sends the bearer credential held by AuthContext; never stores its own copy
    - Error envelopes decoded back into the core error hierarchy by code
    - Transport failures and timeouts raised as ServiceUnavailableError
    - No retry: every call is one request, the caller decides what to do next

Design Decisions:
    - Wrapper over raw httpx: the view only sees domain types and domain errors
    - transport is injectable so tests can route requests to the ASGI app in-process
"""

import logging
from uuid import UUID

import httpx

from tasktracker.client.auth_context import AuthContext
from tasktracker.config import Settings, get_settings
from tasktracker.core.errors import (
    AuthenticationError, ServiceUnavailableError, from_response,
)
from tasktracker.schemas.task import Task
from tasktracker.schemas.user import UserProfile

logger = logging.getLogger(__name__)

_API_PREFIX = "/api/v1"


class TaskApiClient:
    """Async client for the task tracker API."""

    def __init__(
        self,
        auth: AuthContext,
        base_url: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.auth = auth
        self._http = httpx.AsyncClient(
            base_url=base_url, timeout=timeout_seconds, transport=transport,
        )

    @classmethod
    def from_settings(
        cls, auth: AuthContext, settings: Settings | None = None,
    ) -> "TaskApiClient":
        settings = settings or get_settings()
        return cls(
            auth,
            base_url=settings.api_base_url,
            timeout_seconds=settings.api_timeout_seconds,
        )

    async def __aenter__(self) -> "TaskApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ─── Session ─────────────────────────────────────────────────

    async def sign_in(self, token: str) -> UserProfile:
        """Verify a credential against the profile endpoint and store it."""
        body = await self._send("GET", "/users/me", token=token)
        user = UserProfile.model_validate(body["user"])
        self.auth.login(user, token)
        return user

    async def get_profile(self) -> UserProfile:
        body = await self._request("GET", "/users/me")
        return UserProfile.model_validate(body["user"])

    # ─── Tasks ───────────────────────────────────────────────────

    async def list_tasks(self) -> list[Task]:
        body = await self._request("GET", "/tasks")
        return [Task.model_validate(t) for t in body.get("tasks", [])]

    async def create_task(
        self, title: str, description: str, status: str | None = None,
    ) -> Task:
        payload = {"title": title, "description": description}
        if status is not None:
            payload["status"] = status
        body = await self._request("POST", "/tasks", json=payload)
        return Task.model_validate(body["task"])

    async def update_task(self, task_id: UUID, fields: dict) -> Task:
        body = await self._request("PUT", f"/tasks/{task_id}", json=fields)
        return Task.model_validate(body["task"])

    async def delete_task(self, task_id: UUID) -> str:
        body = await self._request("DELETE", f"/tasks/{task_id}")
        return body.get("message", "")

    # ─── Transport ───────────────────────────────────────────────

    async def _request(
        self, method: str, path: str, json: dict | None = None,
    ) -> dict:
        if not self.auth.is_authenticated:
            raise AuthenticationError()
        return await self._send(method, path, json=json, token=self.auth.token)

    async def _send(
        self,
        method: str,
        path: str,
        json: dict | None = None,
        token: str | None = None,
    ) -> dict:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            response = await self._http.request(
                method, _API_PREFIX + path, json=json, headers=headers,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out: {e}")
            raise ServiceUnavailableError("Task API timed out") from e
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ServiceUnavailableError("Task API unreachable") from e

        body = _decode(response)
        if response.is_error:
            raise from_response(response.status_code, body)
        return body or {}


def _decode(response: httpx.Response) -> dict | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None
