"""Request Dependencies — identity resolution and service wiring for routes.

Invariants:
    - get_current_user runs before any task route body; no credential, an
      unknown one, or a revoked one raises AuthenticationError (401)
    - Routes receive an already-resolved owner id; they never read headers

Design Decisions:
    - HTTPBearer(auto_error=False): the missing-header case goes through our
      own AuthenticationError envelope instead of FastAPI's default 403
"""

import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.core.errors import AuthenticationError
from tasktracker.infrastructure.database import get_db
from tasktracker.infrastructure.identity_repository import SqlIdentityRepository
from tasktracker.infrastructure.task_repository import SqlTaskRepository
from tasktracker.models.user import User
from tasktracker.services.task_service import TaskService

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer credential to a user or reject the request."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    user = await SqlIdentityRepository(db).resolve(credentials.credentials)
    if user is None:
        logger.info("Rejected unknown or revoked credential")
        raise AuthenticationError("Invalid or expired credential")
    return user


def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(SqlTaskRepository(db))
