"""SQL Identity Repository — resolves bearer credentials to users.

Invariants:
    - Credentials are looked up by SHA-256 digest; the raw value is never stored
    - Revoked credentials resolve to None
    - issue_token / revoke_token exist for provisioning only; the task service
      never calls them

Design Decisions:
    - Same transaction-per-method shape and store_operation() wrapping as
      SqlTaskRepository
"""

import hashlib
import secrets
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.core.domain_types import OwnerId
from tasktracker.infrastructure.database import store_operation
from tasktracker.models.auth_token import AuthToken
from tasktracker.models.user import User


def digest_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SqlIdentityRepository:
    """Identity lookups backed by SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve(self, token: str) -> User | None:
        """Return the user bound to an active credential, else None."""
        async with store_operation(self.db, "resolve", "Identity"):
            result = await self.db.execute(
                select(User)
                .join(AuthToken, AuthToken.user_id == User.id)
                .where(AuthToken.token_digest == digest_token(token))
                .where(AuthToken.revoked_at.is_(None)),
            )
            return result.scalar_one_or_none()

    async def get_user(self, user_id: OwnerId) -> User | None:
        async with store_operation(self.db, "get_user", "Identity"):
            return await self.db.get(User, user_id)

    async def create_user(self, name: str, email: str) -> User:
        async with store_operation(self.db, "create_user", "Identity"):
            user = User(name=name.strip(), email=email.strip().lower())
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
            return user

    async def issue_token(self, user_id: OwnerId) -> str:
        """Create a new credential for a user and return its raw value."""
        token = secrets.token_urlsafe(32)
        async with store_operation(self.db, "issue_token", "Identity"):
            self.db.add(AuthToken(token_digest=digest_token(token), user_id=user_id))
            await self.db.commit()
        return token

    async def revoke_token(self, token: str) -> bool:
        async with store_operation(self.db, "revoke_token", "Identity"):
            row = await self.db.get(AuthToken, digest_token(token))
            if row is None or row.revoked_at is not None:
                return False
            row.revoked_at = datetime.now(timezone.utc)
            await self.db.commit()
            return True
