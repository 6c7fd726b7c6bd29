"""Database Session Manager — async engine, per-request sessions, and the
single SQLAlchemy → StoreError mapping point.

Invariants:
    - A session that sees an exception is rolled back before it is closed
    - store_operation() is the only place SQLAlchemy errors become StoreError;
      repositories wrap every statement in it, sessions do not map errors
    - Driver detail goes to the log, never into the StoreError message

Design Decisions:
    - Module-level db_manager initialized in the FastAPI lifespan
    - expire_on_commit=False: returned rows stay readable after commit
    - Pool sizing only applied to server databases; SQLite manages its own pool
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from tasktracker.core.errors import StoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def store_operation(
    db: AsyncSession, name: str, store: str = "Task",
) -> AsyncGenerator[None, None]:
    """Run one repository operation; roll back and raise StoreError on failure."""
    try:
        yield
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            f"{store} store {name} failed: {e}",
            extra={"operation": name},
        )
        raise StoreError(name) from e


class DatabaseSessionManager:
    """Owns the async engine and hands out sessions."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def close_db() -> None:
    global db_manager
    if db_manager:
        await db_manager.dispose()
        db_manager = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
