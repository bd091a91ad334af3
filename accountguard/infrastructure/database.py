"""Database Session Manager - async engine and sessions for the account tables.

Invariants:
    - A session that raises is rolled back before the error leaves the context
    - Every SQLAlchemy exception surfaces as DatabaseError carrying the caller's operation name
    - SQLite URLs get no pool sizing options (their pools do not accept them)
    - One manager per process, created by init_db() and read back with get_db_manager()

Design Decisions:
    - Operation names ("load_account", "save_account", ...) come from the repository so a
      failed commit is attributable without parsing driver messages
    - create_schema() exists for SQLite development and tests; PostgreSQL goes through alembic
    - expire_on_commit=False: rows stay readable after commit without lazy loads
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from accountguard.core.errors import DatabaseError
from accountguard.db.base import Base
import accountguard.models  # noqa: F401

logger = logging.getLogger(__name__)

# Checked in order: IntegrityError and OperationalError are DBAPIError subclasses
_ERROR_MESSAGES: tuple[tuple[type[SQLAlchemyError], str], ...] = (
    (IntegrityError, "Integrity constraint violated"),
    (OperationalError, "Connection or operational error"),
    (DBAPIError, "Database driver error"),
    (SQLAlchemyError, "Database operation failed"),
)


class DatabaseSessionManager:
    """Owns the async engine that backs SqlAlchemyAccountRepository."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_options: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_options.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_options)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self, operation: str = "query") -> AsyncGenerator[AsyncSession, None]:
        """Session that rolls back and raises DatabaseError(operation) on failure."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            message = next(msg for kind, msg in _ERROR_MESSAGES if isinstance(e, kind))
            logger.error("%s during %s: %s", message, operation, e,
                extra={"operation": operation, "error_code": "DATABASE_ERROR"})
            raise DatabaseError(message, operation) from e
        finally:
            await session.close()

    async def create_schema(self) -> None:
        """Create the account tables if missing (SQLite / tests; production uses alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        try:
            async with self.session("health_check") as db:
                await db.execute(text("SELECT 1"))
            return True
        except DatabaseError:
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    if not db_manager:
        raise RuntimeError("Database not initialized: call init_db() first")
    return db_manager
