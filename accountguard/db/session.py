"""Standalone Session Factory - raw sessions over the account tables.

Invariants:
    - No error mapping and no pool tuning: callers see SQLAlchemy exceptions as-is
    - The caller owns the engine and disposes it via factory.kw["bind"]

Design Decisions:
    - Used to inspect stored recency rows independently of DatabaseSessionManager,
      e.g. from test fixtures and one-off maintenance scripts
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker


def create_session_factory(
    database_url: str, echo: bool = False,
) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to a fresh engine for `database_url`."""
    return async_sessionmaker(
        create_async_engine(database_url, echo=echo),
        class_=AsyncSession,
        expire_on_commit=False,
    )
