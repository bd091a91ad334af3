"""Infrastructure test fixtures - file-backed SQLite database per test.

Invariants:
    - Every test gets a fresh database with all tables created by create_schema()
    - db_manager and raw_session_factory point at the same file

Design Decisions:
    - File-backed SQLite (tmp_path) so a second engine can inspect rows directly
"""

import pytest

from accountguard.db.session import create_session_factory
from accountguard.infrastructure.account_repository import SqlAlchemyAccountRepository
from accountguard.infrastructure.database import DatabaseSessionManager


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'accountguard.db'}"


@pytest.fixture
async def db_manager(database_url):
    manager = DatabaseSessionManager(database_url)
    await manager.create_schema()
    yield manager
    await manager.dispose()


@pytest.fixture
async def raw_session(db_manager, database_url):
    factory = create_session_factory(database_url)
    async with factory() as session:
        yield session
    await factory.kw["bind"].dispose()


@pytest.fixture
def repository(db_manager):
    return SqlAlchemyAccountRepository(db_manager)
