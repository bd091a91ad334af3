"""AccountGuard entry point - wires settings, logging, database and the account service.

Invariants:
    - Logging configured before the first service call
    - The database session manager is a process singleton (infrastructure/database.py)
    - Callers dispose the engine through shutdown()

Design Decisions:
    - Explicit wiring function instead of import-time side effects
"""

import logging

from accountguard.config import Settings, get_settings
from accountguard.infrastructure.account_repository import SqlAlchemyAccountRepository
from accountguard.infrastructure.database import init_db, get_db_manager
from accountguard.infrastructure.observability import setup_logging
from accountguard.services.account_service import AccountService

logger = logging.getLogger(__name__)


def create_account_service(settings: Settings | None = None) -> AccountService:
    """Build an AccountService backed by the configured database."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("AccountGuard started")
    return AccountService(SqlAlchemyAccountRepository(db), settings)


async def shutdown() -> None:
    """Dispose the database engine."""
    await get_db_manager().dispose()
    logger.info("AccountGuard shutting down")
