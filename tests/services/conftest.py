"""Service test fixtures - AccountService over an in-memory repository.

Invariants:
    - Every test gets a fresh repository and a fresh service cache
    - Settings are constructed explicitly, never read from the cached get_settings()
"""

import pytest

from accountguard.config import Settings
from accountguard.infrastructure.memory_repository import InMemoryAccountRepository
from accountguard.services.account_service import AccountService


@pytest.fixture
def settings():
    return Settings(
        default_credit_limit=20.0,
        default_credit_half_life_hours=1.0,
        max_device_hashes_to_track=2,
        max_incorrect_hashes_to_track=3,
        persist_on_write=True,
    )


@pytest.fixture
def repository():
    return InMemoryAccountRepository()


@pytest.fixture
def service(repository, settings):
    return AccountService(repository, settings)
