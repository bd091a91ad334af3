"""In-Memory Account Repository - process-local snapshot store.

Invariants:
    - Stored and returned snapshots are deep copies; callers never share state with the store

Design Decisions:
    - Same async Protocol as the SQLAlchemy repository so AccountService is backend-agnostic
"""

import copy

from accountguard.core.domain_types import AccountId


class InMemoryAccountRepository:
    """AccountRepository held in a dict, lost on restart."""

    def __init__(self):
        self._snapshots: dict[str, dict] = {}

    async def get(self, account_id: AccountId) -> dict | None:
        snapshot = self._snapshots.get(account_id)
        return copy.deepcopy(snapshot) if snapshot is not None else None

    async def save(self, snapshot: dict) -> None:
        self._snapshots[snapshot["account_id"]] = copy.deepcopy(snapshot)

    async def exists(self, account_id: AccountId) -> bool:
        return account_id in self._snapshots
