"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Repositories exchange snapshot dicts (core/account_snapshot.py), never ORM objects

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO; core pure functions that produce or
      consume the snapshots are never async themselves
"""

from typing import Protocol

from accountguard.core.domain_types import AccountId


class AccountRepository(Protocol):
    """Contract for account state persistence, implemented by shell."""
    async def get(self, account_id: AccountId) -> dict | None: ...
    async def save(self, snapshot: dict) -> None: ...
    async def exists(self, account_id: AccountId) -> bool: ...
