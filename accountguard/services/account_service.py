"""Account Service - loads account state, runs core operations, persists the result.

Invariants:
    - At most one live AccountState per account id in this process
    - The cache holds at most max_cached_accounts accounts; the least recently used
      one is evicted first, and a dirty account is saved before it leaves
    - Loading a missing account from the repository is serialized by _load_lock
    - Saves of one account are serialized by its save lock, and each save snapshots the
      state after taking that lock, so the last save to finish carries the newest state
    - Core operations never await while holding an account lock
    - persist_on_write=True saves after every mutation; otherwise mutations mark the
      account dirty and flush() saves them
    - A mutation that lands while flush() is saving stays dirty for the next flush()
    - Clock skew is logged, never raised

Design Decisions:
    - Imperative shell around the pure core: IO (repository) happens before and after
      each synchronous AccountState call, never inside it
    - Repository injected as a Protocol: SQLAlchemy in production, in-memory in tests
    - Dirty accounts are tracked by state object, not id, so a pending change survives
      cache eviction until it is saved
"""

import asyncio
import logging
from collections import OrderedDict
from datetime import datetime, timedelta

from accountguard.config import Settings, get_settings
from accountguard.core.account_snapshot import (
    account_state_to_snapshot, account_state_from_snapshot,
)
from accountguard.core.account_state import AccountState
from accountguard.core.decay import as_utc, elapsed_seconds
from accountguard.core.domain_types import AccountId, HashValue
from accountguard.core.errors import (
    AccountAlreadyExistsError, AccountNotFoundError, DatabaseError,
)
from accountguard.core.repository_protocols import AccountRepository

logger = logging.getLogger(__name__)


class AccountService:
    """Bounded per-process cache of live accounts in front of an AccountRepository."""

    def __init__(self, repository: AccountRepository, settings: Settings | None = None):
        self._repository = repository
        self._settings = settings or get_settings()
        self._accounts: OrderedDict[str, AccountState] = OrderedDict()
        self._dirty: dict[str, AccountState] = {}
        self._save_locks: dict[str, asyncio.Lock] = {}
        self._load_lock = asyncio.Lock()

    # --- Lifecycle ---

    async def create_account(
        self,
        account_id: AccountId,
        now: datetime,
        password_material: bytes | None = None,
        credit_limit: float | None = None,
        credit_half_life: timedelta | None = None,
    ) -> AccountState:
        """Initialize and persist a new account. Settings supply unset defaults."""
        async with self._load_lock:
            if account_id in self._accounts or await self._repository.exists(account_id):
                raise AccountAlreadyExistsError(account_id)
            state = AccountState.initialize(
                account_id,
                now,
                password_material=password_material,
                credit_limit=(
                    self._settings.default_credit_limit
                    if credit_limit is None else credit_limit
                ),
                credit_half_life=(
                    self._settings.default_credit_half_life
                    if credit_half_life is None else credit_half_life
                ),
                max_device_hashes=self._settings.max_device_hashes_to_track,
                max_incorrect_hashes=self._settings.max_incorrect_hashes_to_track,
            )
            await self._save(state)
            await self._cache(state)
        logger.info("Account created", extra={"account_id": account_id})
        return state

    async def get_account(self, account_id: AccountId) -> AccountState:
        """Cached state, or load it from the repository on first use."""
        state = self._accounts.get(account_id)
        if state is not None:
            self._accounts.move_to_end(account_id)
            return state
        async with self._load_lock:
            state = self._accounts.get(account_id)
            if state is None:
                snapshot = await self._repository.get(account_id)
                if snapshot is None:
                    raise AccountNotFoundError(account_id)
                state = account_state_from_snapshot(snapshot)
                await self._cache(state)
        return state

    @property
    def cached_account_count(self) -> int:
        return len(self._accounts)

    def forget(self, account_id: AccountId) -> None:
        """Drop an account from the cache (e.g. after external deletion)."""
        self._accounts.pop(account_id, None)
        self._dirty.pop(account_id, None)
        self._save_locks.pop(account_id, None)

    async def flush(self) -> int:
        """Save every dirty account. Returns how many were saved.

        On a failed save, that account and the ones not yet saved stay dirty.
        """
        pending, self._dirty = self._dirty, {}
        order = sorted(pending)
        for index, account_id in enumerate(order):
            try:
                await self._save(pending[account_id])
            except DatabaseError:
                for unsaved in order[index:]:
                    self._dirty.setdefault(unsaved, pending[unsaved])
                raise
        return len(order)

    # --- Device history ---

    async def has_device_succeeded_before(
        self, account_id: AccountId, device_hash: HashValue,
    ) -> bool:
        state = await self.get_account(account_id)
        return state.has_device_succeeded_before(device_hash)

    async def record_successful_login(
        self, account_id: AccountId, device_hash: HashValue, when: datetime,
    ) -> None:
        state = await self.get_account(account_id)
        state.record_successful_login(device_hash, when)
        await self._after_mutation(state)

    # --- Incorrect password history ---

    async def record_incorrect_attempt(
        self, account_id: AccountId, password_hash: HashValue, when: datetime,
    ) -> bool:
        state = await self.get_account(account_id)
        seen_before = state.record_incorrect_attempt(password_hash, when)
        await self._after_mutation(state)
        return seen_before

    # --- Credit ---

    async def get_credits_consumed(self, account_id: AccountId, as_of: datetime) -> float:
        state = await self.get_account(account_id)
        return state.get_credits_consumed(as_of)

    async def get_credits_remaining(self, account_id: AccountId, as_of: datetime) -> float:
        state = await self.get_account(account_id)
        return state.get_credits_remaining(as_of)

    async def consume_credit(
        self, account_id: AccountId, amount: float, at: datetime,
    ) -> None:
        state = await self.get_account(account_id)
        self._warn_on_clock_skew(state, at, "consume_credit")
        state.consume_credit(amount, at)
        await self._after_mutation(state)

    async def try_get_credit(
        self, account_id: AccountId, amount_requested: float, at: datetime,
    ) -> float:
        state = await self.get_account(account_id)
        self._warn_on_clock_skew(state, at, "try_get_credit")
        granted = state.try_get_credit(amount_requested, at)
        await self._after_mutation(state)
        return granted

    # --- Internals ---

    async def _cache(self, state: AccountState) -> None:
        self._accounts[state.account_id] = state
        self._accounts.move_to_end(state.account_id)
        while len(self._accounts) > self._settings.max_cached_accounts:
            oldest_id, oldest = next(iter(self._accounts.items()))
            if oldest is state:
                break
            pending = self._dirty.pop(oldest_id, None)
            if pending is not None:
                try:
                    await self._save(pending)
                except DatabaseError:
                    self._dirty.setdefault(oldest_id, pending)
                    raise
            if self._accounts.get(oldest_id) is oldest:
                del self._accounts[oldest_id]
            lock = self._save_locks.get(oldest_id)
            if lock is not None and not lock.locked() and oldest_id not in self._dirty:
                del self._save_locks[oldest_id]
            logger.debug("Account evicted from cache", extra={"account_id": oldest_id})

    async def _after_mutation(self, state: AccountState) -> None:
        if self._settings.persist_on_write:
            await self._save(state)
        else:
            self._dirty[state.account_id] = state

    async def _save(self, state: AccountState) -> None:
        lock = self._save_locks.get(state.account_id)
        if lock is None:
            lock = self._save_locks[state.account_id] = asyncio.Lock()
        async with lock:
            snapshot = account_state_to_snapshot(state)
            try:
                await self._repository.save(snapshot)
            except DatabaseError as e:
                logger.error("Failed to save account state: %s", e.message,
                    extra={"account_id": state.account_id, "error_code": e.code})
                raise

    @staticmethod
    def _warn_on_clock_skew(state: AccountState, at: datetime, operation: str) -> None:
        with state.lock:
            last_updated = state.ledger.value.last_updated
        at = as_utc(at)
        if at < last_updated:
            logger.warning("Clock skew: timestamp earlier than last credit update",
                extra={
                    "account_id": state.account_id,
                    "operation": operation,
                    "skew_seconds": elapsed_seconds(at, last_updated),
                })
