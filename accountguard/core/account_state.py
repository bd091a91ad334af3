"""Account State - per-account abuse signals composed from a ledger and two recency sets.

Invariants:
    - account_id is non-empty and immutable
    - credit_half_life > 0 and credit_limit >= 0, both fixed at initialize()
    - Successful-device and incorrect-hash sets never exceed their capacities
    - Every public operation runs under the account's own lock (single writer at a time)
    - Timestamps are always passed in explicitly; nothing reads the wall clock
    - Timestamps are stored as aware UTC; naive arguments are taken to be UTC

Design Decisions:
    - Plain in-memory object with an explicit snapshot boundary (core/account_snapshot.py);
      persistence is the shell's concern
    - password_material is opaque bytes supplied by the hashing collaborator and never inspected
    - Once an incorrect hash has been evicted, seeing it again counts as new
"""

import math
import threading
from datetime import datetime, timedelta

from accountguard.core.credit_ledger import CreditLedger
from accountguard.core.decay import as_utc
from accountguard.core.domain_types import (
    AccountId, HashValue,
    DEFAULT_CREDIT_LIMIT, DEFAULT_CREDIT_HALF_LIFE,
    DEFAULT_MAX_DEVICE_HASHES, DEFAULT_MAX_INCORRECT_HASHES,
)
from accountguard.core.errors import ConfigurationError, InvalidCreditAmountError
from accountguard.core.recency_set import RecencySet


class AccountState:
    """Live abuse-signal record for one account."""

    def __init__(
        self,
        account_id: AccountId,
        credit_limit: float,
        ledger: CreditLedger,
        successful_devices: RecencySet[HashValue],
        incorrect_hashes: RecencySet[HashValue],
        password_material: bytes | None = None,
    ):
        if not account_id or not account_id.strip():
            raise ConfigurationError("Account identity cannot be empty", "account_id")
        if credit_limit < 0:
            raise ConfigurationError(
                f"Credit limit cannot be negative, got {credit_limit}", "credit_limit",
            )
        self._account_id = account_id
        self._credit_limit = float(credit_limit)
        self._ledger = ledger
        self._successful_devices = successful_devices
        self._incorrect_hashes = incorrect_hashes
        self._password_material = password_material
        self._lock = threading.Lock()

    @classmethod
    def initialize(
        cls,
        account_id: AccountId,
        now: datetime,
        password_material: bytes | None = None,
        credit_limit: float = DEFAULT_CREDIT_LIMIT,
        credit_half_life: timedelta = DEFAULT_CREDIT_HALF_LIFE,
        max_device_hashes: int = DEFAULT_MAX_DEVICE_HASHES,
        max_incorrect_hashes: int = DEFAULT_MAX_INCORRECT_HASHES,
    ) -> "AccountState":
        """Create a fresh account with zero consumed credit as of `now`."""
        return cls(
            account_id=account_id,
            credit_limit=credit_limit,
            ledger=CreditLedger.empty(credit_half_life, as_utc(now)),
            successful_devices=RecencySet(max_device_hashes),
            incorrect_hashes=RecencySet(max_incorrect_hashes),
            password_material=password_material,
        )

    # --- Properties (Read-Only) ---

    @property
    def account_id(self) -> AccountId:
        return self._account_id

    @property
    def credit_limit(self) -> float:
        return self._credit_limit

    @property
    def credit_half_life(self) -> timedelta:
        return self._ledger.half_life

    @property
    def password_material(self) -> bytes | None:
        return self._password_material

    @property
    def ledger(self) -> CreditLedger:
        return self._ledger

    @property
    def successful_devices(self) -> RecencySet[HashValue]:
        return self._successful_devices

    @property
    def incorrect_hashes(self) -> RecencySet[HashValue]:
        return self._incorrect_hashes

    @property
    def lock(self) -> threading.Lock:
        """Held by every operation; take it to read a consistent snapshot."""
        return self._lock

    # --- Device history ---

    def has_device_succeeded_before(self, device_hash: HashValue) -> bool:
        with self._lock:
            return self._successful_devices.contains(device_hash)

    def record_successful_login(self, device_hash: HashValue, when: datetime) -> None:
        with self._lock:
            self._successful_devices.touch(device_hash, as_utc(when))

    # --- Incorrect password history ---

    def record_incorrect_attempt(self, password_hash: HashValue, when: datetime) -> bool:
        """Returns True if this exact wrong password hash is still remembered."""
        with self._lock:
            newly_inserted = self._incorrect_hashes.touch(password_hash, as_utc(when))
        return not newly_inserted

    # --- Credit ---

    def get_credits_consumed(self, as_of: datetime) -> float:
        with self._lock:
            return self._ledger.get_consumed(as_utc(as_of))

    def consume_credit(self, amount: float, at: datetime) -> None:
        with self._lock:
            self._ledger.consume(amount, as_utc(at))

    def get_credits_remaining(self, as_of: datetime) -> float:
        with self._lock:
            return max(0.0, self._credit_limit - self._ledger.get_consumed(as_utc(as_of)))

    def try_get_credit(self, amount_requested: float, at: datetime) -> float:
        """Grant up to `amount_requested` of the remaining credit and consume it.

        Returns the amount actually granted (0.0 when the limit is exhausted).
        """
        with self._lock:
            if math.isnan(amount_requested) or amount_requested < 0:
                raise InvalidCreditAmountError(amount_requested)
            at = as_utc(at)
            remaining = max(0.0, self._credit_limit - self._ledger.get_consumed(at))
            granted = min(amount_requested, remaining)
            self._ledger.consume(granted, at)
            return granted
