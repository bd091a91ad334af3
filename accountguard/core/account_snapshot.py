"""Account Snapshot - serialization / deserialization for AccountState.

Invariants:
    - account_state_to_snapshot produces a JSON-safe dict (no datetimes, no bytes, no sets)
    - The snapshot is taken under the account lock, so it never observes a half-applied mutation
    - Recency lists are ordered oldest-first and never longer than their capacity
    - account_state_from_snapshot raises SnapshotFormatError for missing or mistyped keys;
      optional keys fall back to account defaults

Design Decisions:
    - Free functions over methods on AccountState: keeps the persistence shape out of the domain object
    - Datetimes as ISO-8601 strings (normalized to UTC on load), password material as hex
"""

import math
from datetime import datetime, timedelta

from accountguard.core.account_state import AccountState
from accountguard.core.credit_ledger import CreditLedger, DecayingValue
from accountguard.core.decay import as_utc
from accountguard.core.domain_types import (
    AccountId, HashValue,
    DEFAULT_MAX_DEVICE_HASHES, DEFAULT_MAX_INCORRECT_HASHES,
)
from accountguard.core.errors import SnapshotFormatError
from accountguard.core.recency_set import RecencyEntry, RecencySet

_REQUIRED_KEYS: tuple[str, ...] = (
    "account_id", "credit_limit", "credit_half_life_seconds", "consumed_credits",
)


def _serialize_entries(recency_set: RecencySet[HashValue]) -> list[dict]:
    return [
        {"key": entry.key, "last_seen": entry.last_seen.isoformat()}
        for entry in recency_set.entries()
    ]


def _parse_datetime(raw: object, key: str) -> datetime:
    if not isinstance(raw, str):
        raise SnapshotFormatError(f"Expected ISO-8601 string for '{key}'", key)
    try:
        return as_utc(datetime.fromisoformat(raw))
    except ValueError:
        raise SnapshotFormatError(f"Malformed timestamp for '{key}': {raw!r}", key)


def _parse_float(raw: object, key: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or math.isnan(raw):
        raise SnapshotFormatError(f"Expected a number for '{key}', got {raw!r}", key)
    return float(raw)


def _parse_capacity(raw: object, key: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise SnapshotFormatError(f"Expected an integer for '{key}', got {raw!r}", key)
    return raw


def _parse_password_material(raw: object) -> bytes | None:
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise SnapshotFormatError("password_material must be a hex string", "password_material")
    try:
        return bytes.fromhex(raw)
    except ValueError:
        raise SnapshotFormatError("password_material is not valid hex", "password_material")


def _deserialize_entries(raw_entries: object, key: str) -> list[RecencyEntry[HashValue]]:
    if not isinstance(raw_entries, list):
        raise SnapshotFormatError(f"'{key}' must be a list", key)
    entries = []
    for raw in raw_entries:
        if not isinstance(raw, dict) or "key" not in raw or "last_seen" not in raw:
            raise SnapshotFormatError(f"Entry in '{key}' needs 'key' and 'last_seen'", key)
        if not isinstance(raw["key"], str):
            raise SnapshotFormatError(f"Entry key in '{key}' must be a string", key)
        entries.append(
            RecencyEntry(HashValue(raw["key"]), _parse_datetime(raw["last_seen"], key)),
        )
    return entries


def account_state_to_snapshot(state: AccountState) -> dict:
    """Serialize AccountState to a JSON-safe dict. Pure, no IO."""
    with state.lock:
        consumed = state.ledger.value
        material = state.password_material
        return {
            "account_id": state.account_id,
            "password_material": material.hex() if material is not None else None,
            "credit_limit": state.credit_limit,
            "credit_half_life_seconds": state.credit_half_life.total_seconds(),
            "consumed_credits": {
                "last_value": consumed.last_value,
                "last_updated": consumed.last_updated.isoformat(),
            },
            "max_device_hashes": state.successful_devices.capacity,
            "max_incorrect_hashes": state.incorrect_hashes.capacity,
            "successful_device_hashes": _serialize_entries(state.successful_devices),
            "incorrect_password_hashes": _serialize_entries(state.incorrect_hashes),
        }


def account_state_from_snapshot(data: dict) -> AccountState:
    """Reconstruct AccountState from a snapshot dict. Pure, no IO.

    Raises SnapshotFormatError for missing or mistyped keys, and
    ConfigurationError when well-formed values violate account invariants.
    """
    if not isinstance(data, dict):
        raise SnapshotFormatError("Snapshot must be a dict", "snapshot")
    for key in _REQUIRED_KEYS:
        if key not in data:
            raise SnapshotFormatError(f"Snapshot is missing '{key}'", key)

    account_id = data["account_id"]
    if not isinstance(account_id, str):
        raise SnapshotFormatError("account_id must be a string", "account_id")

    consumed = data["consumed_credits"]
    if (
        not isinstance(consumed, dict)
        or "last_value" not in consumed
        or "last_updated" not in consumed
    ):
        raise SnapshotFormatError(
            "consumed_credits needs 'last_value' and 'last_updated'", "consumed_credits",
        )
    ledger = CreditLedger(
        timedelta(seconds=_parse_float(
            data["credit_half_life_seconds"], "credit_half_life_seconds",
        )),
        DecayingValue(
            _parse_float(consumed["last_value"], "consumed_credits"),
            _parse_datetime(consumed["last_updated"], "consumed_credits"),
        ),
    )

    return AccountState(
        account_id=AccountId(account_id),
        credit_limit=_parse_float(data["credit_limit"], "credit_limit"),
        ledger=ledger,
        successful_devices=RecencySet.from_entries(
            _parse_capacity(
                data.get("max_device_hashes", DEFAULT_MAX_DEVICE_HASHES), "max_device_hashes",
            ),
            _deserialize_entries(
                data.get("successful_device_hashes", []), "successful_device_hashes",
            ),
        ),
        incorrect_hashes=RecencySet.from_entries(
            _parse_capacity(
                data.get("max_incorrect_hashes", DEFAULT_MAX_INCORRECT_HASHES),
                "max_incorrect_hashes",
            ),
            _deserialize_entries(
                data.get("incorrect_password_hashes", []), "incorrect_password_hashes",
            ),
        ),
        password_material=_parse_password_material(data.get("password_material")),
    )
