"""Account Snapshot - tests for serialization/deserialization.

Invariants:
    - to_snapshot produces a JSON-safe dict
    - from_snapshot reconstructs an equivalent AccountState
    - Missing required keys raise SnapshotFormatError; optional keys fall back to defaults
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from accountguard.core.account_snapshot import (
    account_state_to_snapshot, account_state_from_snapshot,
)
from accountguard.core.account_state import AccountState
from accountguard.core.domain_types import DEFAULT_MAX_DEVICE_HASHES
from accountguard.core.errors import ConfigurationError, SnapshotFormatError

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)


@pytest.fixture
def populated():
    state = AccountState.initialize(
        "carol", T0, password_material=b"\xde\xad\xbe\xef",
        credit_limit=25.0, credit_half_life=2 * HOUR,
        max_device_hashes=3, max_incorrect_hashes=4,
    )
    state.record_successful_login("dev-b", T0 + 2 * HOUR)
    state.record_successful_login("dev-a", T0 + HOUR)
    state.record_incorrect_attempt("pw-1", T0 + 3 * HOUR)
    state.consume_credit(12.5, T0 + HOUR)
    return state


def test_snapshot_is_json_safe(populated):
    snapshot = account_state_to_snapshot(populated)
    assert json.loads(json.dumps(snapshot)) == snapshot


def test_snapshot_shape(populated):
    snapshot = account_state_to_snapshot(populated)
    assert snapshot["account_id"] == "carol"
    assert snapshot["password_material"] == "deadbeef"
    assert snapshot["credit_limit"] == 25.0
    assert snapshot["credit_half_life_seconds"] == 7200.0
    assert snapshot["consumed_credits"] == {
        "last_value": 12.5,
        "last_updated": (T0 + HOUR).isoformat(),
    }
    assert snapshot["max_device_hashes"] == 3
    assert snapshot["max_incorrect_hashes"] == 4
    assert [e["key"] for e in snapshot["successful_device_hashes"]] == ["dev-a", "dev-b"]
    assert snapshot["incorrect_password_hashes"] == [
        {"key": "pw-1", "last_seen": (T0 + 3 * HOUR).isoformat()},
    ]


def test_roundtrip_preserves_state(populated):
    restored = account_state_from_snapshot(account_state_to_snapshot(populated))
    assert restored.account_id == populated.account_id
    assert restored.password_material == populated.password_material
    assert restored.credit_limit == populated.credit_limit
    assert restored.credit_half_life == populated.credit_half_life
    assert restored.ledger.value == populated.ledger.value
    assert restored.successful_devices.entries() == populated.successful_devices.entries()
    assert restored.incorrect_hashes.entries() == populated.incorrect_hashes.entries()
    assert restored.successful_devices.capacity == 3
    assert restored.incorrect_hashes.capacity == 4


def test_restored_state_keeps_incorrect_hash_memory(populated):
    restored = account_state_from_snapshot(account_state_to_snapshot(populated))
    assert restored.record_incorrect_attempt("pw-1", T0 + 4 * HOUR) is True


def test_optional_keys_fall_back_to_defaults():
    restored = account_state_from_snapshot({
        "account_id": "dave",
        "credit_limit": 10.0,
        "credit_half_life_seconds": 3600.0,
        "consumed_credits": {"last_value": 0.0, "last_updated": T0.isoformat()},
    })
    assert restored.password_material is None
    assert restored.successful_devices.capacity == DEFAULT_MAX_DEVICE_HASHES
    assert len(restored.successful_devices) == 0
    assert len(restored.incorrect_hashes) == 0


def test_oversized_recency_list_truncated_to_most_recent(populated):
    snapshot = account_state_to_snapshot(populated)
    snapshot["max_device_hashes"] = 1
    restored = account_state_from_snapshot(snapshot)
    assert [e.key for e in restored.successful_devices.entries()] == ["dev-b"]


@pytest.mark.parametrize("missing", [
    "account_id", "credit_limit", "credit_half_life_seconds", "consumed_credits",
])
def test_missing_required_key_raises(populated, missing):
    snapshot = account_state_to_snapshot(populated)
    del snapshot[missing]
    with pytest.raises(SnapshotFormatError) as exc_info:
        account_state_from_snapshot(snapshot)
    assert exc_info.value.key == missing


def test_malformed_timestamp_raises(populated):
    snapshot = account_state_to_snapshot(populated)
    snapshot["incorrect_password_hashes"][0]["last_seen"] = "yesterday"
    with pytest.raises(SnapshotFormatError):
        account_state_from_snapshot(snapshot)


@pytest.mark.parametrize("key, value", [
    ("account_id", 42),
    ("credit_limit", None),
    ("credit_limit", "abc"),
    ("credit_limit", float("nan")),
    ("credit_half_life_seconds", "3600"),
    ("consumed_credits", None),
    ("consumed_credits", {"last_value": "x", "last_updated": T0.isoformat()}),
    ("password_material", "zz"),
    ("password_material", 123),
    ("max_device_hashes", "twelve"),
    ("max_incorrect_hashes", 2.5),
    ("successful_device_hashes", [None]),
    ("successful_device_hashes", "dev-a"),
    ("incorrect_password_hashes", [{"key": 7, "last_seen": T0.isoformat()}]),
])
def test_malformed_value_raises_snapshot_format_error(populated, key, value):
    snapshot = account_state_to_snapshot(populated)
    snapshot[key] = value
    with pytest.raises(SnapshotFormatError) as exc_info:
        account_state_from_snapshot(snapshot)
    assert exc_info.value.key == key


def test_non_dict_snapshot_raises():
    with pytest.raises(SnapshotFormatError):
        account_state_from_snapshot(["not", "a", "snapshot"])


def test_loaded_timestamps_are_utc(populated):
    snapshot = account_state_to_snapshot(populated)
    snapshot["consumed_credits"]["last_updated"] = "2026-01-01T03:00:00+02:00"
    restored = account_state_from_snapshot(snapshot)
    assert restored.ledger.value.last_updated == T0 + HOUR
    assert restored.ledger.value.last_updated.utcoffset() == timedelta(0)


def test_invalid_stored_half_life_is_configuration_error(populated):
    snapshot = account_state_to_snapshot(populated)
    snapshot["credit_half_life_seconds"] = 0
    with pytest.raises(ConfigurationError):
        account_state_from_snapshot(snapshot)
