"""Domain Types - verifies identity wrappers and account defaults."""

from datetime import timedelta

from accountguard.core.domain_types import (
    AccountId, HashValue,
    DEFAULT_CREDIT_LIMIT, DEFAULT_CREDIT_HALF_LIFE,
    DEFAULT_MAX_DEVICE_HASHES, DEFAULT_MAX_INCORRECT_HASHES,
)


def test_identity_types_wrap_str():
    assert AccountId("alice") == "alice"
    assert HashValue("abc123") == "abc123"


def test_defaults_are_valid_account_parameters():
    assert DEFAULT_CREDIT_LIMIT >= 0
    assert DEFAULT_CREDIT_HALF_LIFE > timedelta(0)
    assert DEFAULT_MAX_DEVICE_HASHES >= 1


def test_password_history_larger_than_device_history():
    assert DEFAULT_MAX_INCORRECT_HASHES > DEFAULT_MAX_DEVICE_HASHES
