"""Credit Ledger - tests for decaying consumed-credit accounting.

Tests cover:
    - consume then read with and without elapsed time
    - Reads never mutate the stored basis
    - Clock-skewed consumes clamp elapsed time and keep last_updated monotonic
    - Invalid amounts and construction parameters
"""

from datetime import datetime, timedelta, timezone

import pytest

from accountguard.core.credit_ledger import CreditLedger, DecayingValue
from accountguard.core.errors import ConfigurationError, InvalidCreditAmountError

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)


@pytest.fixture
def ledger():
    return CreditLedger.empty(HOUR, T0)


def test_empty_ledger_reads_zero(ledger):
    assert ledger.get_consumed(T0) == 0.0
    assert ledger.get_consumed(T0 + 10 * HOUR) == 0.0


def test_consume_then_read_at_same_time(ledger):
    ledger.consume(10, T0)
    assert ledger.get_consumed(T0) == 10


def test_consume_then_read_one_half_life_later(ledger):
    ledger.consume(10, T0)
    assert ledger.get_consumed(T0 + HOUR) == pytest.approx(5.0)


def test_consume_100_reads_25_after_two_hours(ledger):
    ledger.consume(100, T0)
    assert ledger.get_consumed(T0 + 2 * HOUR) == pytest.approx(25.0)


def test_consumes_accumulate_with_decay(ledger):
    ledger.consume(10, T0)
    ledger.consume(10, T0 + HOUR)
    assert ledger.get_consumed(T0 + HOUR) == pytest.approx(15.0)
    assert ledger.value.last_updated == T0 + HOUR


def test_read_does_not_mutate(ledger):
    ledger.consume(10, T0)
    ledger.get_consumed(T0 + 5 * HOUR)
    assert ledger.value == DecayingValue(10.0, T0)


def test_consume_zero_only_applies_decay(ledger):
    ledger.consume(8, T0)
    ledger.consume(0, T0 + HOUR)
    assert ledger.value.last_value == pytest.approx(4.0)


def test_skewed_consume_clamps_and_keeps_last_updated(ledger):
    ledger.consume(10, T0 + HOUR)
    ledger.consume(5, T0)
    assert ledger.value.last_value == pytest.approx(15.0)
    assert ledger.value.last_updated == T0 + HOUR


def test_ledger_may_exceed_any_limit(ledger):
    ledger.consume(1_000_000, T0)
    assert ledger.get_consumed(T0) == 1_000_000


@pytest.mark.parametrize("amount", [-1.0, float("nan")])
def test_invalid_amount_rejected(ledger, amount):
    with pytest.raises(InvalidCreditAmountError):
        ledger.consume(amount, T0)
    assert ledger.value == DecayingValue(0.0, T0)


def test_non_positive_half_life_rejected():
    with pytest.raises(ConfigurationError) as exc_info:
        CreditLedger.empty(timedelta(0), T0)
    assert exc_info.value.field == "credit_half_life"


def test_negative_stored_value_rejected():
    with pytest.raises(ConfigurationError):
        CreditLedger(HOUR, DecayingValue(-1.0, T0))
