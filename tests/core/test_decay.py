"""Decay Engine - tests for exponential decay math.

Tests cover:
    - Half-life halves the value; zero elapsed leaves it unchanged
    - Negative elapsed time is clamped (never amplifies)
    - decay_then_add folds the increment after decaying
    - Non-positive half-life is a configuration error
"""

from datetime import datetime, timedelta, timezone

import pytest

from accountguard.core.decay import as_utc, decay, decay_then_add, elapsed_seconds
from accountguard.core.errors import ConfigurationError

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)


@pytest.mark.parametrize("value", [1.0, 10.0, 123.456])
@pytest.mark.parametrize("half_life", [timedelta(seconds=1), HOUR, timedelta(days=3)])
def test_one_half_life_halves_value(value, half_life):
    assert decay(value, half_life, T0, T0 + half_life) == pytest.approx(value / 2)


def test_zero_elapsed_returns_value_unchanged():
    assert decay(42.0, HOUR, T0, T0) == 42.0


def test_two_half_lives_quarter_value():
    assert decay(100.0, HOUR, T0, T0 + 2 * HOUR) == pytest.approx(25.0)


def test_time_before_last_update_is_clamped_not_amplified():
    assert decay(10.0, HOUR, T0, T0 - 5 * HOUR) == 10.0


def test_zero_value_stays_zero():
    assert decay(0.0, HOUR, T0, T0 + 10 * HOUR) == 0.0


def test_decay_then_add_adds_after_decay():
    assert decay_then_add(10.0, HOUR, T0, T0 + HOUR, 3.0) == pytest.approx(8.0)


def test_decay_then_add_with_skewed_time_adds_to_undecayed_value():
    assert decay_then_add(10.0, HOUR, T0, T0 - HOUR, 1.0) == pytest.approx(11.0)


@pytest.mark.parametrize("half_life", [timedelta(0), timedelta(seconds=-1)])
def test_non_positive_half_life_rejected(half_life):
    with pytest.raises(ConfigurationError) as exc_info:
        decay(1.0, half_life, T0, T0 + HOUR)
    assert exc_info.value.field == "half_life"


def test_elapsed_seconds_clamps_negative():
    assert elapsed_seconds(T0, T0 + HOUR) == 3600.0
    assert elapsed_seconds(T0 + HOUR, T0) == 0.0


def test_as_utc_treats_naive_as_utc():
    assert as_utc(datetime(2026, 1, 1, 3)) == datetime(2026, 1, 1, 3, tzinfo=timezone.utc)


def test_as_utc_converts_other_offsets():
    local = datetime(2026, 1, 1, 5, tzinfo=timezone(timedelta(hours=2)))
    converted = as_utc(local)
    assert converted == local
    assert converted.utcoffset() == timedelta(0)
