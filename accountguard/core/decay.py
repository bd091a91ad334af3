"""Decay Engine - exponential decay of a scalar value over elapsed time.

Invariants:
    - value(t) = last_value * 2^(-(t - last_updated) / half_life)
    - Elapsed time is clamped to zero: a `now` earlier than `last_updated` never amplifies
    - half_life must be strictly positive
    - as_utc() treats naive datetimes as UTC; every timestamp entering AccountState passes through it
"""

import math
from datetime import datetime, timedelta, timezone

from accountguard.core.errors import ConfigurationError


def as_utc(when: datetime) -> datetime:
    """Aware UTC datetime; naive input is interpreted as UTC."""
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc)


def elapsed_seconds(earlier: datetime, later: datetime) -> float:
    """Seconds from `earlier` to `later`, clamped to >= 0."""
    return max(0.0, (later - earlier).total_seconds())


def _half_life_seconds(half_life: timedelta) -> float:
    seconds = half_life.total_seconds()
    if seconds <= 0:
        raise ConfigurationError(
            f"Half-life must be positive, got {half_life}", "half_life",
        )
    return seconds


def decay(
    last_value: float,
    half_life: timedelta,
    last_updated: datetime,
    now: datetime,
) -> float:
    """Decay `last_value` from `last_updated` to `now`. Pure, no IO."""
    half_life_seconds = _half_life_seconds(half_life)
    elapsed = elapsed_seconds(last_updated, now)
    if elapsed == 0.0:
        return last_value
    return last_value * math.pow(2.0, -elapsed / half_life_seconds)


def decay_then_add(
    last_value: float,
    half_life: timedelta,
    last_updated: datetime,
    now: datetime,
    delta: float,
) -> float:
    """Decay to `now`, then add `delta`."""
    return decay(last_value, half_life, last_updated, now) + delta
