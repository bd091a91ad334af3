"""Credit Ledger - decaying balance of consumed penalty-offsetting credit.

Invariants:
    - last_value >= 0 at all times
    - get_consumed() never mutates state
    - consume() folds decay and addition into one step; last_updated never moves backward
    - No upper clamp: comparing against the credit limit is the caller's policy
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from accountguard.core.decay import decay, decay_then_add
from accountguard.core.errors import ConfigurationError, InvalidCreditAmountError


@dataclass(frozen=True)
class DecayingValue:
    """Stored basis of a decaying quantity."""
    last_value: float
    last_updated: datetime


class CreditLedger:
    """Leaky bucket in reverse: consumption raises the balance, decay drains it."""

    def __init__(self, half_life: timedelta, value: DecayingValue):
        if half_life.total_seconds() <= 0:
            raise ConfigurationError(
                f"Credit half-life must be positive, got {half_life}", "credit_half_life",
            )
        if value.last_value < 0 or math.isnan(value.last_value):
            raise ConfigurationError(
                f"Consumed credit cannot be negative, got {value.last_value}", "last_value",
            )
        self._half_life = half_life
        self._value = value

    @classmethod
    def empty(cls, half_life: timedelta, now: datetime) -> "CreditLedger":
        return cls(half_life, DecayingValue(0.0, now))

    @property
    def half_life(self) -> timedelta:
        return self._half_life

    @property
    def value(self) -> DecayingValue:
        return self._value

    def get_consumed(self, as_of: datetime) -> float:
        return decay(
            self._value.last_value, self._half_life, self._value.last_updated, as_of,
        )

    def consume(self, amount: float, at: datetime) -> None:
        if math.isnan(amount) or amount < 0:
            raise InvalidCreditAmountError(amount)
        new_value = decay_then_add(
            self._value.last_value, self._half_life,
            self._value.last_updated, at, amount,
        )
        self._value = DecayingValue(new_value, max(self._value.last_updated, at))
