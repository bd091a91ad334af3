"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - AccountId wraps the unique, non-empty account identifier (username, email or internal id)
    - HashValue wraps an opaque fixed-length hash produced outside the core
    - Defaults here are the values an account gets when settings do not override them

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
"""

from datetime import timedelta
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

AccountId = NewType("AccountId", str)
HashValue = NewType("HashValue", str)


# ─── Account Defaults ────────────────────────────────────────────

DEFAULT_CREDIT_LIMIT = 50.0
DEFAULT_CREDIT_HALF_LIFE = timedelta(hours=12)
DEFAULT_MAX_DEVICE_HASHES = 12
DEFAULT_MAX_INCORRECT_HASHES = 32
