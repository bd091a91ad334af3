"""UserAccount ORM - persists the scalar fields of an account's abuse-signal state.

Invariants:
    - account_id is the string primary key (username, email or internal id)
    - credit_half_life_seconds is fixed at creation; changing it would invalidate stored decay bases
    - consumed_credits_* hold the DecayingValue basis, not a decayed reading

Design Decisions:
    - Recency rows live in their own tables with ON DELETE CASCADE; no ORM relationship,
      the repository reads and replaces them with explicit statements
"""

from datetime import datetime, timezone

from sqlalchemy import String, Float, Integer, DateTime, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column

from accountguard.db.base import Base


class UserAccount(Base):
    """Account aggregate root."""
    __tablename__ = "user_accounts"

    account_id: Mapped[str] = mapped_column(String(320), primary_key=True)
    password_material: Mapped[bytes | None] = mapped_column(
        LargeBinary, nullable=True,
    )
    credit_limit: Mapped[float] = mapped_column(Float, nullable=False)
    credit_half_life_seconds: Mapped[float] = mapped_column(Float, nullable=False)
    consumed_credits_last_value: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0,
    )
    consumed_credits_last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    max_device_hashes: Mapped[int] = mapped_column(Integer, nullable=False)
    max_incorrect_hashes: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
