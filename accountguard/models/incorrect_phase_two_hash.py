"""IncorrectPhaseTwoHash ORM - recent wrong-password hashes for an account.

Invariants:
    - (account_id, hash_value) is unique
    - Row count per account never exceeds the account's max_incorrect_hashes
"""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from accountguard.db.base import Base


class IncorrectPhaseTwoHash(Base):
    """One remembered incorrect phase-two hash."""
    __tablename__ = "incorrect_phase_two_hashes"
    __table_args__ = (
        UniqueConstraint("account_id", "hash_value", name="uq_incorrect_hash_per_account"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[str] = mapped_column(
        String(320),
        ForeignKey("user_accounts.account_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    hash_value: Mapped[str] = mapped_column(String(128), nullable=False)
    time_last_seen: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
