"""SuccessfulLoginCookie ORM - hashed device cookies that have logged into an account.

Invariants:
    - (account_id, hashed_value) is unique
    - Row count per account never exceeds the account's max_device_hashes
"""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from accountguard.db.base import Base


class SuccessfulLoginCookie(Base):
    """One remembered device-cookie hash."""
    __tablename__ = "successful_login_cookies"
    __table_args__ = (
        UniqueConstraint("account_id", "hashed_value", name="uq_cookie_per_account"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[str] = mapped_column(
        String(320),
        ForeignKey("user_accounts.account_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    hashed_value: Mapped[str] = mapped_column(String(128), nullable=False)
    time_last_seen: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
