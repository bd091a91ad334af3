"""Initial schema - user_accounts, successful_login_cookies, incorrect_phase_two_hashes.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user_accounts",
        sa.Column("account_id", sa.String(320), primary_key=True),
        sa.Column("password_material", sa.LargeBinary, nullable=True),
        sa.Column("credit_limit", sa.Float, nullable=False),
        sa.Column("credit_half_life_seconds", sa.Float, nullable=False),
        sa.Column("consumed_credits_last_value", sa.Float, nullable=False, server_default="0"),
        sa.Column("consumed_credits_last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("max_device_hashes", sa.Integer, nullable=False),
        sa.Column("max_incorrect_hashes", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "successful_login_cookies",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "account_id", sa.String(320),
            sa.ForeignKey("user_accounts.account_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("hashed_value", sa.String(128), nullable=False),
        sa.Column("time_last_seen", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("account_id", "hashed_value", name="uq_cookie_per_account"),
    )
    op.create_index(
        "ix_successful_login_cookies_account_id", "successful_login_cookies", ["account_id"],
    )

    op.create_table(
        "incorrect_phase_two_hashes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "account_id", sa.String(320),
            sa.ForeignKey("user_accounts.account_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("hash_value", sa.String(128), nullable=False),
        sa.Column("time_last_seen", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("account_id", "hash_value", name="uq_incorrect_hash_per_account"),
    )
    op.create_index(
        "ix_incorrect_phase_two_hashes_account_id", "incorrect_phase_two_hashes", ["account_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_incorrect_phase_two_hashes_account_id", "incorrect_phase_two_hashes")
    op.drop_table("incorrect_phase_two_hashes")
    op.drop_index("ix_successful_login_cookies_account_id", "successful_login_cookies")
    op.drop_table("successful_login_cookies")
    op.drop_table("user_accounts")
