"""SQLAlchemy Account Repository - durable persistence of account snapshots.

Invariants:
    - save() writes the account row and replaces its recency rows in one transaction
    - get() returns a snapshot dict in the shape produced by core/account_snapshot.py
    - Naive datetimes read back (SQLite has no timezone storage) are interpreted as UTC
    - All SQLAlchemy failures surface as DatabaseError via DatabaseSessionManager

Design Decisions:
    - Replace-all on save: recency sets are tiny and bounded, so rewriting them is
      simpler than diffing inserts, refreshes and evictions
    - Explicit DELETE before INSERT keeps the per-account unique constraints satisfied
"""

from datetime import datetime

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from accountguard.core.decay import as_utc
from accountguard.core.domain_types import AccountId
from accountguard.infrastructure.database import DatabaseSessionManager
from accountguard.models.user_account import UserAccount
from accountguard.models.successful_login_cookie import SuccessfulLoginCookie
from accountguard.models.incorrect_phase_two_hash import IncorrectPhaseTwoHash


def _parse_utc(raw: str) -> datetime:
    return as_utc(datetime.fromisoformat(raw))


def _entry_dict(key: str, last_seen: datetime) -> dict:
    return {"key": key, "last_seen": as_utc(last_seen).isoformat()}


class SqlAlchemyAccountRepository:
    """AccountRepository backed by the user_accounts and recency tables."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def get(self, account_id: AccountId) -> dict | None:
        async with self._db.session("load_account") as session:
            account = await session.get(UserAccount, account_id)
            if account is None:
                return None
            cookies = await session.scalars(
                select(SuccessfulLoginCookie)
                .where(SuccessfulLoginCookie.account_id == account_id)
                .order_by(SuccessfulLoginCookie.time_last_seen, SuccessfulLoginCookie.id)
            )
            hashes = await session.scalars(
                select(IncorrectPhaseTwoHash)
                .where(IncorrectPhaseTwoHash.account_id == account_id)
                .order_by(IncorrectPhaseTwoHash.time_last_seen, IncorrectPhaseTwoHash.id)
            )
            material = account.password_material
            return {
                "account_id": account.account_id,
                "password_material": material.hex() if material is not None else None,
                "credit_limit": account.credit_limit,
                "credit_half_life_seconds": account.credit_half_life_seconds,
                "consumed_credits": {
                    "last_value": account.consumed_credits_last_value,
                    "last_updated": as_utc(
                        account.consumed_credits_last_updated,
                    ).isoformat(),
                },
                "max_device_hashes": account.max_device_hashes,
                "max_incorrect_hashes": account.max_incorrect_hashes,
                "successful_device_hashes": [
                    _entry_dict(c.hashed_value, c.time_last_seen) for c in cookies
                ],
                "incorrect_password_hashes": [
                    _entry_dict(h.hash_value, h.time_last_seen) for h in hashes
                ],
            }

    async def exists(self, account_id: AccountId) -> bool:
        async with self._db.session("account_exists") as session:
            result = await session.execute(
                select(UserAccount.account_id).where(UserAccount.account_id == account_id)
            )
            return result.scalar_one_or_none() is not None

    async def save(self, snapshot: dict) -> None:
        account_id = snapshot["account_id"]
        async with self._db.session("save_account") as session:
            account = await session.get(UserAccount, account_id)
            if account is None:
                account = UserAccount(account_id=account_id)
                session.add(account)
            self._apply_scalars(account, snapshot)

            await session.execute(
                delete(SuccessfulLoginCookie)
                .where(SuccessfulLoginCookie.account_id == account_id)
            )
            await session.execute(
                delete(IncorrectPhaseTwoHash)
                .where(IncorrectPhaseTwoHash.account_id == account_id)
            )
            self._add_recency_rows(session, account_id, snapshot)
            await session.commit()

    @staticmethod
    def _apply_scalars(account: UserAccount, snapshot: dict) -> None:
        consumed = snapshot["consumed_credits"]
        material_hex = snapshot.get("password_material")
        account.password_material = bytes.fromhex(material_hex) if material_hex else None
        account.credit_limit = snapshot["credit_limit"]
        account.credit_half_life_seconds = snapshot["credit_half_life_seconds"]
        account.consumed_credits_last_value = consumed["last_value"]
        account.consumed_credits_last_updated = _parse_utc(consumed["last_updated"])
        account.max_device_hashes = snapshot["max_device_hashes"]
        account.max_incorrect_hashes = snapshot["max_incorrect_hashes"]

    @staticmethod
    def _add_recency_rows(session: AsyncSession, account_id: str, snapshot: dict) -> None:
        session.add_all(
            SuccessfulLoginCookie(
                account_id=account_id,
                hashed_value=entry["key"],
                time_last_seen=_parse_utc(entry["last_seen"]),
            )
            for entry in snapshot.get("successful_device_hashes", [])
        )
        session.add_all(
            IncorrectPhaseTwoHash(
                account_id=account_id,
                hash_value=entry["key"],
                time_last_seen=_parse_utc(entry["last_seen"]),
            )
            for entry in snapshot.get("incorrect_password_hashes", [])
        )
