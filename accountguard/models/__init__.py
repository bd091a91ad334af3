"""ORM Models - SQLAlchemy declarative models for persisted account state.

Invariants:
    - All models inherit from Base (db/base.py)
    - UserAccount is the aggregate root; recency rows are scoped by account_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all or autogenerate
"""

from accountguard.models.user_account import UserAccount  # noqa: F401
from accountguard.models.successful_login_cookie import SuccessfulLoginCookie  # noqa: F401
from accountguard.models.incorrect_phase_two_hash import IncorrectPhaseTwoHash  # noqa: F401
