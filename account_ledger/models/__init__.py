"""ORM Models: SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)
    - Account is the only entity

Design Decisions:
    - Imported here so Base.metadata is populated before create_all runs
"""

from account_ledger.models.account import Account  # noqa: F401
