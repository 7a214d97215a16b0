"""Database layer - engine, base classes, column types, and immutability."""

from ledger_kernel.db.base import Base, TrackedBase
from ledger_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    get_session_factory,
    session_scope,
)
from ledger_kernel.db.types import MONEY_DECIMAL_PLACES, MoneyAmount, round_money

__all__ = [
    "get_engine",
    "get_session",
    "get_session_factory",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "MoneyAmount",
    "MONEY_DECIMAL_PLACES",
    "round_money",
]
