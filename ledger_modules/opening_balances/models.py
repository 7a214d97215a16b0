"""
Opening Balance Models (``ledger_modules.opening_balances.models``).
"""

from dataclasses import dataclass, field
from datetime import date

from ledger_kernel.domain.values import Money
from ledger_kernel.models.account import AccountKind


@dataclass(frozen=True)
class OpeningBalanceLine:
    """
    Opening balance of one account.

    amount is signed by the account's normal side: positive means a normal
    balance (debit for assets and expenses, credit otherwise), negative a
    contra balance.
    """

    account_id: str
    kind: AccountKind
    amount: Money


@dataclass(frozen=True)
class OpeningBalanceBatch:
    """Opening balances captured when a company starts using the ledger."""

    batch_id: str
    as_of_date: date
    lines: tuple[OpeningBalanceLine, ...] = field(default_factory=tuple)
    description: str | None = None
