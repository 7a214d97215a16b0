"""Opening balances."""

from ledger_modules.opening_balances.adapter import OpeningBalanceAdapter
from ledger_modules.opening_balances.models import OpeningBalanceBatch, OpeningBalanceLine

__all__ = ["OpeningBalanceAdapter", "OpeningBalanceBatch", "OpeningBalanceLine"]
