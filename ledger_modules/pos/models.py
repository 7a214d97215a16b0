"""
Point of Sale Models (``ledger_modules.pos.models``).
"""

from dataclasses import dataclass, field
from datetime import date

from ledger_kernel.domain.values import Money


@dataclass(frozen=True)
class POSSession:
    """
    A closed point-of-sale session.

    Sales amounts include VAT.  The drawer is expected to hold
    opening_balance + cash_sales at close; difference is what was actually
    counted minus that (negative for a shortage).
    """

    session_id: str
    closed_on: date
    cashier_id: str
    opening_balance: Money
    closing_balance: Money
    cash_sales: Money = field(default_factory=Money.zero)
    card_sales: Money = field(default_factory=Money.zero)
    deferred_sales: Money = field(default_factory=Money.zero)

    @property
    def total_sales(self) -> Money:
        return self.cash_sales + self.card_sales + self.deferred_sales

    @property
    def difference(self) -> Money:
        return self.closing_balance - (self.opening_balance + self.cash_sales)
