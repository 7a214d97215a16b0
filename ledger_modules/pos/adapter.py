"""
POS session source adapter (``JV-POSS``).

::

    Dr  POS cash             closing balance
    Dr  POS bank             card sales
    Dr  Accounts receivable  deferred sales
    Dr  Cash over/short      shortage
        Cr  POS cash         opening balance
        Cr  Sales revenue    total sales net of VAT
        Cr  VAT payable      VAT included in total sales
        Cr  Cash over/short  overage

VAT is extracted from the VAT-inclusive total: net is total / (1 + rate)
rounded half-up once, and VAT is total - net, so the two always add back
to the total.
"""

from datetime import date
from decimal import Decimal

from ledger_kernel.domain.values import Money
from ledger_modules.base import AccountRole, SourceAdapter, credit, debit
from ledger_modules.pos.models import POSSession


class POSSessionAdapter(SourceAdapter[POSSession]):
    prefix = "JV-POSS"
    source_module = "POSSession"

    def document_id(self, document: POSSession) -> str:
        return document.session_id

    def entry_date(self, document: POSSession) -> date:
        return document.closed_on

    def description(self, document: POSSession) -> str | None:
        return f"POS session {document.session_id} closed by {document.cashier_id}"

    def split_vat(self, total: Money) -> tuple[Money, Money]:
        """(net, VAT) of a VAT-inclusive total."""
        divisor = Decimal(1) + self.vat_rate_percent / Decimal(100)
        net = Money.from_computation(total.amount / divisor)
        return net, total - net

    def build_lines(self, document: POSSession):
        net, vat = self.split_vat(document.total_sales)
        difference = document.difference
        shortage = -difference if difference.is_negative else Money.zero()
        overage = difference if difference.is_positive else Money.zero()

        pos_cash = self.account(AccountRole.POS_CASH)
        over_short = self.account(AccountRole.CASH_OVER_SHORT)
        return [
            debit(pos_cash, document.closing_balance, "Cash counted at close"),
            debit(self.account(AccountRole.POS_BANK), document.card_sales, "Card sales"),
            debit(self.account(AccountRole.ACCOUNTS_RECEIVABLE), document.deferred_sales, "Deferred sales"),
            debit(over_short, shortage, "Drawer shortage"),
            credit(pos_cash, document.opening_balance, "Opening float"),
            credit(self.account(AccountRole.SALES_REVENUE), net, "Sales revenue"),
            credit(self.account(AccountRole.VAT_PAYABLE), vat, "Output VAT"),
            credit(over_short, overage, "Drawer overage"),
        ]
