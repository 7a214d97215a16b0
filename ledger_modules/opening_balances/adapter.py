"""
Opening balance source adapter (``OB``).

Each account's opening balance goes on its normal side (the opposite side
for a negative amount).  The difference between debits and credits is
booked to opening balance equity so the entry balances.
"""

from datetime import date

from ledger_kernel.domain.values import Money
from ledger_kernel.models.account import AccountKind
from ledger_modules.base import AccountRole, SourceAdapter, credit, debit
from ledger_modules.opening_balances.models import OpeningBalanceBatch


class OpeningBalanceAdapter(SourceAdapter[OpeningBalanceBatch]):
    prefix = "OB"
    source_module = "OpeningBalance"

    def document_id(self, document: OpeningBalanceBatch) -> str:
        return document.batch_id

    def entry_date(self, document: OpeningBalanceBatch) -> date:
        return document.as_of_date

    def description(self, document: OpeningBalanceBatch) -> str | None:
        return document.description or f"Opening balances as of {document.as_of_date.isoformat()}"

    def build_lines(self, document: OpeningBalanceBatch):
        lines = []
        debits = Money.zero()
        credits = Money.zero()
        for item in document.lines:
            on_debit = AccountKind(item.kind).is_debit_normal != item.amount.is_negative
            amount = -item.amount if item.amount.is_negative else item.amount
            if on_debit:
                lines.append(debit(item.account_id, amount, "Opening balance"))
                debits = debits + amount
            else:
                lines.append(credit(item.account_id, amount, "Opening balance"))
                credits = credits + amount

        equity = self.account(AccountRole.OPENING_BALANCE_EQUITY)
        if debits > credits:
            lines.append(credit(equity, debits - credits, "Opening balance equity"))
        elif credits > debits:
            lines.append(debit(equity, credits - debits, "Opening balance equity"))
        return lines
