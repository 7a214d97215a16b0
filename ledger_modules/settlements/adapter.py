"""
Employee settlement source adapter (``JV-ESET``).

Advance, loan, bonus::

    Dr  settlement account
        Cr  cash / bank / salaries payable (by payment method)

Deduction, custody settlement::

    Dr  cash / bank / salaries payable
        Cr  settlement account
"""

from datetime import date

from ledger_modules.base import AccountRole, SourceAdapter, credit, debit
from ledger_modules.settlements.models import (
    EmployeeSettlement,
    SettlementPaymentMethod,
    SettlementType,
)


class EmployeeSettlementAdapter(SourceAdapter[EmployeeSettlement]):
    prefix = "JV-ESET"
    source_module = "EmployeeSettlement"

    def document_id(self, document: EmployeeSettlement) -> str:
        return document.settlement_id

    def entry_date(self, document: EmployeeSettlement) -> date:
        return document.settlement_date

    def description(self, document: EmployeeSettlement) -> str | None:
        if document.description:
            return document.description
        who = document.employee_name or document.employee_id
        return f"{SettlementType(document.settlement_type).value.replace('_', ' ').capitalize()} for {who}"

    def funding_account(self, method: SettlementPaymentMethod) -> str:
        method = SettlementPaymentMethod(method)
        if method == SettlementPaymentMethod.SALARY:
            return self.account(AccountRole.SALARIES_PAYABLE)
        if method == SettlementPaymentMethod.BANK:
            return self.account(AccountRole.BANK)
        return self.account(AccountRole.CASH)

    def build_lines(self, document: EmployeeSettlement):
        funding = self.funding_account(document.payment_method)
        if SettlementType(document.settlement_type).pays_employee:
            return [
                debit(document.account_id, document.amount),
                credit(funding, document.amount),
            ]
        return [
            debit(funding, document.amount),
            credit(document.account_id, document.amount),
        ]
