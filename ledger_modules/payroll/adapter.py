"""
Payroll source adapter (``JV-PAY``).

::

    Dr  Salary expense            basic salary
    Dr  Allowances expense        allowances
        Cr  Salaries payable      net pay
        Cr  Deductions payable    deductions
"""

from datetime import date

from ledger_modules.base import AccountRole, SourceAdapter, credit, debit
from ledger_modules.payroll.models import PayrollRun


class PayrollAdapter(SourceAdapter[PayrollRun]):
    prefix = "JV-PAY"
    source_module = "Payroll"

    def document_id(self, document: PayrollRun) -> str:
        return document.payroll_id

    def entry_date(self, document: PayrollRun) -> date:
        return document.period_end

    def description(self, document: PayrollRun) -> str | None:
        return document.description or f"Payroll {document.payroll_id}"

    def build_lines(self, document: PayrollRun):
        return [
            debit(self.account(AccountRole.SALARY_EXPENSE), document.basic_salary, "Basic salaries"),
            debit(self.account(AccountRole.ALLOWANCES_EXPENSE), document.allowances, "Allowances"),
            credit(self.account(AccountRole.SALARIES_PAYABLE), document.net_pay, "Net pay"),
            credit(self.account(AccountRole.PAYROLL_DEDUCTIONS), document.deductions, "Deductions"),
        ]
