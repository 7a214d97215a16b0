"""
Payroll Models (``ledger_modules.payroll.models``).
"""

from dataclasses import dataclass, field
from datetime import date

from ledger_kernel.domain.values import Money


@dataclass(frozen=True)
class PayrollRun:
    """
    Totals of one payroll run.

    Net pay is basic_salary + allowances - deductions.
    """

    payroll_id: str
    period_end: date
    basic_salary: Money
    allowances: Money = field(default_factory=Money.zero)
    deductions: Money = field(default_factory=Money.zero)
    description: str | None = None

    @property
    def net_pay(self) -> Money:
        return self.basic_salary + self.allowances - self.deductions
