"""
Employee Settlement Models (``ledger_modules.settlements.models``).

Advances, loans, bonuses, deductions and custody settlements recorded
against an employee.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from ledger_kernel.domain.values import Money


class SettlementType(str, Enum):
    ADVANCE = "advance"
    LOAN = "loan"
    BONUS = "bonus"
    DEDUCTION = "deduction"
    CUSTODY_SETTLEMENT = "custody_settlement"

    @property
    def pays_employee(self) -> bool:
        """True when money (or salary credit) flows to the employee."""
        return self in (SettlementType.ADVANCE, SettlementType.LOAN, SettlementType.BONUS)


class SettlementPaymentMethod(str, Enum):
    CASH = "cash"
    BANK = "bank"
    SALARY = "salary"


@dataclass(frozen=True)
class EmployeeSettlement:
    """
    One settlement.

    account_id is the settlement account itself: the advances/loans
    receivable account, the bonus expense account, or the custody account.
    """

    settlement_id: str
    settlement_date: date
    employee_id: str
    settlement_type: SettlementType
    payment_method: SettlementPaymentMethod
    account_id: str
    amount: Money
    employee_name: str | None = None
    description: str | None = None
