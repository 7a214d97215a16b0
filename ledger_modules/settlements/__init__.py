"""Employee settlements: advances, loans, bonuses, deductions, custody."""

from ledger_modules.settlements.adapter import EmployeeSettlementAdapter
from ledger_modules.settlements.models import (
    EmployeeSettlement,
    SettlementPaymentMethod,
    SettlementType,
)

__all__ = [
    "EmployeeSettlement",
    "EmployeeSettlementAdapter",
    "SettlementPaymentMethod",
    "SettlementType",
]
