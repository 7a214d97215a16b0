"""
Employee settlement adapter tests.
"""

import pytest
from datetime import date
from decimal import Decimal

from ledger_kernel.domain.values import Money
from ledger_modules.settlements import (
    EmployeeSettlement,
    EmployeeSettlementAdapter,
    SettlementPaymentMethod,
    SettlementType,
)
from tests.modules.conftest import lines_of


def _settlement(settlement_type, method, account_id="1400", amount="1000", **overrides):
    return EmployeeSettlement(
        settlement_id="ES-1",
        settlement_date=date(2026, 1, 28),
        employee_id="EMP-7",
        settlement_type=settlement_type,
        payment_method=method,
        account_id=account_id,
        amount=Money.of(amount),
        **overrides,
    )


class TestSettlementLines:
    def test_cash_advance(self):
        entry = EmployeeSettlementAdapter().derive_entry(
            _settlement(SettlementType.ADVANCE, SettlementPaymentMethod.CASH)
        )
        assert entry.entry_id == "JV-ESET-ES-1"
        assert entry.source_module == "EmployeeSettlement"
        assert lines_of(entry) == [("1400", "1000.00", "0.00"), ("1011", "0.00", "1000.00")]

    def test_loan_by_bank(self):
        entry = EmployeeSettlementAdapter().derive_entry(
            _settlement(SettlementType.LOAN, SettlementPaymentMethod.BANK)
        )
        assert entry.lines[1].account_id == "1012"

    def test_bonus_through_salary(self):
        entry = EmployeeSettlementAdapter().derive_entry(
            _settlement(SettlementType.BONUS, SettlementPaymentMethod.SALARY, account_id="5010")
        )
        assert lines_of(entry) == [("5010", "1000.00", "0.00"), ("2100", "0.00", "1000.00")]

    def test_deduction_from_salary(self):
        entry = EmployeeSettlementAdapter().derive_entry(
            _settlement(SettlementType.DEDUCTION, SettlementPaymentMethod.SALARY, amount="200")
        )
        assert lines_of(entry) == [("2100", "200.00", "0.00"), ("1400", "0.00", "200.00")]

    def test_custody_returned_in_cash(self):
        entry = EmployeeSettlementAdapter().derive_entry(
            _settlement(SettlementType.CUSTODY_SETTLEMENT, SettlementPaymentMethod.CASH)
        )
        assert lines_of(entry)[0] == ("1011", "1000.00", "0.00")

    @pytest.mark.parametrize(
        "settlement_type,pays",
        [
            (SettlementType.ADVANCE, True),
            (SettlementType.LOAN, True),
            (SettlementType.BONUS, True),
            (SettlementType.DEDUCTION, False),
            (SettlementType.CUSTODY_SETTLEMENT, False),
        ],
    )
    def test_pays_employee(self, settlement_type, pays):
        assert settlement_type.pays_employee is pays

    def test_description_uses_name(self):
        entry = EmployeeSettlementAdapter().derive_entry(
            _settlement(
                SettlementType.CUSTODY_SETTLEMENT,
                SettlementPaymentMethod.CASH,
                employee_name="Sara",
            )
        )
        assert entry.description == "Custody settlement for Sara"


class TestSettlementPosting:
    def test_advance_then_deduction(self, post, balance):
        post(
            EmployeeSettlementAdapter(),
            _settlement(SettlementType.ADVANCE, SettlementPaymentMethod.CASH),
        )
        post(
            EmployeeSettlementAdapter(),
            EmployeeSettlement(
                settlement_id="ES-2",
                settlement_date=date(2026, 2, 28),
                employee_id="EMP-7",
                settlement_type=SettlementType.DEDUCTION,
                payment_method=SettlementPaymentMethod.SALARY,
                account_id="1400",
                amount=Money.of("400"),
            ),
        )
        assert balance("1400") == Decimal("600.00")
        assert balance("1011") == Decimal("-1000.00")
        assert balance("2100") == Decimal("-400.00")
