"""
Payroll adapter tests.
"""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import EntryAlreadyExistsError
from ledger_modules.payroll import PayrollAdapter, PayrollRun
from ledger_modules.sales import CustomerPayment, CustomerPaymentAdapter
from tests.modules.conftest import lines_of


def _run(**overrides):
    fields = dict(
        payroll_id="2026-01",
        period_end=date(2026, 1, 31),
        basic_salary=Money.of("10000"),
        allowances=Money.of("2000"),
        deductions=Money.of("500"),
    )
    fields.update(overrides)
    return PayrollRun(**fields)


class TestPayroll:
    def test_net_pay(self):
        assert _run().net_pay == Money.of("11500")

    def test_lines(self):
        entry = PayrollAdapter().derive_entry(_run())
        assert entry.entry_id == "JV-PAY-2026-01"
        assert entry.source_module == "Payroll"
        assert lines_of(entry) == [
            ("5000", "10000.00", "0.00"),
            ("5010", "2000.00", "0.00"),
            ("2100", "0.00", "11500.00"),
            ("2110", "0.00", "500.00"),
        ]

    def test_no_allowances_or_deductions(self):
        entry = PayrollAdapter().derive_entry(
            _run(allowances=Money.zero(), deductions=Money.zero())
        )
        assert lines_of(entry) == [("5000", "10000.00", "0.00"), ("2100", "0.00", "10000.00")]

    def test_post(self, post, balance):
        post(PayrollAdapter(), _run())
        assert balance("5000") == Decimal("10000.00")
        assert balance("2100") == Decimal("11500.00")
        assert balance("2110") == Decimal("500.00")

    def test_id_shared_with_customer_payment_is_not_a_duplicate(self, post, balance):
        """JV-PAY + C-7 spells the same id as the customer payment JV-PAY-C + 7."""
        post(
            CustomerPaymentAdapter(),
            CustomerPayment(
                payment_id="7",
                payment_date=date(2026, 1, 20),
                customer_id="CUST-1",
                amount=Money.of("300"),
            ),
        )

        with pytest.raises(EntryAlreadyExistsError) as exc_info:
            post(PayrollAdapter(), _run(payroll_id="C-7"))

        assert exc_info.value.entry_id == "JV-PAY-C-7"
        assert balance("5000") == Decimal("0.00")
