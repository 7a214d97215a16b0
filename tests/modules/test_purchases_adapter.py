"""
Purchases adapter tests.
"""

import pytest
from datetime import date
from decimal import Decimal

from ledger_kernel.domain.values import Money
from ledger_modules.purchases import (
    PurchasePaymentTerms,
    SupplierInvoice,
    SupplierInvoiceAdapter,
    SupplierPayment,
    SupplierPaymentAdapter,
)
from tests.modules.conftest import lines_of


def _bill(**overrides):
    fields = dict(
        invoice_id="BILL-1",
        invoice_date=date(2026, 1, 12),
        supplier_id="SUP-1",
        net=Money.of("1000"),
    )
    fields.update(overrides)
    return SupplierInvoice(**fields)


class TestSupplierInvoice:
    def test_credit_bill(self):
        entry = SupplierInvoiceAdapter().derive_entry(_bill())

        assert entry.entry_id == "JV-PINV-BILL-1"
        assert entry.source_module == "SupplierInvoice"
        assert lines_of(entry) == [
            ("5200", "1000.00", "0.00"),
            ("1300", "150.00", "0.00"),
            ("2010", "0.00", "1150.00"),
        ]

    def test_expense_account_override(self):
        entry = SupplierInvoiceAdapter().derive_entry(_bill(expense_account_id="5100"))
        assert entry.lines[0].account_id == "5100"

    @pytest.mark.parametrize(
        "terms,account",
        [(PurchasePaymentTerms.CASH, "1011"), (PurchasePaymentTerms.BANK, "1012")],
    )
    def test_paid_bill(self, terms, account):
        entry = SupplierInvoiceAdapter().derive_entry(_bill(terms=terms))
        assert entry.lines[-1].account_id == account

    def test_post(self, post, balance):
        post(SupplierInvoiceAdapter(), _bill())
        assert balance("5200") == Decimal("1000.00")
        assert balance("1300") == Decimal("150.00")
        assert balance("2010") == Decimal("1150.00")


class TestSupplierPayment:
    def _payment(self, **overrides):
        fields = dict(
            payment_id="SP-1",
            payment_date=date(2026, 1, 25),
            supplier_id="SUP-1",
            amount=Money.of("1150"),
        )
        fields.update(overrides)
        return SupplierPayment(**fields)

    def test_defaults_to_bank(self):
        entry = SupplierPaymentAdapter().derive_entry(self._payment())
        assert entry.entry_id == "JV-PAY-S-SP-1"
        assert lines_of(entry) == [("2010", "1150.00", "0.00"), ("1012", "0.00", "1150.00")]

    def test_cash(self):
        entry = SupplierPaymentAdapter().derive_entry(self._payment(channel="cash"))
        assert entry.lines[1].account_id == "1011"

    def test_bill_then_payment_clears_payable(self, post, balance):
        post(SupplierInvoiceAdapter(), _bill())
        post(SupplierPaymentAdapter(), self._payment())
        assert balance("2010") == Decimal("0.00")
        assert balance("1012") == Decimal("-1150.00")
