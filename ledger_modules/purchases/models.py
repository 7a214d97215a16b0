"""
Purchases Domain Models (``ledger_modules.purchases.models``).

Frozen value objects for supplier invoices and supplier payments.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from ledger_kernel.domain.values import Money


class PurchasePaymentTerms(str, Enum):
    CREDIT = "credit"
    CASH = "cash"
    BANK = "bank"


@dataclass(frozen=True)
class SupplierInvoice:
    """
    A supplier bill.

    net is the amount before VAT.  expense_account_id overrides the
    purchases account (e.g. for a service bill booked to an expense).
    """

    invoice_id: str
    invoice_date: date
    supplier_id: str
    net: Money
    terms: PurchasePaymentTerms = PurchasePaymentTerms.CREDIT
    expense_account_id: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class SupplierPayment:
    payment_id: str
    payment_date: date
    supplier_id: str
    amount: Money
    channel: str = "bank"
    description: str | None = None
