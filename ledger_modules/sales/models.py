"""
Sales Domain Models (``ledger_modules.sales.models``).

Frozen value objects for the sales documents that reach the ledger:
invoices and customer payments.  Pure data with ZERO I/O; all monetary
fields are ``Money``.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from ledger_kernel.domain.values import Money


class SalesPaymentTerms(str, Enum):
    """Whether an invoice was sold on credit or paid on the spot."""

    CREDIT = "credit"
    CASH = "cash"
    BANK = "bank"


@dataclass(frozen=True)
class SalesInvoice:
    """
    A customer invoice.

    subtotal is the amount before discount and VAT.  VAT is charged on
    subtotal - discount.
    """

    invoice_id: str
    invoice_date: date
    customer_id: str
    subtotal: Money
    discount: Money = field(default_factory=Money.zero)
    terms: SalesPaymentTerms = SalesPaymentTerms.CREDIT
    description: str | None = None


@dataclass(frozen=True)
class CustomerPayment:
    """Money received from a customer against receivables."""

    payment_id: str
    payment_date: date
    customer_id: str
    amount: Money
    channel: str = "cash"
    description: str | None = None
