"""Sales: customer invoices and customer payments."""

from ledger_modules.sales.adapter import CustomerPaymentAdapter, SalesInvoiceAdapter
from ledger_modules.sales.models import CustomerPayment, SalesInvoice, SalesPaymentTerms

__all__ = [
    "CustomerPayment",
    "CustomerPaymentAdapter",
    "SalesInvoice",
    "SalesInvoiceAdapter",
    "SalesPaymentTerms",
]
