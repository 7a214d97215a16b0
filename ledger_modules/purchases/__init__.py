"""Purchases: supplier invoices and supplier payments."""

from ledger_modules.purchases.adapter import SupplierInvoiceAdapter, SupplierPaymentAdapter
from ledger_modules.purchases.models import (
    PurchasePaymentTerms,
    SupplierInvoice,
    SupplierPayment,
)

__all__ = [
    "PurchasePaymentTerms",
    "SupplierInvoice",
    "SupplierInvoiceAdapter",
    "SupplierPayment",
    "SupplierPaymentAdapter",
]
