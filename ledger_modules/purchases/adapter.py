"""
Purchases source adapters.

SupplierInvoiceAdapter (``JV-PINV``)::

    Dr  Purchases (or the invoice's expense account)   net
    Dr  Input VAT                                      VAT on net
        Cr  Accounts payable / cash / bank             gross

SupplierPaymentAdapter (``JV-PAY-S``)::

    Dr  Accounts payable
        Cr  Cash / bank
"""

from datetime import date

from ledger_modules.base import AccountRole, SourceAdapter, credit, debit, vat_on
from ledger_modules.purchases.models import (
    PurchasePaymentTerms,
    SupplierInvoice,
    SupplierPayment,
)


class SupplierInvoiceAdapter(SourceAdapter[SupplierInvoice]):
    prefix = "JV-PINV"
    source_module = "SupplierInvoice"

    def document_id(self, document: SupplierInvoice) -> str:
        return document.invoice_id

    def entry_date(self, document: SupplierInvoice) -> date:
        return document.invoice_date

    def description(self, document: SupplierInvoice) -> str | None:
        return document.description or f"Supplier invoice {document.invoice_id}"

    def build_lines(self, document: SupplierInvoice):
        vat = vat_on(document.net, self.vat_rate_percent)
        gross = document.net + vat
        terms = PurchasePaymentTerms(document.terms)
        if terms == PurchasePaymentTerms.CREDIT:
            paying = self.account(AccountRole.ACCOUNTS_PAYABLE)
        elif terms == PurchasePaymentTerms.BANK:
            paying = self.account(AccountRole.BANK)
        else:
            paying = self.account(AccountRole.CASH)

        return [
            debit(
                document.expense_account_id or self.account(AccountRole.PURCHASES),
                document.net,
                f"Bill {document.invoice_id} from {document.supplier_id}",
            ),
            debit(self.account(AccountRole.INPUT_VAT), vat, "Input VAT"),
            credit(paying, gross),
        ]


class SupplierPaymentAdapter(SourceAdapter[SupplierPayment]):
    prefix = "JV-PAY-S"
    source_module = "SupplierPayment"

    def document_id(self, document: SupplierPayment) -> str:
        return document.payment_id

    def entry_date(self, document: SupplierPayment) -> date:
        return document.payment_date

    def description(self, document: SupplierPayment) -> str | None:
        return document.description or f"Payment to supplier {document.supplier_id}"

    def build_lines(self, document: SupplierPayment):
        return [
            debit(self.account(AccountRole.ACCOUNTS_PAYABLE), document.amount),
            credit(self.mapping.channel_account(document.channel, type(self).__name__), document.amount),
        ]
