"""
Sales source adapters.

SalesInvoiceAdapter (``JV-SINV``)::

    Dr  Accounts receivable / cash / bank   gross
    Dr  Sales discount                      discount
        Cr  Sales revenue                   subtotal
        Cr  VAT payable                     VAT on (subtotal - discount)

CustomerPaymentAdapter (``JV-PAY-C``)::

    Dr  Cash / bank
        Cr  Accounts receivable
"""

from datetime import date

from ledger_kernel.domain.values import Money
from ledger_modules.base import AccountRole, SourceAdapter, credit, debit, vat_on
from ledger_modules.sales.models import CustomerPayment, SalesInvoice, SalesPaymentTerms


class SalesInvoiceAdapter(SourceAdapter[SalesInvoice]):
    prefix = "JV-SINV"
    source_module = "SalesInvoice"

    def document_id(self, document: SalesInvoice) -> str:
        return document.invoice_id

    def entry_date(self, document: SalesInvoice) -> date:
        return document.invoice_date

    def description(self, document: SalesInvoice) -> str | None:
        return document.description or f"Sales invoice {document.invoice_id}"

    def amounts(self, document: SalesInvoice) -> tuple[Money, Money]:
        """(VAT, gross) for the invoice."""
        taxable = document.subtotal - document.discount
        vat = vat_on(taxable, self.vat_rate_percent)
        return vat, taxable + vat

    def build_lines(self, document: SalesInvoice):
        vat, gross = self.amounts(document)
        terms = SalesPaymentTerms(document.terms)
        if terms == SalesPaymentTerms.CREDIT:
            receiving = self.account(AccountRole.ACCOUNTS_RECEIVABLE)
        elif terms == SalesPaymentTerms.BANK:
            receiving = self.account(AccountRole.BANK)
        else:
            receiving = self.account(AccountRole.CASH)

        return [
            debit(receiving, gross, f"Invoice {document.invoice_id} for {document.customer_id}"),
            debit(self.account(AccountRole.SALES_DISCOUNT), document.discount, "Sales discount"),
            credit(self.account(AccountRole.SALES_REVENUE), document.subtotal, "Sales revenue"),
            credit(self.account(AccountRole.VAT_PAYABLE), vat, "Output VAT"),
        ]


class CustomerPaymentAdapter(SourceAdapter[CustomerPayment]):
    prefix = "JV-PAY-C"
    source_module = "CustomerPayment"

    def document_id(self, document: CustomerPayment) -> str:
        return document.payment_id

    def entry_date(self, document: CustomerPayment) -> date:
        return document.payment_date

    def description(self, document: CustomerPayment) -> str | None:
        return document.description or f"Payment from customer {document.customer_id}"

    def build_lines(self, document: CustomerPayment):
        return [
            debit(self.mapping.channel_account(document.channel, type(self).__name__), document.amount),
            credit(self.account(AccountRole.ACCOUNTS_RECEIVABLE), document.amount),
        ]
