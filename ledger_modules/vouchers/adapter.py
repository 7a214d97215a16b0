"""
Voucher source adapter.

Prefixes::

    cash receipt  JV-RV      bank receipt  JV-BREC
    cash payment  JV-PV      bank payment  JV-BEXP

Receipt: Dr cash/bank, Cr contra.  Payment: Dr contra, Cr cash/bank.
The contra is the voucher's explicit account, else accounts receivable
for a customer, accounts payable for a supplier, else general expense.
"""

from datetime import date

from ledger_modules.base import AccountRole, PaymentChannel, SourceAdapter, credit, debit
from ledger_modules.vouchers.models import PartyType, Voucher, VoucherType

_PREFIXES = {
    (VoucherType.RECEIPT, PaymentChannel.CASH): "JV-RV",
    (VoucherType.PAYMENT, PaymentChannel.CASH): "JV-PV",
    (VoucherType.RECEIPT, PaymentChannel.BANK): "JV-BREC",
    (VoucherType.PAYMENT, PaymentChannel.BANK): "JV-BEXP",
}


class VoucherAdapter(SourceAdapter[Voucher]):
    prefix = "JV-RV"
    source_module = "Voucher"

    def entry_prefix(self, document: Voucher) -> str:
        return _PREFIXES[(VoucherType(document.voucher_type), PaymentChannel(document.channel))]

    def document_id(self, document: Voucher) -> str:
        return document.voucher_id

    def entry_date(self, document: Voucher) -> date:
        return document.voucher_date

    def description(self, document: Voucher) -> str | None:
        if document.description:
            return document.description
        kind = VoucherType(document.voucher_type).value
        party = f" ({document.party_name})" if document.party_name else ""
        return f"{PaymentChannel(document.channel).value.capitalize()} {kind} {document.voucher_id}{party}"

    def contra_account(self, document: Voucher) -> str:
        if document.contra_account_id:
            return document.contra_account_id
        if document.party_type == PartyType.CUSTOMER:
            return self.account(AccountRole.ACCOUNTS_RECEIVABLE)
        if document.party_type == PartyType.SUPPLIER:
            return self.account(AccountRole.ACCOUNTS_PAYABLE)
        return self.account(AccountRole.GENERAL_EXPENSE)

    def build_lines(self, document: Voucher):
        money_account = document.money_account_id or self.mapping.channel_account(
            document.channel, type(self).__name__
        )
        contra = self.contra_account(document)
        if VoucherType(document.voucher_type) == VoucherType.RECEIPT:
            return [debit(money_account, document.amount), credit(contra, document.amount)]
        return [debit(contra, document.amount), credit(money_account, document.amount)]
