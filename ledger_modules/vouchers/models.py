"""
Voucher Domain Models (``ledger_modules.vouchers.models``).

Cash and bank receipt/payment vouchers.  A voucher moves money through a
cash box or bank account against one contra account.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from ledger_kernel.domain.values import Money
from ledger_modules.base import PaymentChannel


class VoucherType(str, Enum):
    RECEIPT = "receipt"
    PAYMENT = "payment"


class PartyType(str, Enum):
    CUSTOMER = "customer"
    SUPPLIER = "supplier"


@dataclass(frozen=True)
class Voucher:
    """
    A cash or bank voucher.

    Attributes:
        channel: cash box or bank.
        money_account_id: Specific cash/bank account; defaults to the
            mapped cash or bank account for the channel.
        contra_account_id: Explicit counter account.  When absent the
            contra is derived from party_type.
    """

    voucher_id: str
    voucher_date: date
    voucher_type: VoucherType
    amount: Money
    channel: PaymentChannel = PaymentChannel.CASH
    party_type: PartyType | None = None
    party_name: str | None = None
    money_account_id: str | None = None
    contra_account_id: str | None = None
    description: str | None = None
