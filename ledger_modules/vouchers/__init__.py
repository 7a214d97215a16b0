"""Vouchers: cash and bank receipts and payments."""

from ledger_modules.vouchers.adapter import VoucherAdapter
from ledger_modules.vouchers.models import PartyType, Voucher, VoucherType

__all__ = ["PartyType", "Voucher", "VoucherAdapter", "VoucherType"]
