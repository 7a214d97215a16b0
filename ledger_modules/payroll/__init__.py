"""Payroll runs."""

from ledger_modules.payroll.adapter import PayrollAdapter
from ledger_modules.payroll.models import PayrollRun

__all__ = ["PayrollAdapter", "PayrollRun"]
