"""
General Journal Models (``ledger_modules.general.models``).
"""

from dataclasses import dataclass, field
from datetime import date

from ledger_kernel.domain.values import Money


@dataclass(frozen=True)
class ManualJournalLine:
    """One line keyed in by hand.  At most one of debit/credit is non-zero."""

    account_id: str
    debit: Money = field(default_factory=Money.zero)
    credit: Money = field(default_factory=Money.zero)
    description: str | None = None


@dataclass(frozen=True)
class ManualJournalEntry:
    """
    A journal voucher entered directly in the general ledger.

    Unlike the other documents, the accountant chooses the accounts; the
    adapter applies no account mapping.
    """

    entry_number: str
    entry_date: date
    description: str
    lines: tuple[ManualJournalLine, ...] = field(default_factory=tuple)
