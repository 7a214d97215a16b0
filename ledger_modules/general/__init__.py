"""Manual general journal entries."""

from ledger_modules.general.adapter import GeneralJournalAdapter
from ledger_modules.general.models import ManualJournalEntry, ManualJournalLine

__all__ = ["GeneralJournalAdapter", "ManualJournalEntry", "ManualJournalLine"]
