"""
General journal source adapter (``JV``).

Lines are taken as entered.  All-zero lines are dropped; a line with both
sides set is rejected by ProposedLine, and an unbalanced entry by
ProposedJournalEntry.  The default configuration lets these entries be
un-posted into a draft.
"""

from datetime import date

from ledger_kernel.domain.entry import ProposedLine
from ledger_modules.base import SourceAdapter
from ledger_modules.general.models import ManualJournalEntry


class GeneralJournalAdapter(SourceAdapter[ManualJournalEntry]):
    prefix = "JV"
    source_module = "General"

    def document_id(self, document: ManualJournalEntry) -> str:
        return document.entry_number

    def entry_date(self, document: ManualJournalEntry) -> date:
        return document.entry_date

    def description(self, document: ManualJournalEntry) -> str | None:
        return document.description

    def build_lines(self, document: ManualJournalEntry):
        for line in document.lines:
            if line.debit.is_zero and line.credit.is_zero:
                continue
            yield ProposedLine(
                account_id=line.account_id,
                debit=line.debit,
                credit=line.credit,
                description=line.description,
            )
