"""
Module: ledger_kernel.selectors.journal_selector
Responsibility: Read-only query access to journal entries and their lines,
    returned as frozen records.
Architecture position: Kernel > Selectors.  May import from models/ and
    selectors/base.py.

Invariants enforced:
    - Lines within a record are sorted by line_seq.

Failure modes:
    - Returns None or an empty list when nothing matches (never raises on
      absence of data).
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.models.journal import JournalEntry, JournalEntryStatus
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class JournalLineRecord:
    """Read-side view of a journal line."""

    line_seq: int
    account_id: str
    debit: Decimal
    credit: Decimal
    description: str | None


@dataclass(frozen=True)
class JournalEntryRecord:
    """Read-side view of a journal entry."""

    id: str
    entry_date: date
    description: str | None
    status: JournalEntryStatus
    source_module: str
    source_document_id: str
    purpose: str
    posted_at: datetime | None
    reversed_at: datetime | None
    reversal_of_id: str | None
    lines: tuple[JournalLineRecord, ...]

    @property
    def total_debits(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0.00"))

    @property
    def total_credits(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0.00"))

    @property
    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits


class JournalSelector(BaseSelector[JournalEntry]):
    """
    Selector for journal entry queries.

    Guarantees:
        - Read-only.
        - Multi-entry results are ordered by (entry_date, id).

    Non-goals:
        - Does not compute balances; use LedgerSelector.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def _to_record(self, entry: JournalEntry) -> JournalEntryRecord:
        return JournalEntryRecord(
            id=entry.id,
            entry_date=entry.entry_date,
            description=entry.description,
            status=JournalEntryStatus(entry.status),
            source_module=entry.source_module,
            source_document_id=entry.source_document_id,
            purpose=entry.purpose,
            posted_at=entry.posted_at,
            reversed_at=entry.reversed_at,
            reversal_of_id=entry.reversal_of_id,
            lines=tuple(
                JournalLineRecord(
                    line_seq=line.line_seq,
                    account_id=line.account_id,
                    debit=line.debit,
                    credit=line.credit,
                    description=line.description,
                )
                for line in sorted(entry.lines, key=lambda x: x.line_seq)
            ),
        )

    def get_entry(self, entry_id: str) -> JournalEntryRecord | None:
        entry = self.session.get(JournalEntry, entry_id)
        if entry is None:
            return None
        return self._to_record(entry)

    def find_by_source(
        self,
        source_module: str,
        source_document_id: str,
    ) -> list[JournalEntryRecord]:
        """Every entry (any status) derived from one source document."""
        entries = self.session.execute(
            select(JournalEntry)
            .where(
                JournalEntry.source_module == source_module,
                JournalEntry.source_document_id == source_document_id,
            )
            .order_by(JournalEntry.entry_date, JournalEntry.id)
        ).scalars()
        return [self._to_record(entry) for entry in entries]

    def list_entries(
        self,
        status: JournalEntryStatus | None = None,
        source_module: str | None = None,
    ) -> list[JournalEntryRecord]:
        query = select(JournalEntry)
        if status is not None:
            query = query.where(JournalEntry.status == JournalEntryStatus(status))
        if source_module is not None:
            query = query.where(JournalEntry.source_module == source_module)
        entries = self.session.execute(
            query.order_by(JournalEntry.entry_date, JournalEntry.id)
        ).scalars()
        return [self._to_record(entry) for entry in entries]
