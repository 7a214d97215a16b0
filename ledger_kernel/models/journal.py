"""
Module: ledger_kernel.models.journal
Responsibility: ORM persistence for journal entries and their lines -- the
    source of truth from which account balances are projected.
Architecture position: Kernel > Models.  May import from db/ and exceptions.

Invariants enforced:
    - At most one POSTED entry per (source_module, source_document_id,
      purpose).  posting_key carries that tuple while the entry is POSTED;
      it is NULL for drafts and cleared on reversal, and a UNIQUE constraint
      on it is checked by the database inside the inserting transaction.
    - Every line has non-negative debit and credit with exactly one side
      positive (CHECK constraints).
    - Status moves only along VALID_TRANSITIONS; DRAFT may also be edited
      or deleted.
    - Posted and reversed entries are immutable apart from the
      POSTED -> REVERSED flip (db/immutability.py).

Failure modes:
    - IntegrityError on a second POSTED entry for the same posting_key
      (translated to DuplicatePostingError by the posting engine).
    - InvalidStateTransitionError from validate_transition().

Audit relevance:
    Reversed entries are never deleted.  A reversal is a separate POSTED
    entry whose reversal_of_id points at the original, so the complete
    history can be replayed from this table alone.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase
from ledger_kernel.db.types import MoneyAmount
from ledger_kernel.exceptions import InvalidStateTransitionError


class JournalEntryStatus(str, Enum):
    """Status of a journal entry."""

    DRAFT = "draft"
    POSTED = "posted"
    REVERSED = "reversed"


VALID_TRANSITIONS: dict[JournalEntryStatus, frozenset[JournalEntryStatus]] = {
    JournalEntryStatus.DRAFT: frozenset({JournalEntryStatus.POSTED}),
    JournalEntryStatus.POSTED: frozenset({JournalEntryStatus.REVERSED}),
    JournalEntryStatus.REVERSED: frozenset(),
}

# Only drafts may be physically removed.
DELETABLE_STATUSES: frozenset[JournalEntryStatus] = frozenset(
    {JournalEntryStatus.DRAFT}
)

# Only drafts may be edited in place.
EDITABLE_STATUSES: frozenset[JournalEntryStatus] = frozenset(
    {JournalEntryStatus.DRAFT}
)


def validate_transition(
    entry_id: str,
    from_status: JournalEntryStatus,
    to_status: JournalEntryStatus,
) -> None:
    """
    Raise InvalidStateTransitionError unless from_status -> to_status is legal.
    """
    from_status = JournalEntryStatus(from_status)
    to_status = JournalEntryStatus(to_status)
    if to_status not in VALID_TRANSITIONS[from_status]:
        raise InvalidStateTransitionError(
            entry_id=entry_id,
            from_status=from_status.value,
            to_status=to_status.value,
        )


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class JournalEntry(TrackedBase):
    """
    Journal entry header -- the atomic unit of double-entry accounting.

    Contract:
        Each entry is derived from exactly one source document.  Its id is
        deterministic (module prefix + document id + optional revision), so a
        retried derivation produces the same id.

    Guarantees:
        - posting_key is non-NULL iff status is POSTED.
        - reversal_of_id is set only on compensating entries.

    Non-goals:
        - Balance is not enforced at the ORM level; ProposedJournalEntry
          validates it at construction and the posting engine re-checks the
          applied deltas.  is_balanced is a read-side convenience.
    """

    __tablename__ = "journal_entries"

    __table_args__ = (
        UniqueConstraint("posting_key", name="uq_journal_posting_key"),
        Index("idx_journal_source", "source_module", "source_document_id"),
        Index("idx_journal_entry_date", "entry_date"),
        Index("idx_journal_status", "status"),
    )

    id: Mapped[str] = mapped_column(String(128), primary_key=True)

    # Accounting date
    entry_date: Mapped[date] = mapped_column(nullable=False)

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[JournalEntryStatus] = mapped_column(
        SAEnum(
            JournalEntryStatus,
            native_enum=False,
            length=10,
            values_callable=_enum_values,
            validate_strings=True,
        ),
        default=JournalEntryStatus.DRAFT,
        nullable=False,
    )

    source_module: Mapped[str] = mapped_column(String(100), nullable=False)

    source_document_id: Mapped[str] = mapped_column(String(128), nullable=False)

    purpose: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="primary",
    )

    # source_module:source_document_id:purpose while POSTED, else NULL
    posting_key: Mapped[str | None] = mapped_column(String(300), nullable=True)

    # If this is a reversal, points to the original entry
    reversal_of_id: Mapped[str | None] = mapped_column(
        String(128),
        ForeignKey("journal_entries.id"),
        nullable=True,
    )

    posted_at: Mapped[datetime | None] = mapped_column(nullable=True)

    reversed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="JournalLine.line_seq",
    )

    reversal_of: Mapped["JournalEntry | None"] = relationship(
        remote_side="JournalEntry.id",
        foreign_keys=[reversal_of_id],
    )

    @property
    def is_balanced(self) -> bool:
        """Sum of line debits equals sum of line credits."""
        debits = sum((line.debit for line in self.lines), Decimal("0"))
        credits = sum((line.credit for line in self.lines), Decimal("0"))
        return debits == credits

    def __repr__(self) -> str:
        return f"<JournalEntry {self.id} status={JournalEntryStatus(self.status).value}>"

    @property
    def idempotency_key(self) -> str:
        return f"{self.source_module}:{self.source_document_id}:{self.purpose}"


class JournalLine(TrackedBase):
    """
    Individual debit or credit line within a journal entry.

    Contract:
        Each line belongs to exactly one JournalEntry and references exactly
        one Account.  Exactly one of debit/credit is positive; the other is
        zero.  Lines are immutable once the parent entry is POSTED.

    Guarantees:
        - line_seq gives the deterministic line order within the entry.
    """

    __tablename__ = "journal_entry_lines"

    __table_args__ = (
        CheckConstraint("debit >= 0 AND credit >= 0", name="ck_line_non_negative"),
        CheckConstraint(
            "(debit > 0 AND credit = 0) OR (credit > 0 AND debit = 0)",
            name="ck_line_single_side",
        ),
        Index("idx_line_entry", "journal_entry_id"),
        Index("idx_line_account", "account_id"),
    )

    # INTEGER (not BIGINT) so SQLite treats it as the rowid alias
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    journal_entry_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("journal_entries.id"),
        nullable=False,
    )

    line_seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    account_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("accounts.id"),
        nullable=False,
    )

    debit: Mapped[Decimal] = mapped_column(
        MoneyAmount(),
        nullable=False,
        default=Decimal("0.00"),
    )

    credit: Mapped[Decimal] = mapped_column(
        MoneyAmount(),
        nullable=False,
        default=Decimal("0.00"),
    )

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    entry: Mapped["JournalEntry"] = relationship(back_populates="lines")

    def __repr__(self) -> str:
        return (
            f"<JournalLine {self.account_id} "
            f"Dr {self.debit} Cr {self.credit}>"
        )
