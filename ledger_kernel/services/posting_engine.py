"""
PostingEngine -- the journal entry state machine and posting transaction.

Responsibility:
    Moves journal entries through DRAFT -> POSTED -> REVERSED, applying
    balance deltas through AccountLedger in the same transaction as every
    status change.  Also persists, edits and deletes drafts, and un-posts
    entries by reversing them and re-drafting a copy.

Architecture position:
    Kernel > Services -- imperative shell.  Called by source modules
    (ledger_modules.base.post_document) with a ProposedJournalEntry built by
    a source adapter.  Delegates every balance write to AccountLedger.

Invariants enforced:
    - Atomicity: every operation runs inside a SAVEPOINT of the caller's
      transaction.  Any failure rolls back the entry rows and every balance
      delta written by that operation; no partial state is observable.
    - Idempotency: at most one POSTED entry per (source_module,
      source_document_id, purpose).  Checked before insert and enforced by
      the UNIQUE posting_key constraint inside the same transaction, so
      check-then-insert is atomic under concurrency.
    - Zero-sum: the debit-positive sum of deltas applied by one posting is
      exactly zero; otherwise the operation is aborted.
    - Legal transitions only (models.journal.VALID_TRANSITIONS).
    - Reversal swaps debit and credit; it never negates amounts.

Failure modes:
    - AccountNotFoundError: a line references a missing account.
    - DuplicatePostingError: idempotency key already posted (recoverable).
    - EntryAlreadyExistsError: entry id already used by a draft or by
      another document.
    - EntryNotFoundError / InvalidStateTransitionError: bad lifecycle call.
    - RedraftNotAllowedError: un-posting an entry from a module that does
      not permit it.
    - TransactionAbortedError: storage failure (deadlock, lock timeout,
      lost connection).  Safe to retry the whole call.

Audit relevance:
    Reversed entries are never deleted.  Every reversal is its own POSTED
    entry pointing at the original, and un-posting leaves the reversal in
    the journal, so the balance history is fully replayable.

Non-goals:
    - Does NOT commit.  The caller owns the outer transaction.
    - Does NOT retry.  Retries are the caller's decision.
    - Does NOT validate document-level business rules.
"""

import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.entry import ProposedJournalEntry
from ledger_kernel.exceptions import (
    DuplicatePostingError,
    EntryAlreadyExistsError,
    EntryNotFoundError,
    InvalidStateTransitionError,
    RedraftNotAllowedError,
    TransactionAbortedError,
    UnbalancedEntryError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.account import Account, signed_delta
from ledger_kernel.models.journal import (
    DELETABLE_STATUSES,
    EDITABLE_STATUSES,
    JournalEntry,
    JournalEntryStatus,
    JournalLine,
    validate_transition,
)
from ledger_kernel.services.account_ledger import AccountLedger
from ledger_kernel.services.base import BaseService
from ledger_kernel.utils.idempotency import (
    generate_idempotency_key,
    next_revision_id,
    reversal_entry_id,
)

logger = get_logger("services.posting_engine")

REVERSAL_SOURCE_MODULE = "Reversal"

T = TypeVar("T")


@dataclass(frozen=True)
class ReversalResult:
    """Outcome of reversing a posted entry."""

    original_entry_id: str
    reversal_entry_id: str
    reversed_at: datetime


@dataclass(frozen=True)
class UnpostResult:
    """Outcome of un-posting an entry: the reversal plus the fresh draft."""

    original_entry_id: str
    reversal_entry_id: str
    draft_entry_id: str


class PostingEngine(BaseService[JournalEntry]):
    """
    Posting state machine over journal entries and account balances.

    Contract:
        Parameterized by an already-open session.  Every public operation
        either completes entirely or leaves no trace in that session.

    Guarantees:
        - post()/post_draft() apply one delta per line via AccountLedger.
        - reverse() creates a POSTED compensating entry and marks the
          original REVERSED in one transaction.
        - unpost() is reverse() plus a new DRAFT copy; it never rolls back
          balances directly.

    Non-goals:
        - No engine-owned background work; concurrent callers each use their
          own session.
    """

    model = JournalEntry

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        redraftable_modules: Iterable[str] | None = None,
    ):
        """
        Args:
            session: Open session whose transaction the engine joins.
            clock: Source of posted_at / reversed_at timestamps.
            redraftable_modules: Source modules whose entries may be
                un-posted into drafts.  None permits every module.
        """
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._ledger = AccountLedger(session)
        self._redraftable = (
            frozenset(redraftable_modules) if redraftable_modules is not None else None
        )

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def post(self, entry: ProposedJournalEntry) -> str:
        """
        Persist a newly constructed entry as POSTED and apply its deltas.

        Preconditions:
            - entry is not yet persisted.
            - No POSTED entry holds entry.idempotency_key.

        Returns:
            The persisted journal entry id.

        Raises:
            DuplicatePostingError, EntryAlreadyExistsError,
            InvalidStateTransitionError, AccountNotFoundError,
            TransactionAbortedError.
        """
        key = entry.idempotency_key
        with LogContext.bind(
            source_module=entry.source_module,
            source_document_id=entry.source_document_id,
            entry_id=entry.entry_id,
        ):
            t0 = time.monotonic()
            logger.info(
                "posting_started",
                extra={
                    "idempotency_key": key,
                    "line_count": len(entry.lines),
                    "total": str(entry.total_debits),
                },
            )

            def work() -> None:
                self._ensure_new_entry(entry.entry_id, key)
                accounts = self._ledger.lock_accounts(entry.account_ids)
                row = self._new_row(
                    entry_id=entry.entry_id,
                    entry_date=entry.entry_date,
                    description=entry.description,
                    source_module=entry.source_module,
                    source_document_id=entry.source_document_id,
                    purpose=entry.purpose,
                    lines=[
                        (line.account_id, line.debit.amount, line.credit.amount, line.description)
                        for line in entry.lines
                    ],
                    status=JournalEntryStatus.POSTED,
                )
                self.session.add(row)
                self.session.flush()
                self._apply_lines(row.id, row.lines, accounts)

            self._atomic("post", entry.entry_id, key, work)

            logger.info(
                "posting_completed",
                extra={
                    "idempotency_key": key,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
        return entry.entry_id

    def save_draft(self, entry: ProposedJournalEntry) -> str:
        """
        Persist an entry as DRAFT.  Drafts never touch balances.

        Raises:
            DuplicatePostingError, EntryAlreadyExistsError,
            InvalidStateTransitionError, AccountNotFoundError.
        """
        with LogContext.bind(entry_id=entry.entry_id, source_module=entry.source_module):

            def work() -> None:
                self._ensure_new_entry(
                    entry.entry_id, entry.idempotency_key, check_posted_key=False
                )
                self._ledger.require_accounts(entry.account_ids)
                row = self._new_row(
                    entry_id=entry.entry_id,
                    entry_date=entry.entry_date,
                    description=entry.description,
                    source_module=entry.source_module,
                    source_document_id=entry.source_document_id,
                    purpose=entry.purpose,
                    lines=[
                        (line.account_id, line.debit.amount, line.credit.amount, line.description)
                        for line in entry.lines
                    ],
                    status=JournalEntryStatus.DRAFT,
                )
                self.session.add(row)
                self.session.flush()

            self._atomic("save_draft", entry.entry_id, None, work)
            logger.info("draft_saved", extra={"line_count": len(entry.lines)})
        return entry.entry_id

    def update_draft(self, entry_id: str, entry: ProposedJournalEntry) -> str:
        """
        Replace the header and lines of a DRAFT entry with those of entry.

        The draft keeps entry_id; entry.entry_id is not used.  Drafts never
        touch balances, so nothing else changes.

        Raises:
            EntryNotFoundError, InvalidStateTransitionError (not a DRAFT),
            AccountNotFoundError, TransactionAbortedError.
        """
        with LogContext.bind(entry_id=entry_id, source_module=entry.source_module):

            def work() -> None:
                row = self._load_for_update(entry_id)
                if row.status not in EDITABLE_STATUSES:
                    raise InvalidStateTransitionError(
                        entry_id=entry_id,
                        from_status=JournalEntryStatus(row.status).value,
                        to_status="updated",
                    )
                self._ledger.require_accounts(entry.account_ids)
                row.entry_date = entry.entry_date
                row.description = entry.description
                row.source_module = entry.source_module
                row.source_document_id = entry.source_document_id
                row.purpose = entry.purpose
                row.lines = [
                    JournalLine(
                        line_seq=seq,
                        account_id=line.account_id,
                        debit=line.debit.amount,
                        credit=line.credit.amount,
                        description=line.description,
                    )
                    for seq, line in enumerate(entry.lines)
                ]
                self.session.flush()

            self._atomic("update_draft", entry_id, None, work)
            logger.info("draft_updated", extra={"line_count": len(entry.lines)})
        return entry_id

    def post_draft(self, entry_id: str) -> str:
        """
        Move a DRAFT entry to POSTED and apply its deltas.

        Raises:
            EntryNotFoundError, InvalidStateTransitionError,
            DuplicatePostingError, AccountNotFoundError,
            TransactionAbortedError.
        """
        with LogContext.bind(entry_id=entry_id):
            t0 = time.monotonic()
            key = self._atomic(
                "post_draft",
                entry_id,
                None,
                lambda: self._load_for_update(entry_id).idempotency_key,
            )

            def work() -> None:
                row = self._load_for_update(entry_id)
                validate_transition(entry_id, row.status, JournalEntryStatus.POSTED)
                existing = self._posted_entry_id_for_key(key)
                if existing is not None:
                    raise self._duplicate(key, existing, "pre_check")
                accounts = self._ledger.lock_accounts(line.account_id for line in row.lines)
                row.status = JournalEntryStatus.POSTED
                row.posting_key = key
                row.posted_at = self._clock.now()
                self.session.flush()
                self._apply_lines(row.id, row.lines, accounts)

            self._atomic("post_draft", entry_id, key, work)
            logger.info(
                "posting_completed",
                extra={
                    "idempotency_key": key,
                    "from_draft": True,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
        return entry_id

    def delete_draft(self, entry_id: str) -> None:
        """
        Remove a DRAFT entry and its lines.

        Raises:
            EntryNotFoundError: If the entry does not exist.
            InvalidStateTransitionError: If the entry is not a DRAFT.
        """
        with LogContext.bind(entry_id=entry_id):

            def work() -> None:
                row = self._load_for_update(entry_id)
                if row.status not in DELETABLE_STATUSES:
                    raise InvalidStateTransitionError(
                        entry_id=entry_id,
                        from_status=JournalEntryStatus(row.status).value,
                        to_status="deleted",
                    )
                self.session.delete(row)
                self.session.flush()

            self._atomic("delete_draft", entry_id, None, work)
            logger.info("draft_deleted")

    def reverse(
        self,
        entry_id: str,
        reason: str | None = None,
        reversal_date: date | None = None,
    ) -> ReversalResult:
        """
        Reverse a POSTED entry with a compensating POSTED entry.

        The compensating entry swaps every line's debit and credit, is
        dated reversal_date (default: the original entry date), and
        references the original through reversal_of_id.  The original is
        marked REVERSED in the same transaction.

        Raises:
            EntryNotFoundError, InvalidStateTransitionError,
            AccountNotFoundError, TransactionAbortedError.
        """
        with LogContext.bind(entry_id=entry_id):
            t0 = time.monotonic()
            result = self._atomic(
                "reverse",
                entry_id,
                None,
                lambda: self._reverse_locked(entry_id, reason, reversal_date),
            )
            logger.info(
                "reversal_completed",
                extra={
                    "original_entry_id": result.original_entry_id,
                    "reversal_entry_id": result.reversal_entry_id,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
        return result

    def unpost(self, entry_id: str, reason: str | None = None) -> UnpostResult:
        """
        Un-post an entry: reverse it, then create a DRAFT copy of its lines.

        The draft carries the original source reference and purpose, so
        posting it later takes the idempotency key the reversal released.
        Its id is the next revision of the original id (X -> X~R1).

        Raises:
            RedraftNotAllowedError, EntryNotFoundError,
            InvalidStateTransitionError, EntryAlreadyExistsError,
            TransactionAbortedError.
        """
        with LogContext.bind(entry_id=entry_id):

            def work() -> UnpostResult:
                original = self._load_for_update(entry_id)
                if (
                    self._redraftable is not None
                    and original.source_module not in self._redraftable
                ):
                    raise RedraftNotAllowedError(entry_id, original.source_module)

                reversal = self._reverse_locked(entry_id, reason or "unposted", None)

                draft_id = next_revision_id(original.id)
                self._ensure_new_entry(
                    draft_id, original.idempotency_key, check_posted_key=False
                )
                draft = self._new_row(
                    entry_id=draft_id,
                    entry_date=original.entry_date,
                    description=original.description,
                    source_module=original.source_module,
                    source_document_id=original.source_document_id,
                    purpose=original.purpose,
                    lines=[
                        (line.account_id, line.debit, line.credit, line.description)
                        for line in original.lines
                    ],
                    status=JournalEntryStatus.DRAFT,
                )
                self.session.add(draft)
                self.session.flush()
                return UnpostResult(
                    original_entry_id=original.id,
                    reversal_entry_id=reversal.reversal_entry_id,
                    draft_entry_id=draft_id,
                )

            result = self._atomic("unpost", entry_id, None, work)
            logger.info(
                "entry_unposted",
                extra={
                    "reversal_entry_id": result.reversal_entry_id,
                    "draft_entry_id": result.draft_entry_id,
                },
            )
        return result

    # ------------------------------------------------------------------
    # Transaction handling
    # ------------------------------------------------------------------

    def _atomic(
        self,
        operation: str,
        entry_id: str,
        key: str | None,
        work: Callable[[], T],
    ) -> T:
        """
        Run work inside a SAVEPOINT and translate storage failures.

        An IntegrityError on a posting key that is now held by another
        POSTED entry means a concurrent writer won the race; it becomes
        DuplicatePostingError.  Every other driver error becomes
        TransactionAbortedError.  The savepoint is already rolled back when
        either is raised.
        """
        try:
            with self.session.begin_nested():
                return work()
        except IntegrityError as exc:
            if key is not None:
                existing = self._posted_entry_id_for_key(key)
                if existing is not None:
                    raise self._duplicate(key, existing, "unique_constraint") from exc
            logger.error(
                "transaction_aborted",
                extra={"operation": operation, "reason": "integrity_error"},
                exc_info=True,
            )
            raise TransactionAbortedError(operation, entry_id, str(exc.orig)) from exc
        except DBAPIError as exc:
            logger.error(
                "transaction_aborted",
                extra={"operation": operation, "reason": type(exc.orig).__name__},
                exc_info=True,
            )
            raise TransactionAbortedError(operation, entry_id, str(exc.orig)) from exc

    # ------------------------------------------------------------------
    # Internal steps (run inside _atomic)
    # ------------------------------------------------------------------

    def _reverse_locked(
        self,
        entry_id: str,
        reason: str | None,
        reversal_date: date | None,
    ) -> ReversalResult:
        original = self._load_for_update(entry_id)
        validate_transition(entry_id, original.status, JournalEntryStatus.REVERSED)

        accounts = self._ledger.lock_accounts(line.account_id for line in original.lines)
        now = self._clock.now()
        description = f"Reversal of {original.id}"
        if reason:
            description = f"{description}: {reason}"

        reversal = self._new_row(
            entry_id=reversal_entry_id(original.id),
            entry_date=reversal_date or original.entry_date,
            description=description,
            source_module=REVERSAL_SOURCE_MODULE,
            source_document_id=original.id,
            purpose=original.purpose,
            lines=[
                # Swap sides; amounts stay non-negative.
                (line.account_id, line.credit, line.debit, line.description)
                for line in original.lines
            ],
            status=JournalEntryStatus.POSTED,
            posted_at=now,
        )
        reversal.reversal_of_id = original.id
        self._ensure_new_entry(reversal.id, reversal.posting_key)

        original.status = JournalEntryStatus.REVERSED
        original.posting_key = None
        original.reversed_at = now

        self.session.add(reversal)
        self.session.flush()
        logger.info(
            "reversal_entry_posted",
            extra={
                "original_entry_id": original.id,
                "reversal_entry_id": reversal.id,
                "line_count": len(reversal.lines),
            },
        )
        self._apply_lines(reversal.id, reversal.lines, accounts)
        return ReversalResult(
            original_entry_id=original.id,
            reversal_entry_id=reversal.id,
            reversed_at=now,
        )

    def _apply_lines(
        self,
        entry_id: str,
        lines: Sequence[JournalLine],
        accounts: dict[str, Account],
    ) -> None:
        """
        Apply one signed delta per line and verify the zero-sum postcondition.
        """
        net = Decimal("0")
        for line in lines:
            account = accounts[line.account_id]
            delta = signed_delta(account.kind, line.debit, line.credit)
            self._ledger.apply_delta(line.account_id, delta)
            # Re-express in debit-positive terms for the zero-sum check
            net += delta if account.is_debit_normal else -delta

        if net != 0:
            raise UnbalancedEntryError(
                entry_id=entry_id,
                debits=str(sum((line.debit for line in lines), Decimal("0"))),
                credits=str(sum((line.credit for line in lines), Decimal("0"))),
            )

    def _new_row(
        self,
        *,
        entry_id: str,
        entry_date: date,
        description: str | None,
        source_module: str,
        source_document_id: str,
        purpose: str,
        lines: Iterable[tuple[str, Decimal, Decimal, str | None]],
        status: JournalEntryStatus,
        posted_at: datetime | None = None,
    ) -> JournalEntry:
        is_posted = status == JournalEntryStatus.POSTED
        row = JournalEntry(
            id=entry_id,
            entry_date=entry_date,
            description=description,
            status=status,
            source_module=source_module,
            source_document_id=source_document_id,
            purpose=purpose,
            posting_key=(
                generate_idempotency_key(source_module, source_document_id, purpose)
                if is_posted
                else None
            ),
            posted_at=(posted_at or self._clock.now()) if is_posted else None,
        )
        row.lines = [
            JournalLine(
                line_seq=seq,
                account_id=account_id,
                debit=debit,
                credit=credit,
                description=line_description,
            )
            for seq, (account_id, debit, credit, line_description) in enumerate(lines)
        ]
        return row

    def _ensure_new_entry(
        self,
        entry_id: str,
        key: str,
        *,
        check_posted_key: bool = True,
    ) -> None:
        """
        Refuse to create entry_id if it exists, or if key is already posted.

        An existing row for the same document (same idempotency key) is a
        retry: POSTED is a duplicate, REVERSED cannot be re-posted.  A row
        that belongs to another document, or any draft, makes the id
        unavailable.
        """
        existing = self._lock_row(entry_id)
        if existing is not None:
            status = JournalEntryStatus(existing.status)
            if existing.idempotency_key != key:
                logger.warning(
                    "entry_id_conflict",
                    extra={
                        "idempotency_key": key,
                        "existing_idempotency_key": existing.idempotency_key,
                        "existing_status": status.value,
                    },
                )
                raise EntryAlreadyExistsError(entry_id, status.value)
            if status == JournalEntryStatus.POSTED:
                raise self._duplicate(key, existing.id, "entry_id")
            if status == JournalEntryStatus.REVERSED:
                raise InvalidStateTransitionError(
                    entry_id=entry_id,
                    from_status=status.value,
                    to_status=JournalEntryStatus.POSTED.value,
                )
            raise EntryAlreadyExistsError(entry_id, status.value)

        if check_posted_key:
            holder = self._posted_entry_id_for_key(key)
            if holder is not None:
                raise self._duplicate(key, holder, "pre_check")

    def _load_for_update(self, entry_id: str) -> JournalEntry:
        row = self._lock_row(entry_id)
        if row is None:
            raise EntryNotFoundError(entry_id)
        return row

    def _posted_entry_id_for_key(self, key: str) -> str | None:
        return self.session.execute(
            select(JournalEntry.id).where(JournalEntry.posting_key == key)
        ).scalar_one_or_none()

    def _duplicate(self, key: str, existing_entry_id: str, detected_by: str) -> DuplicatePostingError:
        logger.warning(
            "duplicate_posting_rejected",
            extra={
                "idempotency_key": key,
                "existing_entry_id": existing_entry_id,
                "detected_by": detected_by,
            },
        )
        return DuplicatePostingError(key, existing_entry_id)
