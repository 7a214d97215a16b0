"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Read-only ledger projections -- trial balance, account
    statements with running balances, and reconciliation of the cached
    Account.balance column against the journal.
Architecture position: Kernel > Selectors.  May import from models/ and
    selectors/base.py.  MUST NOT import from services/.

Invariants enforced:
    - Only lines of POSTED and REVERSED entries count.  Every REVERSED entry
      has a POSTED compensating entry, so the pair nets to zero; drafts
      never count.
    - Signed balances follow the account kind: debit-normal accounts
      (asset, expense) are debits minus credits, the rest credits minus
      debits.  This matches what the posting engine writes to
      Account.balance.
    - Statement lines are ordered by (entry_date, posted_at, entry id,
      line_seq), so a re-read of the same data yields the same sequence.

Failure modes:
    - AccountNotFoundError from account_statement() for an unknown account.
    - Empty results and zero totals when nothing is posted.

Audit relevance:
    verify_balances() is the reconciliation check that the cached balance
    projection has not drifted from the journal it is derived from.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ledger_kernel.exceptions import AccountNotFoundError
from ledger_kernel.models.account import Account, AccountKind, signed_delta
from ledger_kernel.models.journal import JournalEntry, JournalEntryStatus, JournalLine
from ledger_kernel.selectors.base import BaseSelector

# Entry statuses whose lines make up the ledger.
LEDGER_STATUSES = (JournalEntryStatus.POSTED, JournalEntryStatus.REVERSED)

_ZERO = Decimal("0.00")


@dataclass(frozen=True)
class TrialBalanceRow:
    """A single row in a trial balance report."""

    account_id: str
    account_name: str
    kind: AccountKind
    debit_total: Decimal
    credit_total: Decimal

    @property
    def balance(self) -> Decimal:
        """Balance signed by the account's normal side."""
        return signed_delta(self.kind, self.debit_total, self.credit_total)


@dataclass(frozen=True)
class TrialBalance:
    """Trial balance as of a date."""

    as_of_date: date | None
    rows: tuple[TrialBalanceRow, ...]

    @property
    def totals(self) -> tuple[Decimal, Decimal]:
        """(total debits, total credits) across all rows."""
        debits = sum((row.debit_total for row in self.rows), _ZERO)
        credits = sum((row.credit_total for row in self.rows), _ZERO)
        return debits, credits

    @property
    def is_balanced(self) -> bool:
        debits, credits = self.totals
        return debits == credits

    def __iter__(self) -> Iterator[TrialBalanceRow]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class StatementLine:
    """One journal line on an account statement, with the running balance."""

    entry_id: str
    entry_date: date
    posted_at: datetime | None
    line_seq: int
    debit: Decimal
    credit: Decimal
    description: str | None
    balance: Decimal


@dataclass(frozen=True)
class BalanceDiscrepancy:
    """An account whose cached balance disagrees with its journal lines."""

    account_id: str
    cached_balance: Decimal
    computed_balance: Decimal

    @property
    def difference(self) -> Decimal:
        return self.cached_balance - self.computed_balance


class AccountStatement:
    """
    Lazy, restartable statement for one account over a date range.

    Nothing is queried until iteration starts.  Lines stream from the
    database in batches of batch_size, and every new iteration re-runs the
    queries, so a statement object can be iterated more than once.
    """

    def __init__(
        self,
        session: Session,
        account_id: str,
        kind: AccountKind,
        start_date: date | None,
        end_date: date | None,
        batch_size: int,
    ):
        self._session = session
        self.account_id = account_id
        self.kind = kind
        self.start_date = start_date
        self.end_date = end_date
        self._batch_size = batch_size

    def opening_balance(self) -> Decimal:
        """Signed balance of every ledger line dated before start_date."""
        if self.start_date is None:
            return _ZERO
        debits, credits = self._session.execute(
            select(func.sum(JournalLine.debit), func.sum(JournalLine.credit))
            .join(JournalEntry, JournalLine.journal_entry_id == JournalEntry.id)
            .where(
                JournalLine.account_id == self.account_id,
                JournalEntry.status.in_(LEDGER_STATUSES),
                JournalEntry.entry_date < self.start_date,
            )
        ).one()
        return signed_delta(self.kind, debits or _ZERO, credits or _ZERO)

    def _query(self):
        query = (
            select(
                JournalLine.journal_entry_id,
                JournalEntry.entry_date,
                JournalEntry.posted_at,
                JournalLine.line_seq,
                JournalLine.debit,
                JournalLine.credit,
                func.coalesce(JournalLine.description, JournalEntry.description).label(
                    "description"
                ),
            )
            .join(JournalEntry, JournalLine.journal_entry_id == JournalEntry.id)
            .where(
                JournalLine.account_id == self.account_id,
                JournalEntry.status.in_(LEDGER_STATUSES),
            )
        )
        if self.start_date is not None:
            query = query.where(JournalEntry.entry_date >= self.start_date)
        if self.end_date is not None:
            query = query.where(JournalEntry.entry_date <= self.end_date)
        return query.order_by(
            JournalEntry.entry_date,
            JournalEntry.posted_at,
            JournalEntry.id,
            JournalLine.line_seq,
        ).execution_options(yield_per=self._batch_size)

    def __iter__(self) -> Iterator[StatementLine]:
        balance = self.opening_balance()
        result = self._session.execute(self._query())
        try:
            for row in result:
                balance += signed_delta(self.kind, row.debit, row.credit)
                yield StatementLine(
                    entry_id=row.journal_entry_id,
                    entry_date=row.entry_date,
                    posted_at=row.posted_at,
                    line_seq=row.line_seq,
                    debit=row.debit,
                    credit=row.credit,
                    description=row.description,
                    balance=balance,
                )
        finally:
            result.close()


class LedgerSelector(BaseSelector[JournalLine]):
    """
    Selector for ledger projections.

    Contract:
        Derives every figure from journal lines at query time, except
        verify_balances(), which compares those figures with the cached
        Account.balance column.

    Guarantees:
        - All amounts are Decimal at the money scale (never float).
        - trial_balance() rows are ordered by account id.

    Non-goals:
        - No period closing or multi-currency reporting.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def _line_totals(self, as_of_date: date | None = None):
        query = (
            select(
                JournalLine.account_id,
                func.sum(JournalLine.debit).label("debit_total"),
                func.sum(JournalLine.credit).label("credit_total"),
            )
            .join(JournalEntry, JournalLine.journal_entry_id == JournalEntry.id)
            .where(JournalEntry.status.in_(LEDGER_STATUSES))
            .group_by(JournalLine.account_id)
        )
        if as_of_date is not None:
            query = query.where(JournalEntry.entry_date <= as_of_date)
        return query

    def trial_balance(self, as_of_date: date | None = None) -> TrialBalance:
        """
        Compute the trial balance as of a date (inclusive).

        Preconditions: None (an empty ledger gives an empty, balanced result).
        Postconditions: One row per account with at least one ledger line.

        Args:
            as_of_date: Cutoff entry date; None includes every entry.
        """
        totals = self._line_totals(as_of_date).subquery()
        query = (
            select(
                Account.id,
                Account.name,
                Account.kind,
                totals.c.debit_total,
                totals.c.credit_total,
            )
            .join(totals, totals.c.account_id == Account.id)
            .order_by(Account.id)
        )
        rows = tuple(
            TrialBalanceRow(
                account_id=row.id,
                account_name=row.name,
                kind=AccountKind(row.kind),
                debit_total=row.debit_total or _ZERO,
                credit_total=row.credit_total or _ZERO,
            )
            for row in self.session.execute(query)
        )
        return TrialBalance(as_of_date=as_of_date, rows=rows)

    def account_statement(
        self,
        account_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
        batch_size: int = 500,
    ) -> AccountStatement:
        """
        Build a lazy statement for account_id over [start_date, end_date].

        Raises:
            AccountNotFoundError: If account_id does not resolve.
        """
        kind = self.session.execute(
            select(Account.kind).where(Account.id == account_id)
        ).scalar_one_or_none()
        if kind is None:
            raise AccountNotFoundError(account_id)
        return AccountStatement(
            self.session,
            account_id=account_id,
            kind=AccountKind(kind),
            start_date=start_date,
            end_date=end_date,
            batch_size=batch_size,
        )

    def verify_balances(self) -> list[BalanceDiscrepancy]:
        """
        Compare every cached Account.balance with its journal lines.

        Returns:
            One BalanceDiscrepancy per disagreeing account; empty when the
            cache is consistent.
        """
        totals = {
            row.account_id: (row.debit_total or _ZERO, row.credit_total or _ZERO)
            for row in self.session.execute(self._line_totals())
        }
        accounts = self.session.execute(
            select(Account.id, Account.kind, Account.balance).order_by(Account.id)
        ).all()

        discrepancies = []
        for account_id, kind, cached in accounts:
            debits, credits = totals.get(account_id, (_ZERO, _ZERO))
            computed = signed_delta(kind, debits, credits)
            if cached != computed:
                discrepancies.append(
                    BalanceDiscrepancy(
                        account_id=account_id,
                        cached_balance=cached,
                        computed_balance=computed,
                    )
                )
        return discrepancies
