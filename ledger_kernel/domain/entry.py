"""
Proposed journal entries -- pure value objects produced by source adapters.

Responsibility:
    Represents a candidate journal entry before it reaches storage and
    enforces the entry invariants at construction time, so a malformed
    entry can never be handed to the posting engine.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Produced by ledger_modules adapters, consumed by PostingEngine.

Invariants enforced:
    - Each line has exactly one positive side; debit and credit are never
      negative (LineSideError / InvalidAmountError).
    - An entry has at least two lines (EmptyEntryError).
    - sum(debits) == sum(credits) exactly at the money scale
      (UnbalancedEntryError).

Failure modes:
    - All failures are programmer errors in the adapter that derived the
      entry; they are raised before any transaction begins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import (
    EmptyEntryError,
    LineSideError,
    UnbalancedEntryError,
)
from ledger_kernel.utils.idempotency import generate_idempotency_key

DEFAULT_PURPOSE = "primary"


@dataclass(frozen=True, slots=True)
class ProposedLine:
    """
    One side of a proposed journal entry.

    Contract:
        Exactly one of debit/credit is positive, the other is zero.  The
        side is encoded by which column is populated, never by sign.
    """

    account_id: str
    debit: Money = field(default_factory=Money.zero)
    credit: Money = field(default_factory=Money.zero)
    description: str | None = None

    def __post_init__(self) -> None:
        for name in ("debit", "credit"):
            value = getattr(self, name)
            if not isinstance(value, Money):
                object.__setattr__(self, name, Money.of(value))
        self.debit.require_non_negative("debit")
        self.credit.require_non_negative("credit")
        if self.debit.is_positive == self.credit.is_positive:
            raise LineSideError(
                account_id=self.account_id,
                debit=str(self.debit),
                credit=str(self.credit),
            )

    @classmethod
    def debit_line(
        cls,
        account_id: str,
        amount: Money | Decimal | str | int,
        description: str | None = None,
    ) -> ProposedLine:
        return cls(account_id=account_id, debit=_money(amount), description=description)

    @classmethod
    def credit_line(
        cls,
        account_id: str,
        amount: Money | Decimal | str | int,
        description: str | None = None,
    ) -> ProposedLine:
        return cls(account_id=account_id, credit=_money(amount), description=description)

    @property
    def is_debit(self) -> bool:
        return self.debit.is_positive

    @property
    def amount(self) -> Money:
        return self.debit if self.is_debit else self.credit


def _money(value: Money | Decimal | str | int) -> Money:
    return value if isinstance(value, Money) else Money.of(value)


@dataclass(frozen=True, slots=True)
class ProposedJournalEntry:
    """
    A balanced candidate journal entry.

    Contract:
        Built by a source adapter from one source document.  entry_id is
        deterministic for the document, and (source_module,
        source_document_id, purpose) is the idempotency key.

    Guarantees:
        - At least two lines.
        - total_debits == total_credits.
        - Immutable; lines are stored as a tuple in the given order.

    Non-goals:
        - Does not check that accounts exist; the posting engine does that
          inside the posting transaction.
    """

    entry_id: str
    entry_date: date
    source_module: str
    source_document_id: str
    lines: tuple[ProposedLine, ...]
    description: str | None = None
    purpose: str = DEFAULT_PURPOSE

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        if len(self.lines) < 2:
            raise EmptyEntryError(entry_id=self.entry_id, line_count=len(self.lines))
        debits = self.total_debits
        credits = self.total_credits
        if debits != credits:
            raise UnbalancedEntryError(
                entry_id=self.entry_id,
                debits=str(debits),
                credits=str(credits),
            )

    @property
    def total_debits(self) -> Money:
        total = Money.zero()
        for line in self.lines:
            total = total + line.debit
        return total

    @property
    def total_credits(self) -> Money:
        total = Money.zero()
        for line in self.lines:
            total = total + line.credit
        return total

    @property
    def idempotency_key(self) -> str:
        return generate_idempotency_key(
            self.source_module, self.source_document_id, self.purpose
        )

    @property
    def account_ids(self) -> frozenset[str]:
        return frozenset(line.account_id for line in self.lines)
