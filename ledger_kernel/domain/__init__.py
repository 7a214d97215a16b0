"""Pure domain layer: Money, proposed entries and clocks."""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.entry import (
    DEFAULT_PURPOSE,
    ProposedJournalEntry,
    ProposedLine,
)
from ledger_kernel.domain.values import Money

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "Money",
    "ProposedLine",
    "ProposedJournalEntry",
    "DEFAULT_PURPOSE",
]
