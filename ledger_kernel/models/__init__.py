"""ORM models for the ledger kernel."""

from ledger_kernel.models.account import Account, AccountKind, signed_delta
from ledger_kernel.models.journal import (
    DELETABLE_STATUSES,
    VALID_TRANSITIONS,
    JournalEntry,
    JournalEntryStatus,
    JournalLine,
    validate_transition,
)

__all__ = [
    "Account",
    "AccountKind",
    "signed_delta",
    "JournalEntry",
    "JournalEntryStatus",
    "JournalLine",
    "VALID_TRANSITIONS",
    "DELETABLE_STATUSES",
    "validate_transition",
]
