"""Read-only projections over the journal."""

from ledger_kernel.selectors.journal_selector import (
    JournalEntryRecord,
    JournalLineRecord,
    JournalSelector,
)
from ledger_kernel.selectors.ledger_selector import (
    AccountStatement,
    BalanceDiscrepancy,
    LedgerSelector,
    StatementLine,
    TrialBalance,
    TrialBalanceRow,
)

__all__ = [
    "AccountStatement",
    "BalanceDiscrepancy",
    "JournalEntryRecord",
    "JournalLineRecord",
    "JournalSelector",
    "LedgerSelector",
    "StatementLine",
    "TrialBalance",
    "TrialBalanceRow",
]
