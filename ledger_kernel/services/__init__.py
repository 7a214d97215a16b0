"""Kernel write services: the account ledger and the posting engine."""

from ledger_kernel.services.account_ledger import AccountLedger
from ledger_kernel.services.posting_engine import (
    REVERSAL_SOURCE_MODULE,
    PostingEngine,
    ReversalResult,
    UnpostResult,
)

__all__ = [
    "AccountLedger",
    "PostingEngine",
    "REVERSAL_SOURCE_MODULE",
    "ReversalResult",
    "UnpostResult",
]
