"""
Ledger Kernel

A double-entry posting engine with:
- Balanced entry construction
- Idempotent, atomic posting
- Reversal and un-posting through compensating entries
- Cached account balances with a single mutation chokepoint
"""

__version__ = "0.1.0"
