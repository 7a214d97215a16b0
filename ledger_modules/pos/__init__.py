"""Point of sale session closing."""

from ledger_modules.pos.adapter import POSSessionAdapter
from ledger_modules.pos.models import POSSession

__all__ = ["POSSession", "POSSessionAdapter"]
