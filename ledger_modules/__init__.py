"""
Source modules.

Each sub-package owns one family of business documents and a source
adapter that derives the journal entry for a document.  Modules call
``post_document()`` after validating their own business rules.
"""

from ledger_modules.base import (
    AccountMapping,
    AccountRole,
    PaymentChannel,
    RoleResolutionError,
    SourceAdapter,
    post_document,
)

__all__ = [
    "AccountMapping",
    "AccountRole",
    "PaymentChannel",
    "RoleResolutionError",
    "SourceAdapter",
    "post_document",
]
