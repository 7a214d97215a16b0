"""
Idempotency key and entry id utilities.

Idempotency keys ensure that the same business document is posted at most
once, even under retries and concurrent processing.  Entry ids are derived
deterministically from the document so a retried derivation yields the
same id.

Entry id format::

    <PREFIX>-<document id>            first posting
    <PREFIX>-<document id>~R<n>       n-th revision
    <entry id>~REV                    compensating entry

``~`` never occurs in a document id, so a revision or reversal id cannot be
mistaken for the first posting of another document.
"""

import re

from ledger_kernel.exceptions import InvalidDocumentIdError

SUFFIX_SEPARATOR = "~"

REVERSAL_SUFFIX = f"{SUFFIX_SEPARATOR}REV"

_REVISION_RE = re.compile(rf"^(?P<base>.+){SUFFIX_SEPARATOR}R(?P<revision>\d+)$")


def generate_idempotency_key(
    source_module: str,
    source_document_id: str,
    purpose: str,
) -> str:
    """
    Generate the idempotency key for a source document posting.

    Format: source_module:source_document_id:purpose

    The key is stored on a POSTED JournalEntry (posting_key) under a unique
    constraint.

    Example:
        >>> generate_idempotency_key("SalesInvoices", "INV-7", "primary")
        "SalesInvoices:INV-7:primary"
    """
    return f"{source_module}:{source_document_id}:{purpose}"


def parse_idempotency_key(key: str) -> tuple[str, str, str]:
    """
    Parse an idempotency key into (source_module, source_document_id, purpose).

    The document id may itself contain colons; module and purpose may not.

    Raises:
        ValueError: If key format is invalid.
    """
    module, sep, rest = key.partition(":")
    document_id, sep2, purpose = rest.rpartition(":")
    if not (sep and sep2 and module and document_id and purpose):
        raise ValueError(f"Invalid idempotency key format: {key}")
    return module, document_id, purpose


def derive_entry_id(prefix: str, document_id: str, revision: int = 0) -> str:
    """
    Deterministic journal entry id for a source document.

    Example:
        >>> derive_entry_id("JV-BREC", "42")
        "JV-BREC-42"
        >>> derive_entry_id("JV-BREC", "42", revision=2)
        "JV-BREC-42~R2"

    Raises:
        InvalidDocumentIdError: If document_id is empty or contains "~".
        ValueError: If revision is negative.
    """
    if not document_id:
        raise InvalidDocumentIdError(document_id, "document id is empty")
    if SUFFIX_SEPARATOR in document_id:
        raise InvalidDocumentIdError(
            document_id, f"{SUFFIX_SEPARATOR!r} is reserved for revision suffixes"
        )
    if revision < 0:
        raise ValueError(f"revision must be >= 0, got {revision}")
    base = f"{prefix}-{document_id}"
    return f"{base}{SUFFIX_SEPARATOR}R{revision}" if revision else base


def next_revision_id(entry_id: str) -> str:
    """
    Id for the next revision of an entry: X -> X~R1, X~R1 -> X~R2.
    """
    match = _REVISION_RE.match(entry_id)
    if match is None:
        return f"{entry_id}{SUFFIX_SEPARATOR}R1"
    return f"{match.group('base')}{SUFFIX_SEPARATOR}R{int(match.group('revision')) + 1}"


def reversal_entry_id(entry_id: str) -> str:
    """Id of the compensating entry that reverses entry_id."""
    return f"{entry_id}{REVERSAL_SUFFIX}"
