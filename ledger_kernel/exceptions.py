"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
CONVENTIONS
===============================================================================

Callers of the posting engine must tell an "already done" condition apart
from a defect or a storage failure without parsing message strings.  Every
error therefore:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

Example - RIGHT way:
    try:
        entry_id = engine.post(adapter.derive_entry(invoice))
    except DuplicatePostingError as e:
        entry_id = e.existing_entry_id      # informational, already posted
    except AccountNotFoundError as e:
        show_error(e.code, account=e.account_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- MoneyError
    |   +-- InvalidAmountError
    |       +-- LineSideError
    |
    +-- PostingError
    |   +-- UnbalancedEntryError
    |   +-- EmptyEntryError
    |   +-- DuplicatePostingError
    |   +-- EntryAlreadyExistsError
    |   +-- InvalidDocumentIdError
    |
    +-- AccountError
    |   +-- AccountNotFoundError
    |   +-- AccountReferencedError
    |
    +-- EntryError
    |   +-- EntryNotFoundError
    |   +-- InvalidStateTransitionError
    |   +-- RedraftNotAllowedError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- TransactionAbortedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Money           | INVALID_AMOUNT              | Negative or over-precision amount
                | INVALID_LINE_SIDE           | Line has both or neither side set
----------------|-----------------------------|-----------------------------------------
Posting         | UNBALANCED_ENTRY            | Debits != Credits (adapter defect)
                | EMPTY_ENTRY                 | Fewer than two lines
                | DUPLICATE_POSTING           | Idempotency key already posted (OK)
                | ENTRY_ALREADY_EXISTS        | Entry id taken by a draft or another doc
                | INVALID_DOCUMENT_ID         | Document id uses the reserved "~"
----------------|-----------------------------|-----------------------------------------
Account         | ACCOUNT_NOT_FOUND           | Account id doesn't exist
                | ACCOUNT_REFERENCED          | Can't delete, has lines or children
----------------|-----------------------------|-----------------------------------------
Entry           | ENTRY_NOT_FOUND             | Journal entry id doesn't exist
                | INVALID_STATE_TRANSITION    | Transition not in the status table
                | REDRAFT_NOT_ALLOWED         | Module entries cannot be un-posted
----------------|-----------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION      | Modifying a posted/reversed record
----------------|-----------------------------|-----------------------------------------
Transaction     | TRANSACTION_ABORTED         | Storage failure; safe to retry

===============================================================================
HANDLING PATTERNS
===============================================================================

1. DUPLICATE POSTING IS INFORMATIONAL:

    try:
        entry_id = engine.post(entry)
    except DuplicatePostingError as e:
        entry_id = e.existing_entry_id

2. TRANSACTION ABORTED IS RETRYABLE:
   Nothing was applied, and the idempotency key makes a retry of the whole
   call safe.  The kernel never retries on its own.

3. UNBALANCED ENTRY IS A DEFECT:
   Raised while constructing an entry, before any transaction begins.  It
   points at the adapter that derived the lines and must not be retried.

===============================================================================
"""


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Money-related exceptions


class MoneyError(LedgerKernelError):
    """Base exception for monetary value errors."""

    code: str = "MONEY_ERROR"


class InvalidAmountError(MoneyError):
    """A negative or over-precision amount was supplied."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: str, reason: str):
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid amount {amount}: {reason}")


class LineSideError(InvalidAmountError):
    """
    A journal line must have exactly one positive side.

    Both debit and credit positive, or both zero, is rejected when the
    line is constructed.
    """

    code: str = "INVALID_LINE_SIDE"

    def __init__(self, account_id: str, debit: str, credit: str):
        self.account_id = account_id
        self.debit = debit
        self.credit = credit
        super().__init__(
            f"{debit}/{credit}",
            f"line for account {account_id} must have exactly one positive side",
        )


# Posting-related exceptions


class PostingError(LedgerKernelError):
    """Base exception for posting-related errors."""

    code: str = "POSTING_ERROR"


class UnbalancedEntryError(PostingError):
    """Journal entry debits do not equal credits."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(self, entry_id: str, debits: str, credits: str):
        self.entry_id = entry_id
        self.debits = debits
        self.credits = credits
        super().__init__(
            f"Unbalanced entry {entry_id}: debits={debits}, credits={credits}"
        )


class EmptyEntryError(PostingError):
    """Journal entry has fewer than two lines."""

    code: str = "EMPTY_ENTRY"

    def __init__(self, entry_id: str, line_count: int):
        self.entry_id = entry_id
        self.line_count = line_count
        super().__init__(
            f"Entry {entry_id} needs at least two lines, got {line_count}"
        )


class DuplicatePostingError(PostingError):
    """
    A Posted entry already exists for this idempotency key.

    Recoverable: the caller may treat it as "already done" and use
    existing_entry_id.
    """

    code: str = "DUPLICATE_POSTING"

    def __init__(self, idempotency_key: str, existing_entry_id: str | None):
        self.idempotency_key = idempotency_key
        self.existing_entry_id = existing_entry_id
        super().__init__(
            f"Idempotency key {idempotency_key} already posted"
            + (f" as {existing_entry_id}" if existing_entry_id else "")
        )


class EntryAlreadyExistsError(PostingError):
    """
    The entry id is already taken.

    Raised for a draft with the same id, and for an entry with the same id
    that belongs to a different document (idempotency key).  Unlike
    DuplicatePostingError this is never "already done".
    """

    code: str = "ENTRY_ALREADY_EXISTS"

    def __init__(self, entry_id: str, status: str):
        self.entry_id = entry_id
        self.status = status
        super().__init__(f"Journal entry {entry_id} already exists with status {status}")


class InvalidDocumentIdError(PostingError):
    """A document id contains the character reserved for revision suffixes."""

    code: str = "INVALID_DOCUMENT_ID"

    def __init__(self, document_id: str, reason: str):
        self.document_id = document_id
        self.reason = reason
        super().__init__(f"Invalid document id {document_id!r}: {reason}")



# Account-related exceptions


class AccountError(LedgerKernelError):
    """Base exception for account-related errors."""

    code: str = "ACCOUNT_ERROR"


class AccountNotFoundError(AccountError):
    """Account with given id was not found."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class AccountReferencedError(AccountError):
    """Account is referenced by journal lines or child accounts and cannot be deleted."""

    code: str = "ACCOUNT_REFERENCED"

    def __init__(self, account_id: str, reason: str = "referenced by journal lines"):
        self.account_id = account_id
        self.reason = reason
        super().__init__(f"Account {account_id} cannot be deleted: {reason}")


# Entry lifecycle exceptions


class EntryError(LedgerKernelError):
    """Base exception for journal entry lifecycle errors."""

    code: str = "ENTRY_ERROR"


class EntryNotFoundError(EntryError):
    """Journal entry with given id was not found."""

    code: str = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Journal entry not found: {entry_id}")


class InvalidStateTransitionError(EntryError):
    """Status transition is not in the transition table."""

    code: str = "INVALID_STATE_TRANSITION"

    def __init__(self, entry_id: str, from_status: str, to_status: str):
        self.entry_id = entry_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Journal entry {entry_id}: cannot transition from {from_status} to {to_status}"
        )


class RedraftNotAllowedError(EntryError):
    """Entries from this source module cannot be un-posted into a draft."""

    code: str = "REDRAFT_NOT_ALLOWED"

    def __init__(self, entry_id: str, source_module: str):
        self.entry_id = entry_id
        self.source_module = source_module
        super().__init__(
            f"Journal entry {entry_id} from module {source_module} cannot be un-posted"
        )


# Immutability exceptions


class ImmutabilityError(LedgerKernelError):
    """Base exception for immutability violations."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """Attempted modification of an immutable record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Cannot modify {entity_type} {entity_id}: {reason}"
        )


# Transaction exceptions


class TransactionAbortedError(LedgerKernelError):
    """
    The storage transaction failed (deadlock, lost connection, timeout).

    Nothing from the failed operation was applied.  Retrying the whole
    post/reverse call is safe because of idempotency-key enforcement.
    """

    code: str = "TRANSACTION_ABORTED"

    def __init__(self, operation: str, entry_id: str | None, reason: str):
        self.operation = operation
        self.entry_id = entry_id
        self.reason = reason
        super().__init__(
            f"Transaction aborted during {operation}"
            + (f" of {entry_id}" if entry_id else "")
            + f": {reason}"
        )
