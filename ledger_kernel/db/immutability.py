"""
ORM-Level Immutability Enforcement.

===============================================================================
WHY THIS EXISTS
===============================================================================

Posted journal entries are the source of truth for every account balance.
Once posted they may only be cancelled by a compensating reversal entry,
never edited or deleted in place.  These listeners catch any attempt made
through SQLAlchemy before the SQL reaches the database:

    session.flush()
         |
         v
    [before_flush]   --> _check_account_deletion_before_flush() --> AccountReferencedError
    [before_update]  --> _check_*_immutability() -----------------> ImmutabilityViolationError
    [before_delete]  --> _check_*_delete() ------------------------^

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity        | When Immutable                     | Allowed change
--------------|------------------------------------|--------------------------------------
JournalEntry  | status POSTED or REVERSED          | POSTED -> REVERSED flip only
JournalLine   | parent entry POSTED or REVERSED    | none
Account       | kind, once referenced by any line  | name, balance, is_active, parent
Account       | deletion, while referenced/parent  | none

===============================================================================
DESIGN DECISIONS
===============================================================================

1. updated_at may always change: it is audit metadata, not financial data.

2. "WAS POSTED" NOT "IS POSTED": the posting engine itself sets
   status=POSTED on drafts.  Attribute history tells us the status before
   this flush, so DRAFT -> POSTED is allowed while later edits are blocked.

3. Inline model imports avoid the models <-> db import cycle.

===============================================================================
USAGE
===============================================================================

Registered by init_engine_from_url().  Registration is idempotent.

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
    ...
    register_immutability_listeners()

===============================================================================
"""

from sqlalchemy import event, exists, inspect, select
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import get_history

from ledger_kernel.exceptions import AccountReferencedError, ImmutabilityViolationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

# Fields the POSTED -> REVERSED flip is allowed to touch.
_REVERSAL_FIELDS = frozenset({"status", "posting_key", "reversed_at", "updated_at"})


def _blocked(entity_type: str, entity_id: str, operation: str, reason: str) -> ImmutabilityViolationError:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": entity_id,
            "operation": operation,
            "reason": reason,
        },
    )
    return ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=entity_id,
        reason=reason,
    )


def _previous_status(target):
    """Status as it was before the pending flush."""
    history = get_history(target, "status")
    if history.deleted:
        return history.deleted[0]
    return target.status


def _check_account_deletion_before_flush(session, flush_context, instances):
    """
    Prevent deletion of accounts that are referenced by any journal line or
    that still parent other accounts.

    Runs in SessionEvents.before_flush, before the flush plan is finalized.
    """
    from ledger_kernel.models.account import Account
    from ledger_kernel.models.journal import JournalLine

    for obj in list(session.deleted):
        if not isinstance(obj, Account):
            continue

        with session.no_autoflush:
            has_lines = session.execute(
                select(exists().where(JournalLine.account_id == obj.id))
            ).scalar()
            has_children = session.execute(
                select(exists().where(Account.parent_id == obj.id))
            ).scalar()

        if has_lines or has_children:
            reason = (
                "referenced by journal lines" if has_lines else "has child accounts"
            )
            logger.error(
                "immutability_violation_blocked",
                extra={
                    "entity_type": "Account",
                    "entity_id": obj.id,
                    "operation": "DELETE",
                    "reason": reason,
                },
            )
            raise AccountReferencedError(account_id=obj.id, reason=reason)


def _check_account_kind_immutability(mapper, connection, target):
    """
    Prevent changing an account's kind once journal lines reference it.

    The kind drives the sign convention, so changing it would silently
    reinterpret every historical line.
    """
    from ledger_kernel.models.journal import JournalLine

    if not get_history(target, "kind").has_changes():
        return

    referenced = connection.execute(
        select(exists().where(JournalLine.account_id == target.id))
    ).scalar()
    if referenced:
        raise _blocked(
            "Account",
            target.id,
            "UPDATE",
            "Cannot change kind of an account referenced by journal lines",
        )


def _check_journal_entry_immutability(mapper, connection, target):
    """
    Prevent updates to posted or reversed JournalEntry records.

    Logic:
        1. Was DRAFT before this flush: any change allowed (this is the posting).
        2. Was POSTED: only the flip to REVERSED, touching _REVERSAL_FIELDS.
        3. Was REVERSED: nothing may change.
    """
    from ledger_kernel.models.journal import JournalEntryStatus

    previous = JournalEntryStatus(_previous_status(target))
    if previous == JournalEntryStatus.DRAFT:
        return

    state = inspect(target)
    changed = [
        column.key
        for column in state.mapper.column_attrs
        if state.attrs[column.key].history.has_changes()
    ]
    if not changed:
        return

    if (
        previous == JournalEntryStatus.POSTED
        and target.status == JournalEntryStatus.REVERSED
        and set(changed) <= _REVERSAL_FIELDS
    ):
        return

    raise _blocked(
        "JournalEntry",
        target.id,
        "UPDATE",
        f"Cannot modify field '{changed[0]}' on {previous.value} journal entry",
    )


def _check_journal_entry_delete(mapper, connection, target):
    """Only draft entries may be deleted."""
    from ledger_kernel.models.journal import DELETABLE_STATUSES, JournalEntryStatus

    previous = JournalEntryStatus(_previous_status(target))
    if previous not in DELETABLE_STATUSES:
        raise _blocked(
            "JournalEntry",
            target.id,
            "DELETE",
            f"{previous.value.capitalize()} journal entries cannot be deleted",
        )


def _parent_is_final(target, connection) -> bool:
    from ledger_kernel.models.journal import JournalEntry, JournalEntryStatus

    entry = target.entry
    if entry is not None:
        return JournalEntryStatus(_previous_status(entry)) != JournalEntryStatus.DRAFT
    if target.journal_entry_id is None:
        return False
    # Orphaned line (removed from entry.lines): use the stored parent status
    status = connection.execute(
        select(JournalEntry.status).where(JournalEntry.id == target.journal_entry_id)
    ).scalar_one_or_none()
    return status is not None and JournalEntryStatus(status) != JournalEntryStatus.DRAFT


def _check_journal_line_immutability(mapper, connection, target):
    """Journal lines are immutable once the parent entry left DRAFT."""
    if _parent_is_final(target, connection):
        raise _blocked(
            "JournalLine",
            str(target.id),
            "UPDATE",
            "Journal lines cannot be modified after parent entry is posted",
        )


def _check_journal_line_delete(mapper, connection, target):
    """Journal lines cannot be deleted once the parent entry left DRAFT."""
    if _parent_is_final(target, connection):
        raise _blocked(
            "JournalLine",
            str(target.id),
            "DELETE",
            "Journal lines cannot be deleted after parent entry is posted",
        )


_LISTENERS = (
    ("Session", "before_flush", _check_account_deletion_before_flush),
    ("Account", "before_update", _check_account_kind_immutability),
    ("JournalEntry", "before_update", _check_journal_entry_immutability),
    ("JournalEntry", "before_delete", _check_journal_entry_delete),
    ("JournalLine", "before_update", _check_journal_line_immutability),
    ("JournalLine", "before_delete", _check_journal_line_delete),
)


def _targets() -> dict:
    from ledger_kernel.models.account import Account
    from ledger_kernel.models.journal import JournalEntry, JournalLine

    return {
        "Session": Session,
        "Account": Account,
        "JournalEntry": JournalEntry,
        "JournalLine": JournalLine,
    }


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners (idempotent).
    """
    targets = _targets()
    for target_name, event_name, listener_fn in _LISTENERS:
        target = targets[target_name]
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def _safe_remove_listener(target, event_name, listener_fn):
    """Remove an event listener, ignoring it if not registered."""
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    FOR TESTING ONLY.
    """
    targets = _targets()
    for target_name, event_name, listener_fn in _LISTENERS:
        _safe_remove_listener(targets[target_name], event_name, listener_fn)
