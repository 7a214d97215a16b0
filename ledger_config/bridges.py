"""
Bridges from configuration to kernel state.

Responsibility:
    Turns a LedgerConfig into kernel calls.  Today that is only seeding the
    chart of accounts through AccountLedger.open_account(), so account rows
    are created through the same service the rest of the kernel uses.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from ledger_config.schema import LedgerConfig
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.services.account_ledger import AccountLedger

logger = get_logger("config.bridges")


def seed_chart_of_accounts(session: Session, config: LedgerConfig) -> list[str]:
    """
    Open every configured account that does not exist yet.

    Parents are opened before their children regardless of file order.
    Existing accounts are left untouched, so seeding is safe to repeat.

    Returns:
        Ids of the accounts created by this call, in creation order.
    """
    ledger = AccountLedger(session)
    pending = list(config.chart_of_accounts)
    created: list[str] = []

    while pending:
        progressed = False
        for definition in list(pending):
            parent_id = definition.parent_id
            if parent_id is not None and session.get(Account, parent_id) is None:
                continue
            pending.remove(definition)
            progressed = True
            if session.get(Account, definition.account_id) is not None:
                continue
            ledger.open_account(
                definition.account_id,
                definition.name,
                definition.kind,
                parent_id=parent_id,
            )
            created.append(definition.account_id)
        if not progressed:
            # Remaining parents are missing; open_account reports the first.
            definition = pending[0]
            ledger.open_account(
                definition.account_id,
                definition.name,
                definition.kind,
                parent_id=definition.parent_id,
            )

    logger.info(
        "chart_of_accounts_seeded",
        extra={
            "accounts_created": len(created),
            "accounts_configured": len(config.chart_of_accounts),
        },
    )
    return created
