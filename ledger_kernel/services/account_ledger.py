"""
AccountLedger -- the single write path for account balances.

Responsibility:
    Owns the "apply delta" chokepoint through which every balance change
    flows, plus balance reads and chart-of-accounts account creation.

Architecture position:
    Kernel > Services -- imperative shell.  Called by PostingEngine for
    deltas; called by chart setup (ledger_config) for open_account().

Invariants enforced:
    - Account.balance is written ONLY by apply_delta().  No other code in
      the repository assigns the column.
    - apply_delta() locks the account row (SELECT ... FOR UPDATE) before
      the read-modify-write, so concurrent postings touching the same
      account serialize.
    - lock_accounts() locks in sorted id order, so two postings over the
      same accounts always acquire locks in the same sequence.

Failure modes:
    - AccountNotFoundError when an id does not resolve.

Audit relevance:
    Each applied delta is logged with the before/after balance so the
    cached projection can be traced back to individual postings.
"""

from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy import select

from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import AccountNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account, AccountKind
from ledger_kernel.services.base import BaseService

logger = get_logger("services.account_ledger")


class AccountLedger(BaseService[Account]):
    """
    Account balance store.

    Contract:
        Runs inside the caller's transaction.  apply_delta() must be called
        in the same transaction as the journal entry status change that
        caused it; the posting engine guarantees this.

    Guarantees:
        - apply_delta() is atomic with respect to concurrent writers on the
          same account (row lock).
        - current_balance() reflects every posting committed before the
          read transaction started.

    Non-goals:
        - Does NOT compute signed deltas from debit/credit; the posting
          engine does that from the account kind.
    """

    model = Account

    def _locked(self, account_id: str) -> Account:
        account = self._lock_row(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def lock_accounts(self, account_ids: Iterable[str]) -> dict[str, Account]:
        """
        Lock every account row in sorted id order.

        Returns:
            Mapping of account id to the locked Account.

        Raises:
            AccountNotFoundError: For the first id (in sort order) that does
                not resolve.
        """
        return {account_id: self._locked(account_id) for account_id in sorted(set(account_ids))}

    def require_accounts(self, account_ids: Iterable[str]) -> None:
        """
        Check that every id resolves, without locking.

        Raises:
            AccountNotFoundError: For the first missing id in sort order.
        """
        wanted = sorted(set(account_ids))
        found = set(
            self.session.execute(
                select(Account.id).where(Account.id.in_(wanted))
            ).scalars()
        )
        for account_id in wanted:
            if account_id not in found:
                raise AccountNotFoundError(account_id)

    def apply_delta(self, account_id: str, signed_amount: Money | Decimal) -> Money:
        """
        Atomically add signed_amount to the stored balance.

        Preconditions:
            - Called inside the posting transaction.

        Returns:
            The new balance.

        Raises:
            AccountNotFoundError: If account_id does not resolve.
        """
        delta = signed_amount if isinstance(signed_amount, Money) else Money.of(signed_amount)
        account = self._locked(account_id)
        before = Money.of(account.balance)
        after = before + delta
        account.balance = after.amount
        self.session.flush()

        logger.debug(
            "balance_delta_applied",
            extra={
                "account_id": account_id,
                "delta": str(delta),
                "balance_before": str(before),
                "balance_after": str(after),
            },
        )
        return after

    def current_balance(self, account_id: str) -> Money:
        """
        Read-only balance snapshot.

        Raises:
            AccountNotFoundError: If account_id does not resolve.
        """
        balance = self.session.execute(
            select(Account.balance).where(Account.id == account_id)
        ).scalar_one_or_none()
        if balance is None:
            raise AccountNotFoundError(account_id)
        return Money.of(balance)

    def open_account(
        self,
        account_id: str,
        name: str,
        kind: AccountKind | str,
        parent_id: str | None = None,
    ) -> Account:
        """
        Create an account with a zero balance.

        Raises:
            AccountNotFoundError: If parent_id is given and does not resolve.
        """
        if parent_id is not None and self.session.get(Account, parent_id) is None:
            raise AccountNotFoundError(parent_id)

        account = Account(
            id=account_id,
            name=name,
            kind=AccountKind(kind),
            parent_id=parent_id,
            balance=Decimal("0.00"),
            is_active=True,
        )
        self.session.add(account)
        self.session.flush()

        logger.info(
            "account_opened",
            extra={
                "account_id": account_id,
                "kind": AccountKind(kind).value,
                "parent_id": parent_id,
            },
        )
        return account
