"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for the Chart of Accounts -- the target of
    every journal line and the holder of the cached running balance.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - balance is a cached projection of every posted journal line applied to
      the account since ledger inception.  Only AccountLedger.apply_delta
      writes it.
    - kind is immutable once journal lines reference the account
      (db/immutability.py).
    - Accounts referenced by journal lines or parenting other accounts
      cannot be deleted (db/immutability.py).

Failure modes:
    - AccountNotFoundError when a posting references a non-existent account.
    - AccountReferencedError when deletion is attempted on a referenced account.
"""

from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase
from ledger_kernel.db.types import MoneyAmount


class AccountKind(str, Enum):
    """Kinds of accounts in the chart of accounts."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def is_debit_normal(self) -> bool:
        """Asset and expense balances grow with debits."""
        return self in (AccountKind.ASSET, AccountKind.EXPENSE)


def signed_delta(kind: AccountKind, debit: Decimal, credit: Decimal) -> Decimal:
    """
    Balance change produced by one line on an account of the given kind.

    Debit-normal accounts (asset, expense) increase with debits; the
    convention inverts for liability, equity and revenue.
    """
    if AccountKind(kind).is_debit_normal:
        return debit - credit
    return credit - debit


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Account(TrackedBase):
    """
    Chart of Accounts entry -- a single node in the account tree.

    Contract:
        Account.id is the stable, human-readable account code (e.g. "1200").
        The balance column is mutated only through the posting engine.

    Guarantees:
        - kind is one of ASSET, LIABILITY, EQUITY, REVENUE, EXPENSE.
        - balance is exact at the money scale (stored as minor units).

    Non-goals:
        - Does not compute balances itself; see services/account_ledger.py
          and selectors/ledger_selector.py.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        Index("idx_account_kind", "kind"),
        Index("idx_account_parent", "parent_id"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    kind: Mapped[AccountKind] = mapped_column(
        SAEnum(
            AccountKind,
            native_enum=False,
            length=20,
            values_callable=_enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )

    parent_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("accounts.id"),
        nullable=True,
    )

    balance: Mapped[Decimal] = mapped_column(
        MoneyAmount(),
        nullable=False,
        default=Decimal("0.00"),
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    parent: Mapped["Account | None"] = relationship(
        remote_side="Account.id",
        foreign_keys=[parent_id],
    )

    def __repr__(self) -> str:
        return f"<Account {self.id}: {self.name}>"

    @property
    def is_debit_normal(self) -> bool:
        return AccountKind(self.kind).is_debit_normal
