"""
Shared pieces for source adapters (``ledger_modules.base``).

Responsibility
--------------
Defines the account roles adapters post to, the ``AccountMapping`` that
resolves roles to account ids, the ``SourceAdapter`` base class, and
``post_document()``, the one call a source module makes to turn a
document into a posted journal entry.

Architecture position
---------------------
**Modules layer**.  Imports from ``ledger_kernel`` (domain, services);
never imported by the kernel.

Invariants enforced
-------------------
* ``derive_entry()`` is pure: no I/O, no clock, no database.  The same
  document and revision always derive the same entry.
* Entry ids are ``<PREFIX>-<document id>`` with ``~R<n>`` for revision n;
  a document id containing ``~`` is rejected (``InvalidDocumentIdError``).
* Zero-amount lines are dropped before the entry is built.

Failure modes
-------------
* ``RoleResolutionError`` -- a role the adapter needs has no mapping.
* Entry construction errors (``UnbalancedEntryError`` and friends) point
  at an adapter defect.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from ledger_kernel.domain.entry import DEFAULT_PURPOSE, ProposedJournalEntry, ProposedLine
from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import LedgerKernelError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.posting_engine import PostingEngine
from ledger_kernel.utils.idempotency import derive_entry_id

logger = get_logger("modules.base")

DEFAULT_VAT_RATE_PERCENT = Decimal("15")

DocumentT = TypeVar("DocumentT")


class AccountRole(str, Enum):
    """Semantic account roles used by the source adapters."""

    CASH = "cash"
    BANK = "bank"
    POS_CASH = "pos_cash"
    POS_BANK = "pos_bank"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    INPUT_VAT = "input_vat"
    ACCOUNTS_PAYABLE = "accounts_payable"
    SALARIES_PAYABLE = "salaries_payable"
    PAYROLL_DEDUCTIONS = "payroll_deductions"
    VAT_PAYABLE = "vat_payable"
    OPENING_BALANCE_EQUITY = "opening_balance_equity"
    SALES_REVENUE = "sales_revenue"
    SALES_DISCOUNT = "sales_discount"
    SALARY_EXPENSE = "salary_expense"
    ALLOWANCES_EXPENSE = "allowances_expense"
    GENERAL_EXPENSE = "general_expense"
    PURCHASES = "purchases"
    CASH_OVER_SHORT = "cash_over_short"


# Account ids used when no configuration overrides them.
DEFAULT_ROLE_ACCOUNTS: dict[AccountRole, str] = {
    AccountRole.CASH: "1011",
    AccountRole.BANK: "1012",
    AccountRole.POS_CASH: "1111",
    AccountRole.POS_BANK: "1121",
    AccountRole.ACCOUNTS_RECEIVABLE: "1200",
    AccountRole.INPUT_VAT: "1300",
    AccountRole.ACCOUNTS_PAYABLE: "2010",
    AccountRole.SALARIES_PAYABLE: "2100",
    AccountRole.PAYROLL_DEDUCTIONS: "2110",
    AccountRole.VAT_PAYABLE: "2200",
    AccountRole.OPENING_BALANCE_EQUITY: "3900",
    AccountRole.SALES_REVENUE: "4000",
    AccountRole.SALES_DISCOUNT: "4100",
    AccountRole.SALARY_EXPENSE: "5000",
    AccountRole.ALLOWANCES_EXPENSE: "5010",
    AccountRole.GENERAL_EXPENSE: "5100",
    AccountRole.PURCHASES: "5200",
    AccountRole.CASH_OVER_SHORT: "5303",
}


class RoleResolutionError(LedgerKernelError):
    """An adapter needs an account role that is not mapped."""

    code: str = "ROLE_RESOLUTION_FAILED"

    def __init__(self, role: str, adapter: str):
        self.role = role
        self.adapter = adapter
        super().__init__(f"No account mapped for role '{role}' (needed by {adapter})")


class PaymentChannel(str, Enum):
    """How money moved: through the cash box or the bank."""

    CASH = "cash"
    BANK = "bank"


@dataclass(frozen=True)
class AccountMapping:
    """
    Resolved role -> account id mapping.

    Contract:
        Immutable.  Roles may be given as AccountRole members or their
        string values.
    """

    accounts: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def defaults(cls) -> AccountMapping:
        return cls({role.value: account for role, account in DEFAULT_ROLE_ACCOUNTS.items()})

    @classmethod
    def from_roles(cls, roles: Mapping[str, str], *, with_defaults: bool = True) -> AccountMapping:
        """Build a mapping from role names, optionally on top of the defaults."""
        accounts = dict(cls.defaults().accounts) if with_defaults else {}
        accounts.update({AccountRole(role).value: str(account) for role, account in roles.items()})
        return cls(accounts)

    @classmethod
    def from_config(cls, config: Any) -> AccountMapping:
        """Build a mapping from a LedgerConfig's account_mappings."""
        return cls.from_roles(config.account_mappings)

    def get(self, role: AccountRole | str) -> str | None:
        return self.accounts.get(AccountRole(role).value)

    def resolve(self, role: AccountRole | str, adapter: str = "adapter") -> str:
        account_id = self.get(role)
        if account_id is None:
            raise RoleResolutionError(AccountRole(role).value, adapter)
        return account_id

    def channel_account(self, channel: PaymentChannel | str, adapter: str = "adapter") -> str:
        """Cash or bank account for a payment channel."""
        if PaymentChannel(channel) == PaymentChannel.BANK:
            return self.resolve(AccountRole.BANK, adapter)
        return self.resolve(AccountRole.CASH, adapter)


def vat_on(net: Money, rate_percent: Decimal) -> Money:
    """VAT on a net amount, rounded half-up once."""
    return net.multiply_by_rate(rate_percent / Decimal(100))


class SourceAdapter(ABC, Generic[DocumentT]):
    """
    Base class for source adapters.

    Contract:
        Subclasses set ``prefix`` and ``source_module`` and implement
        ``document_id()``, ``entry_date()`` and ``build_lines()``.
        ``derive_entry()`` assembles the validated ProposedJournalEntry.

    Non-goals:
        - Adapters do not validate document-level business rules; the
          owning module does that before posting.
    """

    prefix: ClassVar[str]
    source_module: ClassVar[str]
    purpose: ClassVar[str] = DEFAULT_PURPOSE

    def __init__(
        self,
        mapping: AccountMapping | None = None,
        vat_rate_percent: Decimal | str | int = DEFAULT_VAT_RATE_PERCENT,
    ):
        self.mapping = mapping or AccountMapping.defaults()
        self.vat_rate_percent = Decimal(str(vat_rate_percent))

    def account(self, role: AccountRole) -> str:
        return self.mapping.resolve(role, type(self).__name__)

    def entry_prefix(self, document: DocumentT) -> str:
        return self.prefix

    @abstractmethod
    def document_id(self, document: DocumentT) -> str:
        ...

    @abstractmethod
    def entry_date(self, document: DocumentT) -> date:
        ...

    def description(self, document: DocumentT) -> str | None:
        return None

    @abstractmethod
    def build_lines(self, document: DocumentT) -> Iterable[ProposedLine | None]:
        """Lines for the document; None entries are skipped."""

    def derive_entry(self, document: DocumentT, revision: int = 0) -> ProposedJournalEntry:
        """
        Derive the candidate journal entry for a document.

        Args:
            document: The source document.
            revision: 0 for the first posting; n for the n-th re-post after
                a reversal.
        """
        doc_id = self.document_id(document)
        return ProposedJournalEntry(
            entry_id=derive_entry_id(self.entry_prefix(document), doc_id, revision),
            entry_date=self.entry_date(document),
            source_module=self.source_module,
            source_document_id=doc_id,
            lines=tuple(line for line in self.build_lines(document) if line is not None),
            description=self.description(document),
            purpose=self.purpose,
        )


def debit(account_id: str, amount: Money, description: str | None = None) -> ProposedLine | None:
    """Debit line, or None for a zero amount."""
    if amount.is_zero:
        return None
    return ProposedLine.debit_line(account_id, amount, description)


def credit(account_id: str, amount: Money, description: str | None = None) -> ProposedLine | None:
    """Credit line, or None for a zero amount."""
    if amount.is_zero:
        return None
    return ProposedLine.credit_line(account_id, amount, description)


def post_document(
    engine: PostingEngine,
    adapter: SourceAdapter[DocumentT],
    document: DocumentT,
    on_posted: Callable[[str], None] | None = None,
    revision: int = 0,
) -> str:
    """
    Derive and post the entry for a document.

    After a successful post, on_posted(entry_id) lets the owning module
    record the journal entry id on its document.

    Returns:
        The posted journal entry id.

    Raises:
        Whatever derive_entry() or PostingEngine.post() raises.  on_posted
        is not called on failure.
    """
    entry = adapter.derive_entry(document, revision=revision)
    entry_id = engine.post(entry)
    if on_posted is not None:
        on_posted(entry_id)
    logger.info(
        "document_posted",
        extra={
            "source_module": adapter.source_module,
            "source_document_id": entry.source_document_id,
            "entry_id": entry_id,
        },
    )
    return entry_id
