"""
Ledger configuration schema.

Frozen dataclasses produced by ledger_config.loader from a YAML file.  The
kernel never sees these types; source modules and the command line read
plain values (account ids, the VAT rate, module names) out of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class AccountDefinition:
    """One account in the seeded chart of accounts."""

    account_id: str
    name: str
    kind: str  # asset, liability, equity, revenue, expense
    parent_id: str | None = None


@dataclass(frozen=True)
class LedgerConfig:
    """
    Complete ledger configuration.

    Attributes:
        company: Display name of the company.
        currency: ISO currency code (display only; the ledger is
            single-currency).
        vat_rate_percent: VAT rate, e.g. Decimal("15") for 15%.
        account_mappings: Account role name -> account id.
        redraftable_modules: Source modules whose entries may be un-posted
            into drafts.  None permits every module.
        chart_of_accounts: Accounts created by seed_chart_of_accounts().
        checksum: SHA-256 of the canonical serialization of the source data.
    """

    company: str
    currency: str
    vat_rate_percent: Decimal
    account_mappings: dict[str, str] = field(default_factory=dict)
    redraftable_modules: tuple[str, ...] | None = None
    chart_of_accounts: tuple[AccountDefinition, ...] = ()
    checksum: str = ""

    def account_for(self, role: str) -> str | None:
        return self.account_mappings.get(role)
