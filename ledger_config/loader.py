"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads a ledger configuration YAML file and parses it into the frozen
dataclasses of ``ledger_config.schema``.

Invariants enforced
-------------------
* Every parse error raises ``ConfigurationError`` naming the offending key;
  there are no silent defaults for required fields.
* Mapped account ids must exist in the configured chart of accounts.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  source data for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or invalid keys  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import AccountDefinition, LedgerConfig
from ledger_kernel.exceptions import LedgerKernelError

_ACCOUNT_KINDS = frozenset({"asset", "liability", "equity", "revenue", "expense"})


class ConfigurationError(LedgerKernelError):
    """A configuration file is structurally invalid."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration {path}: {reason}")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 checksum of the canonical JSON serialization of data."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _require(data: dict[str, Any], key: str, source: str) -> Any:
    if key not in data or data[key] is None:
        raise ConfigurationError(source, f"missing required key '{key}'")
    return data[key]


def parse_account(data: dict[str, Any], source: str) -> AccountDefinition:
    kind = str(_require(data, "kind", source)).lower()
    if kind not in _ACCOUNT_KINDS:
        raise ConfigurationError(source, f"unknown account kind '{kind}'")
    parent = data.get("parent")
    return AccountDefinition(
        account_id=str(_require(data, "id", source)),
        name=str(_require(data, "name", source)),
        kind=kind,
        parent_id=str(parent) if parent is not None else None,
    )


def parse_config(data: dict[str, Any], source: str = "<memory>") -> LedgerConfig:
    """
    Parse a LedgerConfig from a dict.

    Raises:
        ConfigurationError: on missing keys, bad values, or account
            mappings that point outside the chart of accounts.
    """
    try:
        vat_rate = Decimal(str(_require(data, "vat_rate_percent", source)))
    except InvalidOperation as exc:
        raise ConfigurationError(source, "vat_rate_percent is not a number") from exc
    if vat_rate < 0:
        raise ConfigurationError(source, "vat_rate_percent must not be negative")

    chart = tuple(parse_account(item, source) for item in data.get("chart_of_accounts") or ())
    chart_ids = {account.account_id for account in chart}
    if len(chart_ids) != len(chart):
        raise ConfigurationError(source, "duplicate account id in chart_of_accounts")
    for account in chart:
        if account.parent_id is not None and account.parent_id not in chart_ids:
            raise ConfigurationError(
                source,
                f"account {account.account_id} has unknown parent {account.parent_id}",
            )

    mappings = {
        str(role): str(account_id)
        for role, account_id in (data.get("account_mappings") or {}).items()
    }
    if chart:
        for role, account_id in sorted(mappings.items()):
            if account_id not in chart_ids:
                raise ConfigurationError(
                    source,
                    f"role '{role}' maps to {account_id}, which is not in chart_of_accounts",
                )

    redraftable = data.get("redraftable_modules")

    return LedgerConfig(
        company=str(_require(data, "company", source)),
        currency=str(_require(data, "currency", source)),
        vat_rate_percent=vat_rate,
        account_mappings=mappings,
        redraftable_modules=(
            tuple(str(module) for module in redraftable) if redraftable is not None else None
        ),
        chart_of_accounts=chart,
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> LedgerConfig:
    """Load and parse a configuration file."""
    return parse_config(load_yaml_file(path), source=str(path))
