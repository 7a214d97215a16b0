"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides ``get_active_config()``, the one way runtime code obtains the
    company settings, VAT rate, account-role mappings, redraft policy and
    chart of accounts.

Architecture position:
    Configuration.  Sits above ``ledger_kernel`` and below
    ``ledger_modules``.  The kernel never imports from ``ledger_config``;
    values are injected into the engine and the source adapters.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``ConfigurationError`` -- structural validation failed.

Audit relevance:
    Every successful ``get_active_config()`` call logs the checksum of the
    loaded file, tying postings to the configuration that mapped them.
"""

from __future__ import annotations

from pathlib import Path

from ledger_config.bridges import seed_chart_of_accounts
from ledger_config.loader import ConfigurationError, load_config
from ledger_config.schema import AccountDefinition, LedgerConfig
from ledger_kernel.logging_config import get_logger

logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(path: Path | str | None = None) -> LedgerConfig:
    """
    Load the ledger configuration.

    Args:
        path: Configuration file.  Defaults to the packaged
            ledger_config/sets/default.yaml.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the file fails validation.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = load_config(config_path)
    logger.info(
        "ledger_config_loaded",
        extra={
            "path": str(config_path),
            "checksum": config.checksum,
            "company": config.company,
            "role_count": len(config.account_mappings),
            "account_count": len(config.chart_of_accounts),
        },
    )
    return config


__all__ = [
    "AccountDefinition",
    "ConfigurationError",
    "DEFAULT_CONFIG_PATH",
    "LedgerConfig",
    "get_active_config",
    "seed_chart_of_accounts",
]
