#!/usr/bin/env python3
"""
Ledger command line.

Creates the schema, seeds the chart of accounts from configuration, and
prints the ledger projections.

Usage:
  python3 scripts/ledger_cli.py init-db [--config PATH]
  python3 scripts/ledger_cli.py trial-balance [--as-of YYYY-MM-DD]
  python3 scripts/ledger_cli.py statement ACCOUNT [--from DATE] [--to DATE]
  python3 scripts/ledger_cli.py verify-balances

Every command accepts --database-url (default: $DATABASE_URL, else a
SQLite file ledger.db in the working directory).
"""

import argparse
import os
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

DEFAULT_DB_URL = os.environ.get("DATABASE_URL", "sqlite:///ledger.db")

W = 78


def _fmt(value: Decimal) -> str:
    return f"{value:,.2f}"


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an ISO date: {value!r}") from exc


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Double-entry ledger tools")
    p.add_argument("--database-url", default=DEFAULT_DB_URL, help="SQLAlchemy database URL")
    sub = p.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-db", help="Create tables and seed the chart of accounts")
    init.add_argument("--config", type=Path, default=None, help="Ledger configuration YAML")

    tb = sub.add_parser("trial-balance", help="Print the trial balance")
    tb.add_argument("--as-of", type=_parse_date, default=None)

    st = sub.add_parser("statement", help="Print an account statement")
    st.add_argument("account")
    st.add_argument("--from", dest="start", type=_parse_date, default=None)
    st.add_argument("--to", dest="end", type=_parse_date, default=None)

    sub.add_parser("verify-balances", help="Compare cached balances with the journal")
    return p.parse_args(argv)


def _init_db(args: argparse.Namespace) -> int:
    from ledger_config import get_active_config, seed_chart_of_accounts
    from ledger_kernel.db.engine import create_tables, session_scope

    config = get_active_config(args.config)
    create_tables()
    with session_scope() as session:
        created = seed_chart_of_accounts(session, config)
    print(f"  Schema ready. {len(created)} accounts created for {config.company}.")
    return 0


def _trial_balance(args: argparse.Namespace) -> int:
    from ledger_kernel.db.engine import session_scope
    from ledger_kernel.selectors import LedgerSelector

    with session_scope() as session:
        tb = LedgerSelector(session).trial_balance(args.as_of)
        title = "TRIAL BALANCE"
        if args.as_of:
            title += f" AS OF {args.as_of.isoformat()}"
        print("=" * W)
        print(title.center(W))
        print("=" * W)
        print(f"  {'Account':<8} {'Name':<30} {'Debit':>16} {'Credit':>16}")
        print(f"  {'-'*8} {'-'*30} {'-'*16} {'-'*16}")
        for row in tb:
            print(
                f"  {row.account_id:<8} {row.account_name[:30]:<30} "
                f"{_fmt(row.debit_total):>16} {_fmt(row.credit_total):>16}"
            )
        debits, credits = tb.totals
        print(f"  {'':<8} {'TOTAL':<30} {_fmt(debits):>16} {_fmt(credits):>16}")
        print()
        print("  Balanced." if tb.is_balanced else "  OUT OF BALANCE.")
    return 0 if tb.is_balanced else 2


def _statement(args: argparse.Namespace) -> int:
    from ledger_kernel.db.engine import session_scope
    from ledger_kernel.exceptions import AccountNotFoundError
    from ledger_kernel.selectors import LedgerSelector

    with session_scope() as session:
        try:
            statement = LedgerSelector(session).account_statement(
                args.account, start_date=args.start, end_date=args.end
            )
        except AccountNotFoundError as exc:
            print(f"  ERROR: {exc}", file=sys.stderr)
            return 1
        print(f"  Statement for account {args.account}")
        print(f"  Opening balance: {_fmt(statement.opening_balance())}")
        print(f"  {'Date':<10} {'Entry':<24} {'Debit':>13} {'Credit':>13} {'Balance':>13}")
        count = 0
        for line in statement:
            count += 1
            print(
                f"  {line.entry_date.isoformat():<10} {line.entry_id[:24]:<24} "
                f"{_fmt(line.debit):>13} {_fmt(line.credit):>13} {_fmt(line.balance):>13}"
            )
        print(f"  {count} lines")
    return 0


def _verify_balances(args: argparse.Namespace) -> int:
    from ledger_kernel.db.engine import session_scope
    from ledger_kernel.selectors import LedgerSelector

    with session_scope() as session:
        discrepancies = LedgerSelector(session).verify_balances()
    if not discrepancies:
        print("  All account balances agree with the journal.")
        return 0
    for d in discrepancies:
        print(
            f"  {d.account_id}: cached {_fmt(d.cached_balance)} "
            f"journal {_fmt(d.computed_balance)} (diff {_fmt(d.difference)})"
        )
    return 2


COMMANDS = {
    "init-db": _init_db,
    "trial-balance": _trial_balance,
    "statement": _statement,
    "verify-balances": _verify_balances,
}


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    from ledger_kernel.db.engine import init_engine_from_url

    init_engine_from_url(args.database_url, echo=False)
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
