"""
POS session adapter tests.

Verifies VAT extraction from VAT-inclusive totals, drawer shortage and
overage, and that a closed session cannot be un-posted into a draft.
"""

import pytest
from datetime import date
from decimal import Decimal

from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import RedraftNotAllowedError
from ledger_kernel.services.posting_engine import PostingEngine
from ledger_modules.base import post_document
from ledger_modules.pos import POSSession, POSSessionAdapter
from tests.modules.conftest import lines_of


def _session(**overrides):
    fields = dict(
        session_id="POS-1",
        closed_on=date(2026, 1, 15),
        cashier_id="C-1",
        opening_balance=Money.of("200"),
        closing_balance=Money.of("1350"),
        cash_sales=Money.of("1150"),
        card_sales=Money.of("575"),
    )
    fields.update(overrides)
    return POSSession(**fields)


class TestVatSplit:
    def test_exact(self):
        net, vat = POSSessionAdapter().split_vat(Money.of("1150"))
        assert net == Money.of("1000.00")
        assert vat == Money.of("150.00")

    def test_rounded_net_keeps_total(self):
        net, vat = POSSessionAdapter().split_vat(Money.of("100"))
        assert net == Money.of("86.96")
        assert vat == Money.of("13.04")
        assert net + vat == Money.of("100")


class TestPOSLines:
    def test_balanced_drawer(self):
        entry = POSSessionAdapter().derive_entry(_session())
        assert entry.entry_id == "JV-POSS-POS-1"
        assert entry.source_module == "POSSession"
        assert lines_of(entry) == [
            ("1111", "1350.00", "0.00"),
            ("1121", "575.00", "0.00"),
            ("1111", "0.00", "200.00"),
            ("4000", "0.00", "1500.00"),
            ("2200", "0.00", "225.00"),
        ]

    def test_shortage(self):
        entry = POSSessionAdapter().derive_entry(_session(closing_balance=Money.of("1340")))
        assert ("5303", "10.00", "0.00") in lines_of(entry)

    def test_overage(self):
        entry = POSSessionAdapter().derive_entry(_session(closing_balance=Money.of("1355")))
        assert lines_of(entry)[-1] == ("5303", "0.00", "5.00")

    def test_deferred_sales_to_receivables(self):
        entry = POSSessionAdapter().derive_entry(_session(deferred_sales=Money.of("115")))
        assert ("1200", "115.00", "0.00") in lines_of(entry)


class TestPOSPosting:
    def test_post_with_shortage(self, post, balance):
        post(POSSessionAdapter(), _session(closing_balance=Money.of("1340")))

        assert balance("1111") == Decimal("1140.00")
        assert balance("1121") == Decimal("575.00")
        assert balance("5303") == Decimal("10.00")
        assert balance("4000") == Decimal("1500.00")
        assert balance("2200") == Decimal("225.00")

    def test_closed_session_not_redraftable(self, session, chart, clock, ledger_config):
        engine = PostingEngine(
            session, clock=clock, redraftable_modules=ledger_config.redraftable_modules
        )
        entry_id = post_document(engine, POSSessionAdapter(), _session())

        with pytest.raises(RedraftNotAllowedError):
            engine.unpost(entry_id)
