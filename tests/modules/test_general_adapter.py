"""
General journal adapter tests.

Manual entries post their lines as entered and, under the default
configuration, can be un-posted into a draft, edited and posted again.
"""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import LineSideError, UnbalancedEntryError
from ledger_kernel.models.journal import JournalEntry, JournalEntryStatus
from ledger_kernel.services.posting_engine import PostingEngine
from ledger_modules.general import GeneralJournalAdapter, ManualJournalEntry, ManualJournalLine
from tests.modules.conftest import lines_of


def _entry(number="1001", *lines, description="Accrued rent"):
    lines = lines or (
        ManualJournalLine("5100", debit=Money.of("750")),
        ManualJournalLine("2010", credit=Money.of("750")),
    )
    return ManualJournalEntry(
        entry_number=number,
        entry_date=date(2026, 1, 31),
        description=description,
        lines=tuple(lines),
    )


class TestGeneralJournalLines:
    def test_lines_as_entered(self):
        entry = GeneralJournalAdapter().derive_entry(_entry())
        assert entry.entry_id == "JV-1001"
        assert entry.source_module == "General"
        assert entry.description == "Accrued rent"
        assert lines_of(entry) == [("5100", "750.00", "0.00"), ("2010", "0.00", "750.00")]

    def test_zero_lines_dropped(self):
        entry = GeneralJournalAdapter().derive_entry(
            _entry(
                "1002",
                ManualJournalLine("1011", debit=Money.of("10")),
                ManualJournalLine("1012"),
                ManualJournalLine("4000", credit=Money.of("10")),
            )
        )
        assert [line.account_id for line in entry.lines] == ["1011", "4000"]

    def test_both_sides_rejected(self):
        with pytest.raises(LineSideError):
            GeneralJournalAdapter().derive_entry(
                _entry(
                    "1003",
                    ManualJournalLine("1011", debit=Money.of("10"), credit=Money.of("10")),
                    ManualJournalLine("4000", credit=Money.of("10")),
                )
            )

    def test_unbalanced_rejected(self):
        with pytest.raises(UnbalancedEntryError):
            GeneralJournalAdapter().derive_entry(
                _entry(
                    "1004",
                    ManualJournalLine("1011", debit=Money.of("10")),
                    ManualJournalLine("4000", credit=Money.of("9.99")),
                )
            )


class TestGeneralJournalPosting:
    def test_post(self, post, balance):
        assert post(GeneralJournalAdapter(), _entry()) == "JV-1001"
        assert balance("5100") == Decimal("750.00")
        assert balance("2010") == Decimal("750.00")

    def test_unpost_allowed_by_default_config(self, session, chart, clock, ledger_config, balance):
        engine = PostingEngine(
            session, clock=clock, redraftable_modules=ledger_config.redraftable_modules
        )
        engine.post(GeneralJournalAdapter().derive_entry(_entry()))

        result = engine.unpost("JV-1001", reason="wrong amount")

        assert result.draft_entry_id == "JV-1001~R1"
        assert balance("5100") == Decimal("0.00")
        draft = session.get(JournalEntry, "JV-1001~R1")
        assert draft.status == JournalEntryStatus.DRAFT
        assert draft.source_module == "General"

    def test_correct_draft_then_post(self, session, engine, balance):
        adapter = GeneralJournalAdapter()
        engine.post(adapter.derive_entry(_entry()))
        draft_id = engine.unpost("JV-1001").draft_entry_id

        corrected = _entry(
            "1001",
            ManualJournalLine("5100", debit=Money.of("800")),
            ManualJournalLine("2010", credit=Money.of("800")),
        )
        engine.update_draft(draft_id, adapter.derive_entry(corrected))
        engine.post_draft(draft_id)

        assert balance("5100") == Decimal("800.00")
        assert balance("2010") == Decimal("800.00")
        assert session.get(JournalEntry, draft_id).posting_key == "General:1001:primary"
