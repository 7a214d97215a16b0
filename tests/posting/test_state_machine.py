"""
Journal entry lifecycle tests.

Verifies the DRAFT -> POSTED -> REVERSED state machine:
- Drafts never touch balances and may be edited or deleted
- post_draft applies deltas and takes the posting key
- Every illegal transition raises InvalidStateTransitionError
"""

import pytest
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select

from ledger_kernel.exceptions import (
    AccountNotFoundError,
    EntryAlreadyExistsError,
    EntryNotFoundError,
    InvalidStateTransitionError,
)
from ledger_kernel.models.journal import (
    VALID_TRANSITIONS,
    JournalEntry,
    JournalEntryStatus,
    JournalLine,
    validate_transition,
)


SALE = [("1011", "100", "0"), ("4000", "0", "100")]


class TestTransitionTable:
    def test_draft_to_posted(self):
        validate_transition("X", JournalEntryStatus.DRAFT, JournalEntryStatus.POSTED)

    def test_posted_to_reversed(self):
        validate_transition("X", JournalEntryStatus.POSTED, JournalEntryStatus.REVERSED)

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            (JournalEntryStatus.DRAFT, JournalEntryStatus.REVERSED),
            (JournalEntryStatus.POSTED, JournalEntryStatus.DRAFT),
            (JournalEntryStatus.POSTED, JournalEntryStatus.POSTED),
            (JournalEntryStatus.REVERSED, JournalEntryStatus.POSTED),
            (JournalEntryStatus.REVERSED, JournalEntryStatus.DRAFT),
        ],
    )
    def test_illegal(self, from_status, to_status):
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            validate_transition("X", from_status, to_status)
        assert exc_info.value.from_status == from_status.value
        assert exc_info.value.to_status == to_status.value

    def test_reversed_is_terminal(self):
        assert VALID_TRANSITIONS[JournalEntryStatus.REVERSED] == frozenset()


class TestDrafts:
    def test_save_draft(self, engine, session, make_entry, balance):
        engine.save_draft(make_entry("1", SALE))

        row = session.get(JournalEntry, "JV-TEST-1")
        assert row.status == JournalEntryStatus.DRAFT
        assert row.posting_key is None
        assert row.posted_at is None
        assert len(row.lines) == 2
        assert balance("1011") == Decimal("0.00")

    def test_save_draft_twice(self, engine, make_entry):
        engine.save_draft(make_entry("1", SALE))
        with pytest.raises(EntryAlreadyExistsError) as exc_info:
            engine.save_draft(make_entry("1", SALE))
        assert exc_info.value.status == "draft"

    def test_save_draft_unknown_account(self, engine, session, make_entry):
        with pytest.raises(AccountNotFoundError):
            engine.save_draft(make_entry("1", [("1011", "1", "0"), ("8888", "0", "1")]))
        assert session.get(JournalEntry, "JV-TEST-1") is None

    def test_post_over_existing_draft_id(self, engine, make_entry):
        engine.save_draft(make_entry("1", SALE))
        with pytest.raises(EntryAlreadyExistsError):
            engine.post(make_entry("1", SALE))

    def test_post_draft(self, engine, session, make_entry, balance, clock):
        engine.save_draft(make_entry("1", SALE))
        assert engine.post_draft("JV-TEST-1") == "JV-TEST-1"

        row = session.get(JournalEntry, "JV-TEST-1")
        assert row.status == JournalEntryStatus.POSTED
        assert row.posting_key == "Test:1:primary"
        assert row.posted_at is not None
        assert balance("1011") == Decimal("100.00")
        assert balance("4000") == Decimal("100.00")

    def test_post_draft_twice(self, engine, make_entry, balance):
        engine.save_draft(make_entry("1", SALE))
        engine.post_draft("JV-TEST-1")

        with pytest.raises(InvalidStateTransitionError):
            engine.post_draft("JV-TEST-1")
        assert balance("1011") == Decimal("100.00")

    def test_post_missing_draft(self, engine):
        with pytest.raises(EntryNotFoundError):
            engine.post_draft("JV-NOPE")

    def test_delete_draft(self, engine, session, make_entry):
        engine.save_draft(make_entry("1", SALE))
        engine.delete_draft("JV-TEST-1")

        assert session.get(JournalEntry, "JV-TEST-1") is None
        lines = session.execute(
            select(func.count()).select_from(JournalLine).where(
                JournalLine.journal_entry_id == "JV-TEST-1"
            )
        ).scalar_one()
        assert lines == 0

    def test_deleted_draft_id_is_reusable(self, engine, make_entry, balance):
        engine.save_draft(make_entry("1", SALE))
        engine.delete_draft("JV-TEST-1")
        engine.post(make_entry("1", SALE))
        assert balance("1011") == Decimal("100.00")

    def test_delete_missing_draft(self, engine):
        with pytest.raises(EntryNotFoundError):
            engine.delete_draft("JV-NOPE")


class TestUpdateDraft:
    def test_replaces_header_and_lines(self, engine, session, make_entry, balance):
        engine.save_draft(make_entry("1", SALE))

        corrected = make_entry(
            "1",
            [("1012", "60", "0"), ("1011", "40", "0"), ("4000", "0", "100")],
            entry_date=date(2026, 1, 20),
        )
        assert engine.update_draft("JV-TEST-1", corrected) == "JV-TEST-1"

        session.expire_all()
        row = session.get(JournalEntry, "JV-TEST-1")
        assert row.status == JournalEntryStatus.DRAFT
        assert row.entry_date == date(2026, 1, 20)
        assert [line.account_id for line in row.lines] == ["1012", "1011", "4000"]
        assert [line.line_seq for line in row.lines] == [0, 1, 2]
        assert balance("1012") == Decimal("0.00")

    def test_updated_draft_posts_new_lines(self, engine, make_entry, balance):
        engine.save_draft(make_entry("1", SALE))
        corrected = make_entry("1", [("1012", "75", "0"), ("4000", "0", "75")])
        engine.update_draft("JV-TEST-1", corrected)
        engine.post_draft("JV-TEST-1")

        assert balance("1011") == Decimal("0.00")
        assert balance("1012") == Decimal("75.00")
        assert balance("4000") == Decimal("75.00")

    def test_old_lines_removed(self, engine, session, make_entry):
        engine.save_draft(make_entry("1", SALE))
        engine.update_draft("JV-TEST-1", make_entry("1", [("1012", "5", "0"), ("4000", "0", "5")]))

        lines = session.execute(
            select(func.count()).select_from(JournalLine).where(
                JournalLine.journal_entry_id == "JV-TEST-1"
            )
        ).scalar_one()
        assert lines == 2

    def test_update_posted(self, engine, session, make_entry, balance):
        engine.post(make_entry("1", SALE))

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            engine.update_draft(
                "JV-TEST-1", make_entry("1", [("1011", "5", "0"), ("4000", "0", "5")])
            )
        assert exc_info.value.from_status == "posted"
        assert exc_info.value.to_status == "updated"
        assert balance("1011") == Decimal("100.00")

    def test_update_unknown_account(self, engine, session, make_entry):
        engine.save_draft(make_entry("1", SALE))
        with pytest.raises(AccountNotFoundError):
            engine.update_draft(
                "JV-TEST-1", make_entry("1", [("1011", "1", "0"), ("8888", "0", "1")])
            )

        session.expire_all()
        row = session.get(JournalEntry, "JV-TEST-1")
        assert [line.account_id for line in row.lines] == ["1011", "4000"]

    def test_update_missing(self, engine, make_entry):
        with pytest.raises(EntryNotFoundError):
            engine.update_draft("JV-NOPE", make_entry("1", SALE))

    def test_update_logged(self, engine, make_entry, captured_logs):
        engine.save_draft(make_entry("1", SALE))
        engine.update_draft("JV-TEST-1", make_entry("1", SALE))

        record = next(r for r in captured_logs() if r["message"] == "draft_updated")
        assert record["entry_id"] == "JV-TEST-1"
        assert record["line_count"] == 2


class TestIllegalLifecycleCalls:
    def test_delete_posted(self, engine, session, make_entry):
        engine.post(make_entry("1", SALE))
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            engine.delete_draft("JV-TEST-1")
        assert exc_info.value.from_status == "posted"
        assert session.get(JournalEntry, "JV-TEST-1") is not None

    def test_delete_reversed(self, engine, make_entry):
        engine.post(make_entry("1", SALE))
        engine.reverse("JV-TEST-1")
        with pytest.raises(InvalidStateTransitionError):
            engine.delete_draft("JV-TEST-1")

    def test_reverse_draft(self, engine, make_entry, balance):
        engine.save_draft(make_entry("1", SALE))
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            engine.reverse("JV-TEST-1")
        assert exc_info.value.from_status == "draft"
        assert balance("1011") == Decimal("0.00")

    def test_reverse_twice(self, engine, make_entry, balance):
        engine.post(make_entry("1", SALE))
        engine.reverse("JV-TEST-1")

        with pytest.raises(InvalidStateTransitionError):
            engine.reverse("JV-TEST-1")
        assert balance("1011") == Decimal("0.00")

    def test_reverse_missing(self, engine):
        with pytest.raises(EntryNotFoundError):
            engine.reverse("JV-NOPE")
