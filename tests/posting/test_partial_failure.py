"""
Atomicity tests.

A failure at any step of a posting must leave the ledger exactly as it was:
no entry row, no lines, and no balance delta from the lines already applied.
"""

import pytest
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from ledger_kernel.exceptions import TransactionAbortedError, UnbalancedEntryError
from ledger_kernel.models.journal import JournalEntry, JournalEntryStatus
from ledger_kernel.services.account_ledger import AccountLedger
from ledger_kernel.services.posting_engine import PostingEngine


SALE = [("1200", "1150", "0"), ("4000", "0", "1000"), ("2200", "0", "150")]


def _fail_on_call(monkeypatch, n, exc):
    """Make the n-th AccountLedger.apply_delta call raise exc."""
    original = AccountLedger.apply_delta
    calls = {"count": 0}

    def flaky(self, account_id, signed_amount):
        calls["count"] += 1
        if calls["count"] == n:
            raise exc
        return original(self, account_id, signed_amount)

    monkeypatch.setattr(AccountLedger, "apply_delta", flaky)
    return calls


class TestFailureMidPosting:
    def test_second_delta_fails(self, engine, session, make_entry, balance, monkeypatch):
        calls = _fail_on_call(monkeypatch, 2, RuntimeError("disk full"))

        with pytest.raises(RuntimeError, match="disk full"):
            engine.post(make_entry("1", SALE))

        assert calls["count"] == 2
        assert session.get(JournalEntry, "JV-TEST-1") is None
        assert balance("1200") == Decimal("0.00")
        assert balance("4000") == Decimal("0.00")
        assert balance("2200") == Decimal("0.00")

    def test_last_delta_fails(self, engine, session, make_entry, balance, monkeypatch):
        _fail_on_call(monkeypatch, 3, RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            engine.post(make_entry("1", SALE))

        assert session.get(JournalEntry, "JV-TEST-1") is None
        assert balance("1200") == Decimal("0.00")

    def test_retry_after_failure_succeeds(self, engine, make_entry, balance, monkeypatch):
        _fail_on_call(monkeypatch, 2, RuntimeError("transient"))
        with pytest.raises(RuntimeError):
            engine.post(make_entry("1", SALE))
        monkeypatch.undo()

        engine.post(make_entry("1", SALE))
        assert balance("1200") == Decimal("1150.00")
        assert balance("2200") == Decimal("150.00")

    def test_earlier_postings_survive(self, engine, session, make_entry, balance, monkeypatch):
        engine.post(make_entry("0", [("1011", "10", "0"), ("4000", "0", "10")]))
        _fail_on_call(monkeypatch, 2, RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            engine.post(make_entry("1", SALE))

        assert session.get(JournalEntry, "JV-TEST-0").status == JournalEntryStatus.POSTED
        assert balance("4000") == Decimal("10.00")


class TestStorageFailure:
    def test_driver_error_becomes_transaction_aborted(
        self, engine, session, make_entry, balance, monkeypatch, captured_logs
    ):
        _fail_on_call(
            monkeypatch,
            2,
            OperationalError("UPDATE accounts", {}, Exception("database is locked")),
        )

        with pytest.raises(TransactionAbortedError) as exc_info:
            engine.post(make_entry("1", SALE))

        assert exc_info.value.operation == "post"
        assert exc_info.value.entry_id == "JV-TEST-1"
        assert "database is locked" in exc_info.value.reason
        assert session.get(JournalEntry, "JV-TEST-1") is None
        assert balance("1200") == Decimal("0.00")
        assert any(r["message"] == "transaction_aborted" for r in captured_logs())

    def test_draft_lookup_failure_becomes_transaction_aborted(
        self, engine, session, make_entry, balance, monkeypatch
    ):
        engine.save_draft(make_entry("1", SALE))

        def locked(self, entry_id):
            raise OperationalError("SELECT journal_entries", {}, Exception("lock timeout"))

        monkeypatch.setattr(PostingEngine, "_load_for_update", locked)

        with pytest.raises(TransactionAbortedError) as exc_info:
            engine.post_draft("JV-TEST-1")
        monkeypatch.undo()

        assert exc_info.value.operation == "post_draft"
        assert "lock timeout" in exc_info.value.reason
        assert session.get(JournalEntry, "JV-TEST-1").status == JournalEntryStatus.DRAFT
        assert balance("1200") == Decimal("0.00")

    def test_reversal_failure_keeps_original_posted(
        self, engine, session, make_entry, balance, monkeypatch
    ):
        engine.post(make_entry("1", SALE))
        _fail_on_call(monkeypatch, 2, RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            engine.reverse("JV-TEST-1")

        original = session.get(JournalEntry, "JV-TEST-1")
        assert original.status == JournalEntryStatus.POSTED
        assert original.posting_key == "Test:1:primary"
        assert session.get(JournalEntry, "JV-TEST-1~REV") is None
        assert balance("1200") == Decimal("1150.00")


class TestZeroSumPostcondition:
    def test_mis_signed_delta_aborts(self, engine, session, make_entry, balance, monkeypatch):
        monkeypatch.setattr(
            "ledger_kernel.services.posting_engine.signed_delta",
            lambda kind, debit, credit: debit,
        )

        with pytest.raises(UnbalancedEntryError):
            engine.post(make_entry("1", [("1011", "100", "0"), ("4000", "0", "100")]))

        assert session.get(JournalEntry, "JV-TEST-1") is None
        assert balance("1011") == Decimal("0.00")
