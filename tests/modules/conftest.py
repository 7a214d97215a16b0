"""
Shared fixtures for source module tests.

Every fixture is opt-in.  Adapter tests that only derive entries need no
database; tests that post declare ``post`` and get the seeded chart.
"""

import pytest

from ledger_modules.base import post_document


def lines_of(entry):
    """(account_id, debit, credit) triples as strings, for compact assertions."""
    return [
        (line.account_id, str(line.debit), str(line.credit))
        for line in entry.lines
    ]


@pytest.fixture
def post(engine):
    """post(adapter, document) -> entry id, through post_document()."""

    def _post(adapter, document, **kwargs):
        return post_document(engine, adapter, document, **kwargs)

    return _post
