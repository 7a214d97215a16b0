"""
Injectable time source for posting and reversal timestamps.

The posting engine stamps ``posted_at`` and ``reversed_at`` from a Clock
instead of calling ``datetime.now()``, so tests can pin and step time and
statement ordering on ``posted_at`` is reproducible.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Timezone-aware current time."""


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock frozen at ``start`` until advanced.

    Usage::

        clock = DeterministicClock(datetime(2026, 1, 15, 9, tzinfo=timezone.utc))
        engine = PostingEngine(session, clock=clock)
        clock.advance(60)   # later postings sort after earlier ones
    """

    def __init__(self, start: datetime):
        if start.tzinfo is None:
            raise ValueError("DeterministicClock needs a timezone-aware start")
        self._current = start

    def now(self) -> datetime:
        return self._current

    def advance(self, seconds: float = 1) -> datetime:
        self._current += timedelta(seconds=seconds)
        return self._current
