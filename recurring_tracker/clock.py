# recurring_tracker/clock.py
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Return the current moment."""
        pass


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """Always reports the same moment. Used by tests and ``--now``."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def now(self) -> datetime:
        return self.moment


_default_clock: Clock = SystemClock()


def get_clock() -> Clock:
    return _default_clock


def set_clock(clock: Clock) -> Clock:
    """Install *clock* as the default and return the previous one."""
    global _default_clock
    previous = _default_clock
    _default_clock = clock
    return previous


def resolve_now(now: datetime | None = None) -> datetime:
    return now if now is not None else _default_clock.now()
