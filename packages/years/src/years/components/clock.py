"""
Clocks supply "now" for alias resolution.

The process-wide default clock is the one swappable piece of global state:
tests (or reproducible batch runs) replace it with a FixedClock. Swapping is
not thread-safe; do it before parsers start resolving aliases.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time."""
        ...


class SystemClock(Clock):
    """Wall clock, always timezone-aware UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock frozen at a given instant; a naive *moment* is taken as UTC."""

    def __init__(self, moment: datetime) -> None:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        self._moment = moment

    def now(self) -> datetime:
        return self._moment

    def __repr__(self) -> str:
        return f"FixedClock({self._moment.isoformat()})"


_default_clock: Clock = SystemClock()


def get_default_clock() -> Clock:
    return _default_clock


def set_default_clock(clock: Clock) -> None:
    """Replace the process-wide clock used by parsers that have none of their own."""
    global _default_clock
    _default_clock = clock


def reset_default_clock() -> None:
    set_default_clock(SystemClock())
