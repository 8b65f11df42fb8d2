from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of the current UTC instant."""

    def now(self) -> datetime:
        """Return a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Wall-clock implementation used in production."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """Clock pinned to a single instant, movable by tests."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        self._instant = instant


def today(clock: Clock) -> date:
    """Current UTC calendar date according to ``clock``."""
    return clock.now().astimezone(UTC).date()


_clock: Clock = SystemClock()


def get_clock() -> Clock:
    return _clock


def set_clock(clock: Clock) -> None:
    """Override the clock (for testing)."""
    global _clock
    _clock = clock
