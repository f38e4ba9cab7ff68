# src/formflow/core/clock.py
"""Clock abstraction for testable date and schedule logic.

Schedule gating, entry timestamps, and the {date}/{time}/{datetime}/{uniqid}
tokens all read the current time through a Clock so tests can pin it.

Production code uses SystemClock (the default).
Tests inject MockClock to control the current instant.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Abstract wall clock."""

    def now(self) -> datetime:
        """Return the current instant as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Production clock reading the system wall clock."""

    def now(self) -> datetime:
        return datetime.now(tz=UTC)


class MockClock:
    """Controllable clock for deterministic testing.

    Example:
        clock = MockClock(datetime(2024, 3, 1, 12, 0, tzinfo=UTC))
        gate = EntryGate(settings, repository, capabilities, clock=clock)

        clock.advance(timedelta(days=2))
        assert gate.check_schedule(form) is not None
    """

    def __init__(self, start: datetime | None = None) -> None:
        """Initialize mock clock.

        Args:
            start: Initial instant. Naive datetimes are taken as UTC.
                Defaults to 2024-01-01 00:00:00 UTC.
        """
        if start is None:
            start = datetime(2024, 1, 1, tzinfo=UTC)
        elif start.tzinfo is None:
            start = start.replace(tzinfo=UTC)
        self._current = start

    def now(self) -> datetime:
        return self._current

    def advance(self, delta: timedelta) -> None:
        """Advance mock time.

        Raises:
            ValueError: If delta is negative.
        """
        if delta < timedelta(0):
            raise ValueError(f"Cannot advance time by negative amount: {delta}")
        self._current += delta

    def set(self, value: datetime) -> None:
        """Set mock time to an absolute instant."""
        self._current = value if value.tzinfo is not None else value.replace(tzinfo=UTC)


# Default clock for production use
DEFAULT_CLOCK: Clock = SystemClock()
