"""UTC time helpers and the injectable clock used by the universe cycles.

``datetime.utcnow()`` is deprecated since Python 3.12, so ``utcnow`` builds
the same naive UTC datetime from an aware one.  Everything that computes
pair age or rebalance throttling reads time through a ``Clock`` so tests can
pin "now" instead of sleeping.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Protocol


def utcnow() -> datetime:
    """Return the current UTC time as a naive (tzinfo=None) datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def now_ms() -> float:
    """Current wall-clock time in epoch milliseconds."""
    return time.time() * 1000.0


def iso_from_ms(epoch_ms: float) -> str:
    """Render epoch milliseconds as an ISO-8601 UTC string with a ``Z`` suffix."""
    dt = datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Clock(Protocol):
    def now_ms(self) -> float: ...


class SystemClock:
    """Clock backed by the system wall clock."""

    def now_ms(self) -> float:
        return now_ms()


class FixedClock:
    """Manually driven clock for deterministic tests and replays."""

    def __init__(self, start_ms: float = 1_700_000_000_000.0):
        self._now_ms = float(start_ms)

    def now_ms(self) -> float:
        return self._now_ms

    def set(self, epoch_ms: float) -> None:
        self._now_ms = float(epoch_ms)

    def advance(self, *, ms: float = 0.0, seconds: float = 0.0, minutes: float = 0.0) -> None:
        self._now_ms += ms + seconds * 1000.0 + minutes * 60_000.0


system_clock = SystemClock()
