"""Clock abstraction: the scheduler and services never call wall-clock time directly."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    def now(self) -> datetime:
        """Current time as a timezone-aware datetime."""
        ...


class SystemClock:
    """Wall clock in a fixed timezone."""

    def __init__(self, timezone: str | tzinfo = "UTC"):
        self.tz = ZoneInfo(timezone) if isinstance(timezone, str) else timezone

    def now(self) -> datetime:
        return datetime.now(self.tz)
