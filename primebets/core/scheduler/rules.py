"""Schedule rules: when a job runs next.

Two kinds:
    IntervalRule  fixed period after the last arm time
    ClockRule     next wall-clock HH:MM, optionally on a given weekday

Wall-clock matching is delegated to APScheduler's ``CronTrigger`` so
DST and month boundaries are handled by a well-tested implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from apscheduler.triggers.cron import CronTrigger

_TICK = timedelta(microseconds=1)


class ScheduleRule(Protocol):
    def next_after(self, now: datetime) -> datetime:
        """First run time strictly after ``now``."""
        ...

    def describe(self) -> str: ...


@dataclass(frozen=True)
class IntervalRule:
    seconds: float

    def __post_init__(self) -> None:
        if self.seconds <= 0:
            raise ValueError(f"interval must be positive, got {self.seconds}")

    @classmethod
    def minutes(cls, minutes: float) -> IntervalRule:
        return cls(seconds=minutes * 60)

    def next_after(self, now: datetime) -> datetime:
        return now + timedelta(seconds=self.seconds)

    def describe(self) -> str:
        if self.seconds % 3600 == 0:
            return f"every {int(self.seconds // 3600)}h"
        if self.seconds % 60 == 0:
            return f"every {int(self.seconds // 60)}min"
        return f"every {self.seconds:g}s"


@dataclass(frozen=True)
class ClockRule:
    hour: int
    minute: int = 0
    day_of_week: str | None = None  # cron weekday expression: 'mon', 'mon-fri', ...
    timezone: str = "UTC"

    def __post_init__(self) -> None:
        if not (0 <= self.hour < 24 and 0 <= self.minute < 60):
            raise ValueError(f"invalid time {self.hour}:{self.minute}")

    @classmethod
    def parse(
        cls, time: str, day_of_week: str | None = None, timezone: str = "UTC"
    ) -> ClockRule:
        """Build from an ``HH:MM`` string."""
        hour, _, minute = time.partition(":")
        return cls(int(hour), int(minute or 0), day_of_week, timezone)

    def _trigger(self) -> CronTrigger:
        return CronTrigger(
            day_of_week=self.day_of_week,
            hour=self.hour,
            minute=self.minute,
            second=0,
            timezone=self.timezone,
        )

    def next_after(self, now: datetime) -> datetime:
        # A target equal to now counts as already passed: search from now + 1µs,
        # which CronTrigger rounds up to the next whole second.
        if now.tzinfo is None:
            now = now.replace(tzinfo=ZoneInfo(self.timezone))
        return self._trigger().get_next_fire_time(None, now + _TICK)

    def describe(self) -> str:
        when = f"{self.hour:02d}:{self.minute:02d}"
        if self.day_of_week:
            return f"{self.day_of_week} at {when} ({self.timezone})"
        return f"daily at {when} ({self.timezone})"
