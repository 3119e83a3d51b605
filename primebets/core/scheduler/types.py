"""Scheduler job types."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel

from primebets.core.scheduler.rules import ScheduleRule

Handler = Callable[[], Awaitable[None]]


@dataclass(eq=False)
class Job:
    """A named recurring task owned by the scheduler.

    ``next_run_at`` is None while the job is stopped.
    """

    name: str
    rule: ScheduleRule
    handler: Handler
    enabled: bool = True
    last_run_at: datetime | None = None
    next_run_at: datetime | None = None
    run_count: int = 0
    failure_count: int = 0
    skipped_count: int = 0
    last_error: str | None = None
    last_duration_ms: int | None = None


class JobStatus(BaseModel):
    """Read-only snapshot of a job: what ``list()`` returns."""

    name: str
    schedule: str
    enabled: bool
    running: bool = False
    last_run_at: datetime | None = None
    next_run_at: datetime | None = None
    run_count: int = 0
    failure_count: int = 0
    skipped_count: int = 0
    last_error: str | None = None
    last_duration_ms: int | None = None
