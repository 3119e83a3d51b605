"""Job scheduling: asyncio loop + APScheduler cron matching."""

from primebets.core.scheduler.rules import ClockRule, IntervalRule, ScheduleRule
from primebets.core.scheduler.scheduler import JobScheduler
from primebets.core.scheduler.types import Job, JobStatus

__all__ = ["JobScheduler", "Job", "JobStatus", "ScheduleRule", "IntervalRule", "ClockRule"]
