"""JobScheduler: named recurring jobs on a single asyncio event loop."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING

from loguru import logger

from primebets.core.clock import Clock, SystemClock
from primebets.core.scheduler.rules import IntervalRule, ScheduleRule
from primebets.core.scheduler.types import Handler, Job, JobStatus

if TYPE_CHECKING:
    from primebets.storage.store import KeyValueStore

STATE_KEY = "scheduler:jobs"


class JobScheduler:
    """Runs named, independent, recurring jobs.

    Each job has at most one in-flight execution: a firing that comes due
    while the previous run is still going is skipped, not queued.  Handler
    errors and timeouts are caught and logged; the job keeps its cadence.

    ``start()`` drives the loop against the real event loop; tests call
    ``run_pending()`` directly with a manual clock.  When a store is
    given, per-job run metadata is persisted so interval jobs resume their
    cadence after a process restart.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        store: KeyValueStore | None = None,
        poll_interval_s: float = 30.0,
        handler_timeout_s: float | None = 300.0,
    ):
        self.clock = clock or SystemClock()
        self.store = store
        self.poll_interval_s = poll_interval_s
        self.handler_timeout_s = handler_timeout_s or None
        self._jobs: dict[str, Job] = {}
        self._inflight: dict[str, asyncio.Task] = {}
        self._running = False
        self._wake: asyncio.Event | None = None

    # ── Registration & control ──────────────────────────────

    def register(
        self,
        name: str,
        rule: ScheduleRule,
        handler: Handler,
        run_immediately: bool = False,
    ) -> Job:
        """Register (or replace) a job and arm its first run."""
        previous = self._jobs.get(name)
        if previous is not None:
            # Pending run of the old registration is cancelled; an in-flight run
            # finishes but is not re-armed.
            previous.enabled = False
            previous.next_run_at = None
            logger.warning(f"Job '{name}' re-registered, previous registration replaced")

        now = self.clock.now()
        job = Job(name=name, rule=rule, handler=handler)
        self._restore(job)
        job.next_run_at = now if run_immediately else self._first_run(job, now)
        self._jobs[name] = job
        self._notify()
        logger.info(
            f"Job registered: {name} ({rule.describe()}), next run {job.next_run_at.isoformat()}"
        )
        return job

    def stop(self, name: str) -> None:
        """Cancel the pending run and disable. Unknown names are ignored."""
        job = self._jobs.get(name)
        if job is None:
            logger.debug(f"stop: unknown job '{name}' ignored")
            return
        if not job.enabled:
            return
        job.enabled = False
        job.next_run_at = None
        self._notify()
        logger.info(f"Job stopped: {name}")

    def stop_all(self) -> None:
        for name in list(self._jobs):
            self.stop(name)
        logger.info(f"All jobs stopped ({len(self._jobs)})")

    def restart(self, name: str) -> None:
        """Re-enable a job and arm it relative to now. Unknown names are ignored."""
        job = self._jobs.get(name)
        if job is None:
            logger.debug(f"restart: unknown job '{name}' ignored")
            return
        job.enabled = True
        job.next_run_at = job.rule.next_after(self.clock.now())
        self._notify()
        logger.info(f"Job restarted: {name}, next run {job.next_run_at.isoformat()}")

    def get(self, name: str) -> Job | None:
        return self._jobs.get(name)

    def list(self) -> list[JobStatus]:
        return [self._status(job) for job in self._jobs.values()]

    def is_running(self, name: str) -> bool:
        task = self._inflight.get(name)
        return task is not None and not task.done()

    @property
    def running(self) -> bool:
        return self._running

    # ── Dispatch ────────────────────────────────────────────

    async def run_pending(self) -> list[asyncio.Task]:
        """Dispatch every enabled job that is due now. Returns the spawned tasks."""
        now = self.clock.now()
        tasks = []
        for job in list(self._jobs.values()):
            if not job.enabled or job.next_run_at is None or job.next_run_at > now:
                continue
            task = self._dispatch(job, now)
            if task is not None:
                tasks.append(task)
        return tasks

    def run_now(self, name: str) -> asyncio.Task | None:
        """Execute a job once, out of schedule. None if unknown or already running."""
        job = self._jobs.get(name)
        if job is None:
            logger.debug(f"run_now: unknown job '{name}' ignored")
            return None
        return self._dispatch(job, self.clock.now(), rearm=False)

    def _dispatch(self, job: Job, now: datetime, rearm: bool = True) -> asyncio.Task | None:
        if rearm:
            job.next_run_at = job.rule.next_after(now)
        if self.is_running(job.name):
            job.skipped_count += 1
            logger.warning(f"Job '{job.name}' still running, firing skipped")
            return None
        task = asyncio.create_task(self._execute(job), name=f"job:{job.name}")
        self._inflight[job.name] = task
        return task

    async def _execute(self, job: Job) -> None:
        started = self.clock.now()
        logger.info(f"Job trigger: {job.name}")
        try:
            if self.handler_timeout_s:
                await asyncio.wait_for(job.handler(), timeout=self.handler_timeout_s)
            else:
                await job.handler()
            job.last_error = None
            logger.info(f"Job completed: {job.name}")
        except asyncio.TimeoutError:
            job.failure_count += 1
            job.last_error = f"timed out after {self.handler_timeout_s:g}s"
            logger.error(f"Job {job.name} timed out after {self.handler_timeout_s:g}s")
        except Exception as e:
            job.failure_count += 1
            job.last_error = str(e) or type(e).__name__
            logger.error(f"Job {job.name} failed: {e!r}")
        finally:
            finished = self.clock.now()
            job.last_run_at = finished
            job.run_count += 1
            job.last_duration_ms = int((finished - started).total_seconds() * 1000)
            current = self._jobs.get(job.name) is job
            # Stopped during execution → stays stopped. The slot armed at
            # dispatch stands unless the run outlasted it.
            if job.enabled and current and (
                job.next_run_at is None or job.next_run_at <= finished
            ):
                job.next_run_at = job.rule.next_after(finished)
            if current:
                self._persist(job)
            self._notify()

    # ── Loop ────────────────────────────────────────────────

    async def start(self) -> None:
        """Run the dispatch loop until ``shutdown()``."""
        if self._running:
            return
        self._running = True
        self._wake = asyncio.Event()
        logger.info(f"JobScheduler started with {len(self._jobs)} jobs")
        while self._running:
            await self.run_pending()
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self._sleep_seconds())
            except asyncio.TimeoutError:
                pass
            self._wake.clear()

    async def shutdown(self) -> None:
        """Stop the loop and every job, then wait for in-flight handlers."""
        self._running = False
        self.stop_all()
        self._notify()
        pending = [t for t in self._inflight.values() if not t.done()]
        if pending:
            logger.info(f"Waiting for {len(pending)} running jobs to finish")
            await asyncio.gather(*pending, return_exceptions=True)
        self._inflight.clear()
        logger.info("JobScheduler stopped")

    def _sleep_seconds(self) -> float:
        now = self.clock.now()
        upcoming = [
            (job.next_run_at - now).total_seconds()
            for job in self._jobs.values()
            if job.enabled and job.next_run_at is not None
        ]
        if not upcoming:
            return self.poll_interval_s
        return max(0.0, min(min(upcoming), self.poll_interval_s))

    def _notify(self) -> None:
        if self._wake is not None:
            self._wake.set()

    # ── Persistence (best effort) ───────────────────────────

    def _first_run(self, job: Job, now: datetime) -> datetime:
        # Interval jobs pick up their cadence from the last persisted run; an
        # overdue one runs once now. Clock jobs always wait for their next slot.
        if isinstance(job.rule, IntervalRule) and job.last_run_at is not None:
            return max(job.rule.next_after(job.last_run_at), now)
        return job.rule.next_after(now)

    def _restore(self, job: Job) -> None:
        if self.store is None:
            return
        saved = (self.store.get_json(STATE_KEY) or {}).get(job.name)
        if not isinstance(saved, dict):
            return
        try:
            last = saved.get("last_run_at")
            job.last_run_at = datetime.fromisoformat(last) if last else None
            job.run_count = int(saved.get("run_count", 0))
            job.failure_count = int(saved.get("failure_count", 0))
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring corrupt scheduler state for {job.name}: {e}")

    def _persist(self, job: Job) -> None:
        if self.store is None:
            return
        state = self.store.get_json(STATE_KEY) or {}
        if not isinstance(state, dict):
            state = {}
        state[job.name] = {
            "last_run_at": job.last_run_at.isoformat() if job.last_run_at else None,
            "run_count": job.run_count,
            "failure_count": job.failure_count,
            "last_error": job.last_error,
        }
        self.store.set_json(STATE_KEY, state)

    def _status(self, job: Job) -> JobStatus:
        return JobStatus(
            name=job.name,
            schedule=job.rule.describe(),
            enabled=job.enabled,
            running=self.is_running(job.name),
            last_run_at=job.last_run_at,
            next_run_at=job.next_run_at,
            run_count=job.run_count,
            failure_count=job.failure_count,
            skipped_count=job.skipped_count,
            last_error=job.last_error,
            last_duration_ms=job.last_duration_ms,
        )
