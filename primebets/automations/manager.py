"""AutomationManager: wires the handlers into the JobScheduler and exposes control."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

from primebets.automations import (
    daily_predictions,
    odds_monitoring,
    performance_reports,
    platform_updates,
    premium_checks,
    renewal_reminders,
)
from primebets.automations.config import (
    JOB_FIELDS,
    AutomationConfigStore,
    build_rule,
    schedule_changed,
)
from primebets.automations.context import AutomationContext
from primebets.core.config.schema import AutomationsConfig, JobConfig
from primebets.core.scheduler import JobScheduler, JobStatus

Runner = Callable[[AutomationContext, Any], Awaitable[Any]]

HANDLERS: dict[str, Runner] = {
    "daily-predictions": daily_predictions.run,
    "platform-updates": platform_updates.run,
    "performance-reports": performance_reports.run,
    "premium-checks": premium_checks.run,
    "renewal-reminders": renewal_reminders.run,
    "odds-monitoring": odds_monitoring.run,
}


class AutomationManager:
    """Control surface over every automation job.

    Handlers read their effective config at each run, so parameter changes
    (thresholds, limits) apply on the next firing; schedule changes
    re-register the job.
    """

    def __init__(
        self,
        scheduler: JobScheduler,
        ctx: AutomationContext,
        defaults: AutomationsConfig | None = None,
        timezone: str = "UTC",
    ):
        self.scheduler = scheduler
        self.ctx = ctx
        self.timezone = timezone
        self.config = AutomationConfigStore(ctx.store, defaults)

    @staticmethod
    def names() -> list[str]:
        return list(JOB_FIELDS)

    def _handler(self, name: str):
        runner = HANDLERS[name]

        async def handler() -> None:
            await runner(self.ctx, self.config.effective(name))

        return handler

    def _register(self, name: str, cfg: JobConfig, run_immediately: bool = False) -> None:
        self.scheduler.register(
            name,
            build_rule(cfg, self.timezone),
            self._handler(name),
            run_immediately=run_immediately,
        )

    def _apply(self, name: str, before: JobConfig, after: JobConfig) -> None:
        registered = self.scheduler.get(name) is not None
        if not after.enabled:
            self.scheduler.stop(name)
        elif not registered or schedule_changed(before, after):
            self._register(name, after)

    # ── Lifecycle ───────────────────────────────────────────

    def initialize_all(self) -> None:
        """Register every enabled automation."""
        count = 0
        for name in JOB_FIELDS:
            cfg = self.config.effective(name)
            if not cfg.enabled:
                logger.debug(f"Automation disabled by config: {name}")
                continue
            self._register(name, cfg, run_immediately=cfg.run_immediately)
            count += 1
        logger.info(f"Automations initialized: {count}/{len(JOB_FIELDS)} enabled")

    def stop_all(self) -> None:
        self.scheduler.stop_all()

    def restart_all(self) -> None:
        """Re-arm every registered job that config still has enabled."""
        for name in JOB_FIELDS:
            if self.scheduler.get(name) is None:
                continue
            if not self.config.effective(name).enabled:
                logger.debug(f"restart_all: {name} disabled by config, left stopped")
                continue
            self.scheduler.restart(name)
        logger.info("All automations restarted")

    def status(self) -> list[JobStatus]:
        return self.scheduler.list()

    def stop(self, name: str) -> None:
        self.scheduler.stop(name)

    def restart(self, name: str) -> None:
        self.scheduler.restart(name)

    def run_now(self, name: str) -> asyncio.Task | None:
        return self.scheduler.run_now(name)

    # ── Config ──────────────────────────────────────────────

    def get_config(self) -> dict[str, dict[str, Any]]:
        return {name: cfg.model_dump() for name, cfg in self.config.all().items()}

    def update_config(self, name: str, partial: dict[str, Any]) -> JobConfig:
        """Persist a partial override. Raises UnknownAutomationError for unknown names."""
        before = self.config.effective(name)
        after = self.config.update(name, partial)
        self._apply(name, before, after)
        return after

    def reset_config(self) -> None:
        before = self.config.all()
        self.config.reset()
        for name in JOB_FIELDS:
            self._apply(name, before[name], self.config.effective(name))
