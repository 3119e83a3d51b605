"""Runtime automation config: compiled-in defaults + persisted overrides.

Overrides live under a single store key as ``{job_name: {field: value}}``.
Deleting the key restores the defaults from ``Config.automations``.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from primebets.core.config.schema import AutomationsConfig, JobConfig
from primebets.core.errors import UnknownAutomationError, ValidationError
from primebets.core.scheduler import ClockRule, IntervalRule, ScheduleRule
from primebets.storage.store import KeyValueStore

CONFIG_KEY = "automation_config"

# Job name → AutomationsConfig field
JOB_FIELDS: dict[str, str] = {
    "daily-predictions": "daily_predictions",
    "platform-updates": "platform_updates",
    "performance-reports": "performance_reports",
    "premium-checks": "premium_checks",
    "renewal-reminders": "renewal_reminders",
    "odds-monitoring": "odds_monitoring",
}

SCHEDULE_FIELDS = ("enabled", "interval_minutes", "time", "day_of_week")


class AutomationConfigStore:
    def __init__(self, store: KeyValueStore, defaults: AutomationsConfig | None = None):
        self.store = store
        self.defaults = defaults or AutomationsConfig()

    def _overrides(self) -> dict[str, dict[str, Any]]:
        data = self.store.get_json(CONFIG_KEY, {})
        return data if isinstance(data, dict) else {}

    def default(self, name: str) -> JobConfig:
        if name not in JOB_FIELDS:
            raise UnknownAutomationError(name)
        return getattr(self.defaults, JOB_FIELDS[name])

    def effective(self, name: str) -> JobConfig:
        """Defaults merged with the stored override. A corrupt override is ignored."""
        base = self.default(name)
        override = self._overrides().get(name)
        if not isinstance(override, dict) or not override:
            return base
        try:
            return type(base).model_validate({**base.model_dump(), **override})
        except PydanticValidationError as e:
            logger.warning(f"Ignoring invalid stored config for {name}: {e}")
            return base

    def all(self) -> dict[str, JobConfig]:
        return {name: self.effective(name) for name in JOB_FIELDS}

    def update(self, name: str, partial: dict[str, Any]) -> JobConfig:
        base = self.default(name)
        overrides = self._overrides()
        current = overrides.get(name) if isinstance(overrides.get(name), dict) else {}
        unknown = set(partial) - set(type(base).model_fields)
        if unknown:
            raise ValidationError(f"Unknown config fields for {name}: {sorted(unknown)}")
        merged = {**current, **partial}
        try:
            cfg = type(base).model_validate({**base.model_dump(), **merged})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid config for {name}: {e}") from e
        overrides[name] = merged
        self.store.set_json(CONFIG_KEY, overrides)
        logger.info(f"Automation config updated: {name} {partial}")
        return cfg

    def reset(self) -> None:
        self.store.remove(CONFIG_KEY)
        logger.info("Automation config reset to defaults")


def build_rule(cfg: JobConfig, timezone: str = "UTC") -> ScheduleRule:
    """Wall-clock ``time`` takes precedence over ``interval_minutes``."""
    if cfg.time:
        return ClockRule.parse(cfg.time, cfg.day_of_week, timezone)
    if cfg.interval_minutes:
        return IntervalRule.minutes(cfg.interval_minutes)
    raise ValidationError("job config needs either time or interval_minutes")


def schedule_changed(before: JobConfig, after: JobConfig) -> bool:
    return any(getattr(before, f) != getattr(after, f) for f in SCHEDULE_FIELDS)
