"""PrimeBets configuration schema: YAML + Pydantic + env override."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ════════════════════════════════════════════════════════════
# SUB-CONFIGS (nested BaseModel)
# ════════════════════════════════════════════════════════════


class AppConfig(BaseModel):
    name: str = "PrimeBets"
    timezone: str = "America/Sao_Paulo"


class DatabaseConfig(BaseModel):
    path: str = "data/primebets.db"


class SchedulerConfig(BaseModel):
    """Job scheduler loop."""

    poll_interval_s: float = 30.0  # upper bound on sleep between due-checks
    handler_timeout_s: float = 300.0  # 0 = no timeout


class NotificationsConfig(BaseModel):
    max_history: int = 50
    default_ttl_days: int | None = 30
    push_webhook_url: str = ""  # empty → push disabled


class PlanPrice(BaseModel):
    price: float
    currency: str = "BRL"


class PaymentsConfig(BaseModel):
    """Simulated payment gateway."""

    success_rate: float = Field(default=0.8, ge=0.0, le=1.0)
    delay_s: float = 1.0
    prices: dict[str, PlanPrice] = Field(
        default_factory=lambda: {
            "monthly": PlanPrice(price=29.90),
            "quarterly": PlanPrice(price=79.90),
            "yearly": PlanPrice(price=299.90),
        }
    )


# Automations
class JobConfig(BaseModel):
    """Common schedule parameters.

    A job runs either every ``interval_minutes`` or at the next ``time``
    (HH:MM, local timezone), optionally restricted to ``day_of_week``.
    """

    enabled: bool = True
    interval_minutes: int | None = None
    time: str | None = None
    day_of_week: str | None = None
    run_immediately: bool = False

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str | None) -> str | None:
        if value is None:
            return value
        hour, _, minute = value.partition(":")
        if not (hour.isdigit() and minute.isdigit()):
            raise ValueError(f"time must be HH:MM, got {value!r}")
        if not (0 <= int(hour) < 24 and 0 <= int(minute) < 60):
            raise ValueError(f"time out of range: {value!r}")
        return f"{int(hour):02d}:{int(minute):02d}"


class DailyPredictionsConfig(JobConfig):
    time: str | None = "08:00"
    free_limit: int = 3
    premium_limit: int = 10


class PlatformUpdatesConfig(JobConfig):
    interval_minutes: int | None = 6 * 60
    run_immediately: bool = True
    notify_leader_change: bool = True


class PerformanceReportsConfig(JobConfig):
    time: str | None = "09:00"
    day_of_week: str | None = "mon"
    window_days: int = 7
    history_limit: int = 12
    include_recommendations: bool = True


class PremiumChecksConfig(JobConfig):
    interval_minutes: int | None = 60
    run_immediately: bool = True
    notify_on_expiration: bool = True


class RenewalRemindersConfig(JobConfig):
    time: str | None = "10:00"
    reminder_days: list[int] = Field(default_factory=lambda: [7, 3, 1, 0])


class OddsMonitoringConfig(JobConfig):
    interval_minutes: int | None = 15
    premium_only: bool = True
    threshold_pct: float = 10.0  # best odds at least this % above market average


class AutomationsConfig(BaseModel):
    """Compiled-in defaults for every automation (overridable at runtime)."""

    daily_predictions: DailyPredictionsConfig = Field(default_factory=DailyPredictionsConfig)
    platform_updates: PlatformUpdatesConfig = Field(default_factory=PlatformUpdatesConfig)
    performance_reports: PerformanceReportsConfig = Field(
        default_factory=PerformanceReportsConfig
    )
    premium_checks: PremiumChecksConfig = Field(default_factory=PremiumChecksConfig)
    renewal_reminders: RenewalRemindersConfig = Field(default_factory=RenewalRemindersConfig)
    odds_monitoring: OddsMonitoringConfig = Field(default_factory=OddsMonitoringConfig)


class ApiConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


# ════════════════════════════════════════════════════════════
# ROOT CONFIG (BaseSettings: env + .env support)
# ════════════════════════════════════════════════════════════


class Config(BaseSettings):
    """
    Root configuration.

    Priority: env vars > .env > YAML (init kwargs) > defaults

    Env override examples:
        PRIMEBETS_APP__TIMEZONE=UTC
        PRIMEBETS_DATABASE__PATH=data/prod.db
        PRIMEBETS_AUTOMATIONS__ODDS_MONITORING__ENABLED=false
    """

    model_config = SettingsConfigDict(
        env_prefix="PRIMEBETS_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app: AppConfig = Field(default_factory=AppConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    payments: PaymentsConfig = Field(default_factory=PaymentsConfig)
    automations: AutomationsConfig = Field(default_factory=AutomationsConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @property
    def db_path(self) -> Path:
        return Path(self.database.path)

    @property
    def push_enabled(self) -> bool:
        return bool(self.notifications.push_webhook_url)
