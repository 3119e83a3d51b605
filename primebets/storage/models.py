"""Pydantic data models: domain records and API payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

PlanName = Literal["monthly", "quarterly", "yearly"]
SubscriptionStatus = Literal["active", "cancelled", "expired"]
BettorStyle = Literal["conservative", "balanced", "highRisk", "strategic", "recreational"]
BetResult = Literal["pending", "win", "loss"]
NotificationType = Literal[
    "new_prediction",
    "advantageous_odds",
    "renewal",
    "update",
    "performance_report",
    "platform_update",
]


# ════════════════════════════════════════════════════════════
# DOMAIN MODELS
# ════════════════════════════════════════════════════════════


class User(BaseModel):
    user_id: str
    name: str
    email: str | None = None
    created_at: datetime


class Subscription(BaseModel):
    """One premium subscription per user.

    ``reminders_sent`` holds the renewal-reminder thresholds already
    notified in the current billing cycle; ``lapse_handled`` marks that the
    premium check processed the current expiry.  Both reset on renewal.
    """

    user_id: str
    plan: PlanName = "monthly"
    status: SubscriptionStatus = "active"
    start_date: datetime
    expires_at: datetime
    auto_renew: bool = True
    last_payment_id: str | None = None
    reminders_sent: list[int] = Field(default_factory=list)
    lapse_handled: bool = False


class Notification(BaseModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    read: bool = False
    created_at: datetime
    expires_at: datetime | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class BettorProfile(BaseModel):
    """Quiz-derived risk classification. Replaced wholesale, never patched."""

    style: BettorStyle
    scores: dict[str, float]
    confidence: int
    created_at: datetime | None = None


class BetRecord(BaseModel):
    id: str
    user_id: str
    match: str
    market: str = "match_result"
    odds: float
    stake: float
    result: BetResult = "pending"
    placed_at: datetime
    settled_at: datetime | None = None
    profit: float | None = None


class PlatformSnapshot(BaseModel):
    id: str
    name: str
    average_odds: float
    ranking: int = 0
    last_update: datetime
    markets: dict[str, float] = Field(default_factory=dict)


class PerformanceStats(BaseModel):
    total_bets: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    average_odds: float = 0.0
    total_profit: float = 0.0
    best_day: str = "N/A"
    worst_day: str = "N/A"
    favorite_market: str = "match_result"
    recommendations: list[str] = Field(default_factory=list)


class PerformanceReport(BaseModel):
    created_at: datetime
    stats: PerformanceStats
    text: str


# ════════════════════════════════════════════════════════════
# API REQUEST / RESPONSE
# ════════════════════════════════════════════════════════════


class HealthResponse(BaseModel):
    status: str
    version: str = ""
    scheduler_running: bool = False
    jobs: int = 0


class UserRequest(BaseModel):
    name: str
    email: str | None = None


class SubscriptionRequest(BaseModel):
    plan: PlanName = "monthly"
    auto_renew: bool = True


class QuizAnswer(BaseModel):
    question_id: int
    option_id: str


class QuizRequest(BaseModel):
    answers: list[QuizAnswer]


class BetRequest(BaseModel):
    match: str
    odds: float
    stake: float
    market: str = "match_result"


class BetSettleRequest(BaseModel):
    result: Literal["win", "loss"]
