"""SubscriptionLedger: one premium subscription record per user."""

from __future__ import annotations

import calendar
import math
from datetime import datetime, timedelta

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from primebets.core.clock import Clock, SystemClock
from primebets.core.errors import ValidationError
from primebets.storage.models import PlanName, Subscription
from primebets.storage.store import KeyValueStore

PREFIX = "subscription:"

PLAN_MONTHS: dict[str, int] = {"monthly": 1, "quarterly": 3, "yearly": 12}

PREMIUM_FEATURES: dict[str, str] = {
    "platform_comparison": "Compare odds across every platform in real time",
    "advanced_analysis": "Detailed match analysis and deep statistics",
    "unlimited_predictions": "More daily predictions",
    "priority_notifications": "First to know about advantageous odds",
    "detailed_history": "Full statistics and weekly evolution",
}

RENEWAL_WINDOW_DAYS = 7


def add_months(dt: datetime, months: int) -> datetime:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    index = dt.month - 1 + months
    year, month = dt.year + index // 12, index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def plan_period_end(start: datetime, plan: str) -> datetime:
    if plan not in PLAN_MONTHS:
        raise ValidationError(f"Unknown plan: {plan}")
    return add_months(start, PLAN_MONTHS[plan])


def days_until(expires_at: datetime, now: datetime) -> int:
    """Ceiling of whole days from ``now`` to ``expires_at``, floored at 0."""
    seconds = (expires_at - now).total_seconds()
    return max(0, math.ceil(seconds / timedelta(days=1).total_seconds()))


class SubscriptionLedger:
    """Data manager for subscriptions over the key-value store.

    ``get`` is self-healing: an active subscription read past its expiry is
    flipped to ``expired`` and persisted.  ``peek`` reads without that side
    effect, for callers that must observe the pre-lapse record.
    """

    def __init__(self, store: KeyValueStore, clock: Clock | None = None):
        self.store = store
        self.clock = clock or SystemClock()

    # ════════════════════════════════════════════════════════════
    # READ
    # ════════════════════════════════════════════════════════════

    def peek(self, user_id: str) -> Subscription | None:
        data = self.store.get_json(f"{PREFIX}{user_id}")
        if not isinstance(data, dict):
            return None
        try:
            return Subscription.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"Corrupt subscription for {user_id}, treating as absent: {e}")
            return None

    def get(self, user_id: str) -> Subscription | None:
        sub = self.peek(user_id)
        if sub and sub.status == "active" and sub.expires_at < self.clock.now():
            sub.status = "expired"
            self.save(sub)
            logger.info(f"Subscription lazily expired: {user_id}")
        return sub

    def list_all(self) -> list[Subscription]:
        """Every stored subscription, without lazy expiry."""
        subs = []
        for key in self.store.keys(PREFIX):
            sub = self.peek(key[len(PREFIX):])
            if sub is not None:
                subs.append(sub)
        return subs

    # ════════════════════════════════════════════════════════════
    # WRITE
    # ════════════════════════════════════════════════════════════

    def save(self, sub: Subscription) -> None:
        self.store.set_json(f"{PREFIX}{sub.user_id}", sub.model_dump(mode="json"))

    def create(
        self,
        user_id: str,
        plan: PlanName = "monthly",
        auto_renew: bool = True,
        payment_id: str | None = None,
    ) -> Subscription:
        now = self.clock.now()
        sub = Subscription(
            user_id=user_id,
            plan=plan,
            status="active",
            start_date=now,
            expires_at=plan_period_end(now, plan),
            auto_renew=auto_renew,
            last_payment_id=payment_id,
        )
        self.save(sub)
        logger.info(f"Subscription created: {user_id} ({plan}) until {sub.expires_at.isoformat()}")
        return sub

    def cancel(self, user_id: str) -> bool:
        """Stop auto-renewal. Access stays valid until ``expires_at``.

        An already expired record keeps its status; only auto-renewal is turned off.
        """
        sub = self.get(user_id)
        if sub is None:
            return False
        if sub.status != "expired":
            sub.status = "cancelled"
        sub.auto_renew = False
        self.save(sub)
        logger.info(f"Subscription cancelled: {user_id}")
        return True

    def renew(self, user_id: str, payment_id: str | None = None) -> Subscription | None:
        """Extend by one plan period from ``max(now, expires_at)``; no paid time is lost."""
        sub = self.peek(user_id)
        if sub is None:
            return None
        base = max(self.clock.now(), sub.expires_at)
        sub.expires_at = plan_period_end(base, sub.plan)
        sub.status = "active"
        sub.reminders_sent = []
        sub.lapse_handled = False
        if payment_id:
            sub.last_payment_id = payment_id
        self.save(sub)
        logger.info(f"Subscription renewed: {user_id} until {sub.expires_at.isoformat()}")
        return sub

    def expire(self, user_id: str) -> Subscription | None:
        sub = self.peek(user_id)
        if sub is None:
            return None
        sub.status = "expired"
        self.save(sub)
        return sub

    def remove(self, user_id: str) -> bool:
        return self.store.remove(f"{PREFIX}{user_id}")

    # ════════════════════════════════════════════════════════════
    # ACCESS
    # ════════════════════════════════════════════════════════════

    def days_remaining(self, user_id: str) -> int:
        sub = self.get(user_id)
        if sub is None or sub.status == "expired":
            return 0
        return days_until(sub.expires_at, self.clock.now())

    def is_premium(self, user_id: str) -> bool:
        sub = self.get(user_id)
        if sub is None or sub.status == "expired":
            return False
        return sub.expires_at > self.clock.now()

    def status(self, user_id: str) -> dict:
        sub = self.get(user_id)
        days = self.days_remaining(user_id)
        return {
            "is_premium": self.is_premium(user_id),
            "subscription": sub.model_dump(mode="json") if sub else None,
            "days_remaining": days,
            "needs_renewal": 0 < days <= RENEWAL_WINDOW_DAYS,
            "is_expired": sub is not None and sub.status == "expired",
        }

    def feature_access(self, user_id: str, feature: str) -> bool:
        """Non-premium features are open to everyone."""
        if feature not in PREMIUM_FEATURES:
            return True
        return self.is_premium(user_id)
