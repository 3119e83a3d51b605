"""NotificationCenter: per-user in-app notification list + optional push."""

from __future__ import annotations

import asyncio
import uuid
from collections import Counter
from datetime import timedelta
from typing import Any, Protocol

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from primebets.core.clock import Clock, SystemClock
from primebets.storage.models import Notification, NotificationType
from primebets.storage.store import KeyValueStore

PREFIX = "notifications:"


class PushChannel(Protocol):
    async def send(self, notification: Notification) -> bool: ...


class NotificationCenter:
    """Notification sink.

    Notifications are stored newest first, capped at ``max_history``
    (oldest dropped).  Expired entries are pruned whenever the list is
    read.  Push delivery is fire-and-forget: it is scheduled on the running
    event loop and never blocks or fails the caller.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Clock | None = None,
        max_history: int = 50,
        default_ttl_days: int | None = 30,
        push: PushChannel | None = None,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.max_history = max_history
        self.default_ttl_days = default_ttl_days
        self.push = push
        self._pending: set[asyncio.Task] = set()

    # ════════════════════════════════════════════════════════════
    # STORAGE
    # ════════════════════════════════════════════════════════════

    def _load(self, user_id: str) -> list[Notification]:
        data = self.store.get_json(f"{PREFIX}{user_id}", [])
        if not isinstance(data, list):
            return []
        items = []
        for raw in data:
            try:
                items.append(Notification.model_validate(raw))
            except PydanticValidationError:
                logger.debug(f"Dropping corrupt notification for {user_id}")
        return items

    def _save(self, user_id: str, items: list[Notification]) -> None:
        self.store.set_json(
            f"{PREFIX}{user_id}", [n.model_dump(mode="json") for n in items]
        )

    # ════════════════════════════════════════════════════════════
    # SINK
    # ════════════════════════════════════════════════════════════

    def notify(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
        ttl_days: int | None = None,
    ) -> Notification:
        now = self.clock.now()
        ttl = ttl_days if ttl_days is not None else self.default_ttl_days
        notification = Notification(
            id=f"notif_{uuid.uuid4().hex[:12]}",
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            created_at=now,
            expires_at=now + timedelta(days=ttl) if ttl else None,
            data=data or {},
        )
        # Re-read right before writing: other jobs may have appended meanwhile
        items = self._load(user_id)
        items.insert(0, notification)
        self._save(user_id, items[: self.max_history])
        logger.info(f"Notification [{type}] → {user_id}: {title}")
        self._push(notification)
        return notification

    def _push(self, notification: Notification) -> None:
        if self.push is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running loop, push skipped for {notification.id}")
            return
        task = loop.create_task(self._deliver(notification))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, notification: Notification) -> None:
        try:
            await self.push.send(notification)
        except Exception as e:
            logger.error(f"Push channel error for {notification.id}: {e}")

    async def drain(self) -> None:
        """Wait for in-flight push deliveries."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ════════════════════════════════════════════════════════════
    # QUERIES
    # ════════════════════════════════════════════════════════════

    def list(self, user_id: str, limit: int | None = None) -> list[Notification]:
        items = self.prune_expired(user_id)
        return items[:limit] if limit else items

    def list_unread(self, user_id: str) -> list[Notification]:
        return [n for n in self.list(user_id) if not n.read]

    def unread_count(self, user_id: str) -> int:
        return len(self.list_unread(user_id))

    def stats(self, user_id: str) -> dict:
        items = self.list(user_id)
        unread = sum(1 for n in items if not n.read)
        return {
            "total": len(items),
            "unread": unread,
            "read": len(items) - unread,
            "by_type": dict(Counter(n.type for n in items)),
        }

    # ════════════════════════════════════════════════════════════
    # MUTATIONS
    # ════════════════════════════════════════════════════════════

    def mark_read(self, user_id: str, notification_id: str) -> bool:
        items = self._load(user_id)
        for n in items:
            if n.id == notification_id:
                n.read = True
                self._save(user_id, items)
                return True
        return False

    def mark_all_read(self, user_id: str) -> int:
        items = self._load(user_id)
        changed = 0
        for n in items:
            if not n.read:
                n.read = True
                changed += 1
        if changed:
            self._save(user_id, items)
        return changed

    def delete(self, user_id: str, notification_id: str) -> bool:
        items = self._load(user_id)
        kept = [n for n in items if n.id != notification_id]
        if len(kept) == len(items):
            return False
        self._save(user_id, kept)
        return True

    def clear_all(self, user_id: str) -> None:
        self.store.remove(f"{PREFIX}{user_id}")

    def prune_expired(self, user_id: str) -> list[Notification]:
        """Drop expired notifications and return what remains."""
        now = self.clock.now()
        items = self._load(user_id)
        kept = [n for n in items if n.expires_at is None or n.expires_at > now]
        if len(kept) != len(items):
            self._save(user_id, kept)
            logger.debug(f"Pruned {len(items) - len(kept)} expired notifications for {user_id}")
        return kept

    # ════════════════════════════════════════════════════════════
    # TEMPLATES
    # ════════════════════════════════════════════════════════════

    def notify_new_predictions(
        self,
        user_id: str,
        predictions: list[dict],
        style: str = "",
        advice: dict | None = None,
    ) -> Notification:
        count = len(predictions)
        message = f"{count} personalised predictions were generated for your profile!"
        if advice and advice.get("main_message"):
            message = f"{message} {advice['main_message']}"
        return self.notify(
            user_id,
            "new_prediction",
            "🎯 Your daily predictions are here",
            message,
            {"count": count, "style": style, "predictions": predictions, "advice": advice},
        )

    def notify_advantageous_odds(
        self, user_id: str, match: str, platform: str, odds: float, value_pct: float
    ) -> Notification:
        return self.notify(
            user_id,
            "advantageous_odds",
            "💎 Advantageous odds detected",
            f"{match}: odds {odds:.2f} on {platform}, {value_pct:.1f}% above the market average.",
            {"match": match, "platform": platform, "odds": odds, "value_pct": value_pct},
        )

    def notify_renewal_reminder(self, user_id: str, days_remaining: int) -> Notification:
        if days_remaining == 0:
            title = "🚨 Premium expires today"
            message = "Your Premium subscription expires today! Renew to keep every benefit."
        elif days_remaining == 1:
            title = "⚠️ Premium expires tomorrow"
            message = "Your Premium subscription expires in 1 day. Renew now!"
        else:
            title = "⚠️ Subscription renewal"
            message = f"Your Premium subscription expires in {days_remaining} days. Renew now!"
        return self.notify(
            user_id,
            "renewal",
            title,
            message,
            {"event": "reminder", "days_remaining": days_remaining},
        )

    def notify_renewed(self, user_id: str, plan: str, expires_at: str) -> Notification:
        return self.notify(
            user_id,
            "renewal",
            "✅ Subscription renewed",
            f"Your {plan} Premium subscription was renewed automatically.",
            {"event": "renewed", "plan": plan, "expires_at": expires_at},
        )

    def notify_renewal_failed(self, user_id: str, error: str | None = None) -> Notification:
        return self.notify(
            user_id,
            "renewal",
            "❌ Renewal failed",
            "We could not renew your Premium subscription. Please update your payment method.",
            {"event": "renewal_failed", "error": error},
        )

    def notify_expired(self, user_id: str) -> Notification:
        return self.notify(
            user_id,
            "update",
            "⏰ Premium expired",
            "Your Premium subscription has expired. Subscribe again to restore access.",
            {"event": "expired"},
        )

    def notify_ended(self, user_id: str) -> Notification:
        return self.notify(
            user_id,
            "update",
            "👋 Premium ended",
            "Your cancelled Premium subscription has reached its end date.",
            {"event": "ended"},
        )

    def notify_performance_report(self, user_id: str, summary: str, stats: dict) -> Notification:
        return self.notify(
            user_id,
            "performance_report",
            "📊 Weekly performance report",
            summary,
            {"stats": stats},
        )

    def notify_platform_update(self, user_id: str, leader: str, average_odds: float) -> Notification:
        return self.notify(
            user_id,
            "platform_update",
            "🔄 Platform odds updated",
            f"{leader} now leads with average odds of {average_odds:.2f}.",
            {"leader": leader, "average_odds": average_odds},
        )
