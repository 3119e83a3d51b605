"""Renewal reminders: notify at each remaining-days threshold once per cycle."""

from __future__ import annotations

from loguru import logger

from primebets.automations.context import AutomationContext
from primebets.core.config.schema import RenewalRemindersConfig
from primebets.services.subscriptions import days_until


async def run(ctx: AutomationContext, cfg: RenewalRemindersConfig) -> int:
    thresholds = set(cfg.reminder_days)
    sent = 0
    for sub in ctx.ledger.list_all():
        try:
            if remind(ctx, sub.user_id, thresholds) is not None:
                sent += 1
        except Exception as e:
            logger.error(f"Renewal reminder failed for {sub.user_id}: {e}")
    logger.info(f"Renewal reminders sent: {sent}")
    return sent


def remind(ctx: AutomationContext, user_id: str, thresholds: set[int]) -> int | None:
    """Send the reminder due for ``user_id``, if any. Returns the threshold hit."""
    sub = ctx.ledger.peek(user_id)
    if sub is None or sub.status != "active":
        return None
    days = days_until(sub.expires_at, ctx.clock.now())
    if days not in thresholds or days in sub.reminders_sent:
        return None
    ctx.notifications.notify_renewal_reminder(user_id, days)
    sub.reminders_sent.append(days)
    ctx.ledger.save(sub)
    return days
