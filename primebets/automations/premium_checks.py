"""Premium checks: hourly lapse handling and auto-renewal.

Every subscription whose ``expires_at`` has passed is processed once per
billing cycle (``lapse_handled``):

    cancelled            → expired, "ended" notice
    auto_renew, charged  → renewed from max(now, expires_at), "renewed" notice
    auto_renew, declined → expired (auto_renew kept), "update payment" notice
    no auto_renew        → expired, "expired" notice
"""

from __future__ import annotations

from loguru import logger

from primebets.automations.context import AutomationContext
from primebets.core.config.schema import PremiumChecksConfig
from primebets.storage.models import Subscription


async def run(ctx: AutomationContext, cfg: PremiumChecksConfig) -> None:
    for sub in ctx.ledger.list_all():
        try:
            await check_subscription(ctx, cfg, sub.user_id)
        except Exception as e:
            logger.error(f"Premium check failed for {sub.user_id}: {e}")


def _lapsed(sub: Subscription | None, ctx: AutomationContext) -> bool:
    return sub is not None and not sub.lapse_handled and sub.expires_at <= ctx.clock.now()


async def check_subscription(
    ctx: AutomationContext, cfg: PremiumChecksConfig, user_id: str
) -> str | None:
    """Process one user's lapse. Returns the transition taken, or None."""
    sub = ctx.ledger.peek(user_id)
    if not _lapsed(sub, ctx):
        return None

    if sub.status == "cancelled":
        _block(ctx, sub)
        if cfg.notify_on_expiration:
            ctx.notifications.notify_ended(user_id)
        logger.info(f"Cancelled subscription ended: {user_id}")
        return "ended"

    if not sub.auto_renew:
        _block(ctx, sub)
        if cfg.notify_on_expiration:
            ctx.notifications.notify_expired(user_id)
        logger.info(f"Subscription expired: {user_id}")
        return "expired"

    result = await ctx.gateway.charge(user_id, sub.plan, ctx.plan_price(sub.plan))

    # The charge suspended; re-read before writing
    sub = ctx.ledger.peek(user_id)
    if not _lapsed(sub, ctx):
        logger.debug(f"Subscription for {user_id} changed during renewal, skipping")
        return None

    if result.success:
        renewed = ctx.ledger.renew(user_id, payment_id=result.payment_id)
        ctx.notifications.notify_renewed(user_id, renewed.plan, renewed.expires_at.isoformat())
        return "renewed"

    _block(ctx, sub)
    ctx.notifications.notify_renewal_failed(user_id, result.error)
    logger.warning(f"Auto-renewal failed for {user_id}: {result.error}")
    return "renewal_failed"


def _block(ctx: AutomationContext, sub: Subscription) -> None:
    sub.status = "expired"
    sub.lapse_handled = True
    ctx.ledger.save(sub)
