"""Odds monitoring: alert premium users to value opportunities."""

from __future__ import annotations

from loguru import logger

from primebets.advisor.platforms import find_opportunities
from primebets.automations.context import AutomationContext
from primebets.core.config.schema import OddsMonitoringConfig


async def run(ctx: AutomationContext, cfg: OddsMonitoringConfig) -> None:
    opportunities = find_opportunities(cfg.threshold_pct, rng=ctx.rng)
    if not opportunities:
        logger.debug("Odds scan: no opportunity above threshold")
        return
    best = opportunities[0]

    sent = 0
    for user_id in ctx.users.list_ids():
        # Premium status is checked right before each send
        if cfg.premium_only and not ctx.ledger.is_premium(user_id):
            continue
        try:
            ctx.notifications.notify_advantageous_odds(
                user_id, best.match, best.best_platform, best.best_odds, best.value_opportunity
            )
            sent += 1
        except Exception as e:
            logger.error(f"Odds alert failed for {user_id}: {e}")
    logger.info(
        f"Odds scan: {len(opportunities)} opportunities, best {best.value_opportunity}% "
        f"({best.match}), alerted {sent} users"
    )
