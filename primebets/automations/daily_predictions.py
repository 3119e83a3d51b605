"""Daily predictions: personalised tips for every user at 08:00."""

from __future__ import annotations

from dataclasses import asdict

from loguru import logger

from primebets.advisor.advisory import analyze_market_conditions, daily_advice
from primebets.advisor.predictions import daily_predictions
from primebets.automations.context import AutomationContext
from primebets.core.config.schema import DailyPredictionsConfig


async def run(ctx: AutomationContext, cfg: DailyPredictionsConfig) -> None:
    now = ctx.clock.now()
    conditions = analyze_market_conditions(ctx.rng)
    sent = 0
    for user_id in ctx.users.list_ids():
        try:
            profile = ctx.profiles.get(user_id)
            style = profile.style if profile else "balanced"
            limit = cfg.premium_limit if ctx.ledger.is_premium(user_id) else cfg.free_limit
            tips = daily_predictions(style, limit, ctx.rng)
            if not tips:
                continue
            advice = daily_advice(style, ctx.history.statistics(user_id), conditions, now)
            ctx.notifications.notify_new_predictions(user_id, tips, style, advice=asdict(advice))
            sent += 1
        except Exception as e:
            logger.error(f"Daily predictions failed for {user_id}: {e}")
    logger.info(f"Daily predictions sent to {sent} users")
