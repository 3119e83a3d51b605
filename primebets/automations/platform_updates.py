"""Platform updates: refresh simulated bookmaker odds and ranking."""

from __future__ import annotations

from datetime import datetime

from loguru import logger

from primebets.advisor.platforms import PLATFORMS, rank_platforms, simulate_platform
from primebets.automations.context import AutomationContext
from primebets.core.config.schema import PlatformUpdatesConfig
from primebets.storage.models import PlatformSnapshot
from primebets.storage.store import KeyValueStore

DATA_KEY = "platforms:data"
UPDATED_KEY = "platforms:last_update"


async def run(ctx: AutomationContext, cfg: PlatformUpdatesConfig) -> None:
    # Errors propagate to the scheduler, which logs them; the next cycle retries.
    now = ctx.clock.now()
    previous = load_platforms(ctx.store)
    ranked = rank_platforms([simulate_platform(p, now, ctx.rng) for p in PLATFORMS])
    ctx.store.set_json(DATA_KEY, [p.model_dump(mode="json") for p in ranked])
    ctx.store.set(UPDATED_KEY, now.isoformat())
    leader = ranked[0]
    logger.info(f"Platforms updated: leader {leader.name} ({leader.average_odds})")

    if cfg.notify_leader_change and previous and previous[0].name != leader.name:
        for user_id in ctx.users.list_ids():
            ctx.notifications.notify_platform_update(user_id, leader.name, leader.average_odds)
        logger.info(f"Platform leader changed: {previous[0].name} -> {leader.name}")


def load_platforms(store: KeyValueStore) -> list[PlatformSnapshot]:
    data = store.get_json(DATA_KEY, [])
    if not isinstance(data, list):
        return []
    try:
        return [PlatformSnapshot.model_validate(p) for p in data]
    except ValueError:
        return []


def last_update(store: KeyValueStore) -> datetime | None:
    raw = store.get(UPDATED_KEY)
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def is_stale(store: KeyValueStore, now: datetime, max_age_minutes: int = 6 * 60) -> bool:
    updated = last_update(store)
    return updated is None or (now - updated).total_seconds() > max_age_minutes * 60
