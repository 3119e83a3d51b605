"""Performance reports: weekly summary of each user's trailing bets."""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import timedelta

from loguru import logger

from primebets.automations.context import AutomationContext
from primebets.core.config.schema import PerformanceReportsConfig
from primebets.storage.models import BetRecord, PerformanceReport, PerformanceStats
from primebets.storage.store import KeyValueStore

PREFIX = "reports:"


def compute_stats(bets: list[BetRecord], include_recommendations: bool = True) -> PerformanceStats:
    total = len(bets)
    wins = sum(1 for b in bets if b.result == "win")
    losses = sum(1 for b in bets if b.result == "loss")
    win_rate = wins / total * 100 if total else 0.0

    by_day: dict[str, list[BetRecord]] = defaultdict(list)
    for bet in bets:
        by_day[bet.placed_at.date().isoformat()].append(bet)
    day_rates = {
        day: sum(1 for b in group if b.result == "win") / len(group)
        for day, group in by_day.items()
    }
    markets = Counter(b.market for b in bets)

    return PerformanceStats(
        total_bets=total,
        wins=wins,
        losses=losses,
        win_rate=round(win_rate, 1),
        average_odds=round(sum(b.odds for b in bets) / total, 2) if total else 0.0,
        total_profit=round(sum(b.profit or 0.0 for b in bets), 2),
        best_day=max(day_rates, key=day_rates.get) if day_rates else "N/A",
        worst_day=min(day_rates, key=day_rates.get) if day_rates else "N/A",
        favorite_market=markets.most_common(1)[0][0] if markets else "match_result",
        recommendations=recommendations(win_rate, total) if include_recommendations else [],
    )


def recommendations(win_rate: float, total: int) -> list[str]:
    if win_rate < 40:
        recs = ["Consider lowering the risk of your bets", "Focus on lower, safer odds"]
    elif win_rate > 70:
        recs = ["Excellent performance, keep it up", "You can explore slightly higher odds"]
    else:
        recs = ["Balanced performance", "Keep your choices consistent"]
    if total < 5:
        recs.append("Place more bets for a more accurate analysis")
    return recs


def render(stats: PerformanceStats) -> str:
    lines = [
        "📊 WEEKLY PERFORMANCE REPORT",
        "",
        f"• Total bets: {stats.total_bets}",
        f"• Wins: {stats.wins}",
        f"• Losses: {stats.losses}",
        f"• Win rate: {stats.win_rate:.1f}%",
        f"• Average odds: {stats.average_odds:.2f}",
        f"• Profit/loss: R$ {stats.total_profit:.2f}",
        f"• Best day: {stats.best_day}",
        f"• Worst day: {stats.worst_day}",
        f"• Favourite market: {stats.favorite_market}",
    ]
    if stats.recommendations:
        lines += ["", "💡 Recommendations:", *(f"• {r}" for r in stats.recommendations)]
    return "\n".join(lines)


def load_reports(store: KeyValueStore, user_id: str) -> list[PerformanceReport]:
    data = store.get_json(f"{PREFIX}{user_id}", [])
    if not isinstance(data, list):
        return []
    reports = []
    for raw in data:
        try:
            reports.append(PerformanceReport.model_validate(raw))
        except ValueError:
            continue
    return reports


def _append_report(store: KeyValueStore, user_id: str, report: PerformanceReport, limit: int):
    reports = load_reports(store, user_id)
    reports.insert(0, report)
    store.set_json(f"{PREFIX}{user_id}", [r.model_dump(mode="json") for r in reports[:limit]])


async def run(ctx: AutomationContext, cfg: PerformanceReportsConfig) -> None:
    now = ctx.clock.now()
    since = now - timedelta(days=cfg.window_days)
    sent = 0
    for user_id in ctx.users.list_ids():
        try:
            bets = ctx.history.list(user_id, since=since)
            if not bets:
                logger.debug(f"No bets in window for {user_id}, report skipped")
                continue
            stats = compute_stats(bets, cfg.include_recommendations)
            report = PerformanceReport(created_at=now, stats=stats, text=render(stats))
            _append_report(ctx.store, user_id, report, cfg.history_limit)
            ctx.notifications.notify_performance_report(
                user_id,
                f"Win rate {stats.win_rate:.1f}% | {stats.wins} wins out of {stats.total_bets} bets",
                stats.model_dump(),
            )
            sent += 1
        except Exception as e:
            logger.error(f"Performance report failed for {user_id}: {e}")
    logger.info(f"Performance reports sent to {sent} users")
