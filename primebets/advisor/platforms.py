"""Bookmaker catalogue and simulated odds comparison."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime

from primebets.storage.models import PlatformSnapshot


@dataclass(frozen=True)
class Platform:
    id: str
    name: str
    rating: float
    commission: float


PLATFORMS: tuple[Platform, ...] = (
    Platform("bet365", "Bet365", 4.8, 0.05),
    Platform("betano", "Betano", 4.7, 0.06),
    Platform("blaze", "Blaze", 4.5, 0.07),
    Platform("sportingbet", "SportingBet", 4.6, 0.06),
    Platform("1xbet", "1xBet", 4.4, 0.08),
)

MARKET_FACTORS = {"football": 1.1, "basketball": 0.95, "tennis": 1.05}

WATCHED_MATCHES = ("Flamengo vs Palmeiras", "Real Madrid vs Barcelona", "Lakers vs Warriors")
WATCHED_MARKETS = ("match_result", "over_under", "both_score")


@dataclass
class PlatformOdds:
    platform_id: str
    platform_name: str
    odds: float
    margin: float


@dataclass
class MarketComparison:
    match: str
    market: str
    platforms: list[PlatformOdds] = field(default_factory=list)
    best_platform: str = ""
    best_odds: float = 0.0
    average_odds: float = 0.0
    value_opportunity: float = 0.0  # best odds, % above the average


def simulate_platform(platform: Platform, now: datetime, rng: random.Random) -> PlatformSnapshot:
    base = 1.5 + rng.random() * 2
    return PlatformSnapshot(
        id=platform.id,
        name=platform.name,
        average_odds=round(base, 2),
        last_update=now,
        markets={market: round(base * f, 2) for market, f in MARKET_FACTORS.items()},
    )


def rank_platforms(snapshots: list[PlatformSnapshot]) -> list[PlatformSnapshot]:
    """Sort by average odds (highest first) and assign 1-based rankings."""
    ranked = sorted(snapshots, key=lambda p: p.average_odds, reverse=True)
    for i, snapshot in enumerate(ranked, start=1):
        snapshot.ranking = i
    return ranked


def compare_market_odds(
    match: str,
    market: str,
    platforms: tuple[Platform, ...] = PLATFORMS,
    rng: random.Random | None = None,
) -> MarketComparison:
    rng = rng or random.Random()
    quotes = sorted(
        (
            PlatformOdds(
                platform_id=p.id,
                platform_name=p.name,
                odds=round(1.5 + rng.random() * 2.0, 2),
                margin=round(3 + rng.random() * 7, 1),
            )
            for p in platforms
        ),
        key=lambda q: q.odds,
        reverse=True,
    )
    if not quotes:
        return MarketComparison(match=match, market=market)
    best = quotes[0]
    average = sum(q.odds for q in quotes) / len(quotes)
    return MarketComparison(
        match=match,
        market=market,
        platforms=quotes,
        best_platform=best.platform_name,
        best_odds=best.odds,
        average_odds=round(average, 2),
        value_opportunity=round((best.odds - average) / average * 100, 1),
    )


def find_opportunities(
    threshold_pct: float = 5.0,
    platforms: tuple[Platform, ...] = PLATFORMS,
    rng: random.Random | None = None,
) -> list[MarketComparison]:
    """Scan watched matches × markets; keep comparisons at or above the threshold."""
    rng = rng or random.Random()
    found = [
        comparison
        for match in WATCHED_MATCHES
        for market in WATCHED_MARKETS
        if (comparison := compare_market_odds(match, market, platforms, rng)).value_opportunity
        >= threshold_pct
    ]
    return sorted(found, key=lambda c: c.value_opportunity, reverse=True)
