"""Per-style betting strategy, stake sizing and personalised insights."""

from __future__ import annotations

from dataclasses import dataclass

from primebets.advisor.predictions import Recommendation


@dataclass(frozen=True)
class Strategy:
    odds_range: tuple[float, float]
    max_predictions_per_day: int
    risk_tolerance: str  # low | medium | high
    bet_types: tuple[str, ...]
    stake_pct: float  # % of bankroll
    multiples: str  # avoid | occasional | frequent
    kelly_fraction: float


STRATEGIES: dict[str, Strategy] = {
    "conservative": Strategy(
        (1.30, 1.80), 2, "low", ("match_result", "double_chance"), 2, "avoid", 0.25),
    "balanced": Strategy(
        (1.60, 2.50), 4, "medium", ("match_result", "over_under", "both_score"),
        3, "occasional", 0.5),
    "highRisk": Strategy(
        (2.50, 5.00), 6, "high", ("handicap", "correct_score", "multiple"), 5, "frequent", 0.75),
    "strategic": Strategy(
        (1.70, 2.80), 3, "medium", ("match_result", "over_under", "handicap", "value_bets"),
        3, "occasional", 0.5),
    "recreational": Strategy(
        (1.50, 3.50), 5, "medium", ("match_result", "both_score", "first_goal"),
        2, "frequent", 0.33),
}


def strategy_for(style: str) -> Strategy:
    return STRATEGIES.get(style, STRATEGIES["balanced"])


def filter_recommendations(recs: list[Recommendation], style: str) -> list[Recommendation]:
    """Keep recommendations inside the style's odds range and risk tolerance."""
    strategy = strategy_for(style)
    low, high = strategy.odds_range

    def fits(rec: Recommendation) -> bool:
        if not low <= rec.odds <= high:
            return False
        if strategy.risk_tolerance == "low":
            return rec.level == "conservative"
        if strategy.risk_tolerance == "medium":
            return rec.level != "highRisk"
        return True

    return [r for r in recs if fits(r)]


def suggested_stake(style: str, bankroll: float) -> float:
    return round(bankroll * strategy_for(style).stake_pct / 100, 2)


def kelly_stake(probability: float, odds: float, bankroll: float, style: str) -> float:
    """Fractional Kelly stake for ``probability`` (percent) at decimal ``odds``.

    Scaled by the style's Kelly fraction and capped at its flat stake; never
    negative.
    """
    if odds <= 1:
        return 0.0
    p = probability / 100
    b = odds - 1
    fraction = (b * p - (1 - p)) / b * strategy_for(style).kelly_fraction
    stake = min(bankroll * fraction, suggested_stake(style, bankroll))
    return max(0.0, round(stake, 2))


def multiple_suggestion(style: str, matches: list[dict]) -> dict | None:
    """Accumulator from the most confident ``matches`` (dicts with match, odds, confidence).

    None for styles that avoid multiples or when there are too few matches.
    """
    strategy = strategy_for(style)
    if strategy.multiples == "avoid":
        return None
    size = 2 if strategy.multiples == "occasional" else 3
    picked = sorted(matches, key=lambda m: m["confidence"], reverse=True)[:size]
    if len(picked) < size:
        return None

    combined_odds = 1.0
    for m in picked:
        combined_odds *= m["odds"]
    avg_confidence = sum(m["confidence"] for m in picked) / size
    combined_confidence = avg_confidence * 0.85 ** (size - 1)
    return {
        "matches": picked,
        "combined_odds": round(combined_odds, 2),
        "combined_confidence": round(combined_confidence),
    }


def personalized_insights(style: str, stats: dict) -> list[str]:
    """Insights from ``BetHistory.statistics`` output for a bettor style."""
    insights: list[str] = []
    wins, losses = stats.get("wins", 0), stats.get("losses", 0)
    settled = wins + losses
    win_rate = wins / settled * 100 if settled else None
    avg_odds = stats.get("average_odds", 0.0)
    profit = stats.get("total_profit", 0.0)

    if style == "conservative":
        if win_rate is not None and win_rate > 70:
            insights.append("Excellent! Your conservative profile is producing consistent results.")
        elif win_rate is not None and win_rate < 60:
            insights.append("Consider even lower odds (1.30-1.60) to lift your hit rate.")
        if avg_odds > 2.0:
            insights.append("Your average odds are above the ideal for a conservative profile.")
    elif style == "balanced":
        if win_rate is not None and win_rate > 60:
            insights.append("Great balance! Keep up the discipline.")
        if profit > 0:
            insights.append("Your balanced profile is producing steady profit. Keep the strategy.")
        else:
            insights.append("Review your bets. It may be time to be more selective.")
    elif style == "highRisk":
        if win_rate is not None and win_rate > 50:
            insights.append("Excellent risk management! Your aggressive bets are paying off.")
        else:
            insights.append("Low hit rate. Consider fewer accumulators and more value singles.")
        if profit < 0:
            insights.append("⚠️ Bankroll at risk. Drop stakes to 2-3% until you recover.")
    elif style == "strategic":
        insights.append("Keep hunting value bets. Your analytical profile suits the long run.")
        if 0 < avg_odds < 1.8:
            insights.append("Your odds are too conservative. Look for more value (1.80-2.50).")
    elif style == "recreational":
        insights.append("Remember: only stake what you can lose. Fun comes first!")
        if profit < -100:
            insights.append("⚠️ Losses are piling up. Consider a break or lower stakes.")

    if win_rate is not None and win_rate < 50:
        insights.append("📉 Hit rate below 50%. Review your strategy and be more selective.")
    if settled > 20:
        insights.append("You are very active! Remember to take breaks and avoid impulse bets.")
    return insights
