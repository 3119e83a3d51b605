"""Match predictions: statistics → probabilities → tiered recommendations.

All functions are pure; randomness comes only from the ``rng`` argument so
callers (and tests) can seed it.
"""

from __future__ import annotations

import random
from dataclasses import asdict, dataclass, field

from primebets.advisor.quiz import BETTOR_STYLES

HOUSE_MARGIN = 0.95

FIXTURES: tuple[tuple[str, str], ...] = (
    ("Flamengo", "Palmeiras"),
    ("Corinthians", "São Paulo"),
    ("Grêmio", "Internacional"),
    ("Atlético-MG", "Cruzeiro"),
    ("Fluminense", "Botafogo"),
    ("Santos", "Vasco"),
    ("Real Madrid", "Barcelona"),
    ("Manchester City", "Liverpool"),
    ("Bayern", "Dortmund"),
    ("PSG", "Marseille"),
    ("Inter", "Milan"),
    ("Benfica", "Porto"),
)

# Which recommendation tier each bettor style follows
STYLE_LEVEL = {
    "conservative": "conservative",
    "balanced": "balanced",
    "highRisk": "highRisk",
    "strategic": "balanced",
    "recreational": "balanced",
}


@dataclass
class MatchStatistics:
    home_team: str
    away_team: str
    home_win_rate: float
    away_win_rate: float
    draw_rate: float
    home_goals_avg: float
    away_goals_avg: float
    home_form: list[float] = field(default_factory=list)  # 1 win, 0.5 draw, 0 loss
    away_form: list[float] = field(default_factory=list)
    h2h_home_wins: int = 0
    h2h_away_wins: int = 0
    h2h_draws: int = 0
    trend: str = "balanced"  # home_strong | away_strong | balanced | unpredictable


@dataclass
class PredictionProbability:
    home_win: float
    draw: float
    away_win: float
    confidence: int


@dataclass
class Recommendation:
    level: str
    prediction: str
    odds: float
    confidence: int
    reasoning: str
    expected_value: float


def _team_strength(win_rate: float, form: list[float], goals_avg: float, is_home: bool) -> float:
    recent = (sum(form) / len(form) * 100) if form else 50.0
    goals = min(goals_avg * 20, 100)
    home_advantage = 10 if is_home else 0
    return recent * 0.4 + win_rate * 0.35 + goals * 0.15 + home_advantage * 0.1


def _form_consistency(form: list[float]) -> float:
    if not form:
        return 0.0
    avg = sum(form) / len(form)
    variance = sum((v - avg) ** 2 for v in form) / len(form)
    return max(0.0, 100 - variance * 100)


def generate_probabilities(stats: MatchStatistics) -> PredictionProbability:
    """Home/draw/away percentages (summing to ~100) plus a 40–95 confidence."""
    home = _team_strength(stats.home_win_rate, stats.home_form, stats.home_goals_avg, True)
    away = _team_strength(stats.away_win_rate, stats.away_form, stats.away_goals_avg, False)

    h2h_total = stats.h2h_home_wins + stats.h2h_away_wins + stats.h2h_draws
    if h2h_total:
        h2h_home = stats.h2h_home_wins / h2h_total * 100
        h2h_away = stats.h2h_away_wins / h2h_total * 100
    else:
        h2h_home = h2h_away = 50.0

    home_p = home * 0.6 + h2h_home * 0.4
    away_p = away * 0.6 + h2h_away * 0.4
    draw_p = stats.draw_rate * 0.5 + (100 - abs(home - away)) * 0.3
    total = home_p + away_p + draw_p
    home_p, away_p, draw_p = (p / total * 100 for p in (home_p, away_p, draw_p))

    spread = max(home_p, away_p, draw_p) - min(home_p, away_p, draw_p)
    consistency = (_form_consistency(stats.home_form) + _form_consistency(stats.away_form)) / 2
    conf = 50 + spread * 0.3 + consistency * 0.2
    if stats.trend in ("home_strong", "away_strong"):
        conf += 10
    elif stats.trend == "unpredictable":
        conf -= 15

    return PredictionProbability(
        home_win=round(home_p, 1),
        draw=round(draw_p, 1),
        away_win=round(away_p, 1),
        confidence=round(min(95, max(40, conf))),
    )


def calculate_odds(probability: float) -> float:
    """Decimal odds for a probability in percent, with a 5% house margin."""
    if probability <= 0:
        raise ValueError("probability must be positive")
    return round(100 / probability * HOUSE_MARGIN, 2)


def expected_value(probability: float, odds: float) -> float:
    """EV in percent of stake."""
    return round((probability / 100 * odds - 1) * 100, 1)


def _label(outcome: str, stats: MatchStatistics) -> str:
    if outcome == "home":
        return f"{stats.home_team} win"
    if outcome == "away":
        return f"{stats.away_team} win"
    return "Draw"


def generate_recommendations(
    stats: MatchStatistics, probs: PredictionProbability
) -> list[Recommendation]:
    """Up to three tiers: conservative (clear favourite), balanced, high risk."""
    recs: list[Recommendation] = []
    best = max(probs.home_win, probs.draw, probs.away_win)
    if best == probs.home_win:
        likely = "home"
    elif best == probs.away_win:
        likely = "away"
    else:
        likely = "draw"

    if best > 60:
        odds = calculate_odds(best * 0.95)
        recs.append(Recommendation(
            level="conservative",
            prediction=_label(likely, stats),
            odds=odds,
            confidence=probs.confidence,
            reasoning=f"Clear favourite at {best:.1f}% probability.",
            expected_value=expected_value(best, odds),
        ))

    if best > 50:
        balanced_p, balanced_outcome = best, likely
    elif probs.home_win > probs.away_win:
        balanced_p, balanced_outcome = probs.home_win, "home"
    else:
        balanced_p, balanced_outcome = probs.away_win, "away"
    odds = calculate_odds(balanced_p)
    recs.append(Recommendation(
        level="balanced",
        prediction=_label(balanced_outcome, stats),
        odds=odds,
        confidence=round(probs.confidence * 0.9),
        reasoning=f"Best risk/return balance at {balanced_p:.1f}% probability.",
        expected_value=expected_value(balanced_p, odds),
    ))

    underdog = "home" if probs.home_win < probs.away_win else "away"
    underdog_p = min(probs.home_win, probs.away_win)
    if 20 < underdog_p < 45:
        odds = calculate_odds(underdog_p * 0.85)
        recs.append(Recommendation(
            level="highRisk",
            prediction=f"{_label(underdog, stats)} (upset)",
            odds=odds,
            confidence=round(probs.confidence * 0.7),
            reasoning=f"High-return upset with {underdog_p:.1f}% chance.",
            expected_value=expected_value(underdog_p, odds),
        ))
    else:
        recs.append(Recommendation(
            level="highRisk",
            prediction="Accumulator: both teams score + over 2.5 goals",
            odds=3.5,
            confidence=round(probs.confidence * 0.6),
            reasoning=(
                f"{stats.home_team} scores {stats.home_goals_avg:.1f} and "
                f"{stats.away_team} {stats.away_goals_avg:.1f} goals per match."
            ),
            expected_value=expected_value(35, 3.5),
        ))
    return recs


def mock_statistics(home: str, away: str, rng: random.Random | None = None) -> MatchStatistics:
    """Simulated match statistics."""
    rng = rng or random.Random()

    def form(win_cut: float) -> list[float]:
        return [
            1.0 if rng.random() > win_cut else (0.5 if rng.random() > 0.5 else 0.0)
            for _ in range(5)
        ]

    return MatchStatistics(
        home_team=home,
        away_team=away,
        home_win_rate=50 + rng.random() * 30,
        away_win_rate=40 + rng.random() * 30,
        draw_rate=20 + rng.random() * 15,
        home_goals_avg=1.2 + rng.random() * 1.5,
        away_goals_avg=1.0 + rng.random() * 1.3,
        home_form=form(0.4),
        away_form=form(0.5),
        h2h_home_wins=rng.randrange(5),
        h2h_away_wins=rng.randrange(5),
        h2h_draws=rng.randrange(3),
        trend=rng.choice(["home_strong", "away_strong", "balanced", "unpredictable"]),
    )


def max_predictions(style: str) -> int:
    info = BETTOR_STYLES.get(style)
    return info.max_predictions if info else BETTOR_STYLES["balanced"].max_predictions


def daily_predictions(style: str, limit: int, rng: random.Random | None = None) -> list[dict]:
    """Today's tips for a bettor style: at most ``min(limit, style max)`` entries."""
    rng = rng or random.Random()
    count = max(0, min(limit, max_predictions(style), len(FIXTURES)))
    level = STYLE_LEVEL.get(style, "balanced")
    tips = []
    for home, away in rng.sample(FIXTURES, count):
        stats = mock_statistics(home, away, rng)
        probs = generate_probabilities(stats)
        recs = generate_recommendations(stats, probs)
        pick = next((r for r in recs if r.level == level), recs[0])
        tips.append({
            "match": f"{home} vs {away}",
            "probabilities": asdict(probs),
            "recommendation": asdict(pick),
        })
    return tips
