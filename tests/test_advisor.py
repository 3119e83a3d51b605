"""Tests for primebets.advisor (quiz, predictions, platforms, advice, personalisation)."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from primebets.advisor.advisory import (
    MarketCondition,
    analyze_market_conditions,
    contextual_message,
    daily_advice,
    risk_alert,
    time_of_day_advice,
    weekday_advice,
)
from primebets.advisor.personalization import (
    filter_recommendations,
    kelly_stake,
    multiple_suggestion,
    personalized_insights,
    strategy_for,
    suggested_stake,
)
from primebets.advisor.platforms import (
    PLATFORMS,
    compare_market_odds,
    find_opportunities,
    rank_platforms,
    simulate_platform,
)
from primebets.advisor.predictions import (
    MatchStatistics,
    Recommendation,
    calculate_odds,
    daily_predictions,
    expected_value,
    generate_probabilities,
    generate_recommendations,
    max_predictions,
)
from primebets.advisor.quiz import QUESTIONS, confidence, dominant_style, process_answers
from primebets.core.errors import QuizIncompleteError, ValidationError
from primebets.storage.models import BetRecord

_PREFIX = {1: "freq", 2: "amount", 3: "risk", 4: "type", 5: "odds", 6: "sport"}


def _answers(choice: int) -> list[dict]:
    return [{"question_id": q, "option_id": f"{p}_{choice}"} for q, p in _PREFIX.items()]


# ── Quiz ───────────────────────────────────────────────────


def test_questions_catalogue():
    assert len(QUESTIONS) == 6
    assert [q.weight for q in QUESTIONS] == [1.2, 1.5, 2.0, 1.3, 1.4, 1.0]
    assert all(len(q.options) == 4 for q in QUESTIONS)


def test_cautious_answers_give_conservative():
    profile = process_answers(_answers(1), rng=random.Random(1))
    assert profile.style == "conservative"
    assert 60 <= profile.confidence <= 95
    assert set(profile.scores) == {"conservative", "balanced", "highRisk", "strategic", "recreational"}


def test_bold_answers_give_high_risk():
    profile = process_answers(_answers(4), rng=random.Random(1))
    assert profile.style == "highRisk"


def test_incomplete_quiz_rejected():
    with pytest.raises(QuizIncompleteError):
        process_answers(_answers(1)[:5])


def test_duplicate_answers_rejected():
    answers = _answers(2) + [{"question_id": 1, "option_id": "freq_3"}]
    with pytest.raises(QuizIncompleteError):
        process_answers(answers)


def test_unknown_option_rejected():
    answers = _answers(2)
    answers[2]["option_id"] = "risk_9"
    with pytest.raises(ValidationError):
        process_answers(answers)


def test_dominant_style_and_confidence():
    scores = {"conservative": 20.0, "balanced": 80.0, "highRisk": 10.0}
    assert dominant_style(scores) == "balanced"
    assert dominant_style({}) == "balanced"
    assert confidence(scores, "balanced") == 95
    assert confidence({"a": 50.0, "b": 50.0}, "a") == 60


# ── Predictions ────────────────────────────────────────────


def _stats(**overrides) -> MatchStatistics:
    base = dict(
        home_team="Flamengo",
        away_team="Palmeiras",
        home_win_rate=75,
        away_win_rate=40,
        draw_rate=25,
        home_goals_avg=2.2,
        away_goals_avg=1.1,
        home_form=[1, 1, 1, 0.5, 1],
        away_form=[0, 0.5, 0, 1, 0],
        h2h_home_wins=4,
        h2h_away_wins=1,
        h2h_draws=1,
        trend="home_strong",
    )
    base.update(overrides)
    return MatchStatistics(**base)


def test_probabilities_sum_to_100():
    probs = generate_probabilities(_stats())
    assert abs(probs.home_win + probs.draw + probs.away_win - 100) < 0.5
    assert probs.home_win > probs.away_win
    assert 40 <= probs.confidence <= 95


def test_calculate_odds_and_ev():
    assert calculate_odds(50) == 1.9
    assert calculate_odds(25) == 3.8
    with pytest.raises(ValueError):
        calculate_odds(0)
    assert expected_value(50, 2.2) == 10.0


def test_recommendation_tiers():
    stats = _stats()
    recs = generate_recommendations(stats, generate_probabilities(stats))
    levels = [r.level for r in recs]
    assert "balanced" in levels and "highRisk" in levels
    assert all(r.odds > 1 for r in recs)


def test_daily_predictions_respect_limits():
    rng = random.Random(3)
    assert len(daily_predictions("conservative", 10, rng)) == max_predictions("conservative") == 3
    assert len(daily_predictions("highRisk", 10, rng)) == 8
    assert len(daily_predictions("highRisk", 2, rng)) == 2
    assert daily_predictions("balanced", 0, rng) == []

    tip = daily_predictions("balanced", 1, rng)[0]
    assert " vs " in tip["match"]
    assert {"home_win", "draw", "away_win"} <= set(tip["probabilities"])
    assert tip["recommendation"]["level"] == "balanced"


def test_unknown_style_falls_back_to_balanced():
    assert max_predictions("mystery") == 5


# ── Platforms ──────────────────────────────────────────────


def test_rank_platforms():
    now = datetime(2024, 3, 1, tzinfo=timezone.utc)
    rng = random.Random(5)
    ranked = rank_platforms([simulate_platform(p, now, rng) for p in PLATFORMS])
    assert [p.ranking for p in ranked] == [1, 2, 3, 4, 5]
    odds = [p.average_odds for p in ranked]
    assert odds == sorted(odds, reverse=True)
    assert set(ranked[0].markets) == {"football", "basketball", "tennis"}


def test_compare_market_odds():
    comparison = compare_market_odds("A vs B", "match_result", rng=random.Random(9))
    assert len(comparison.platforms) == len(PLATFORMS)
    assert comparison.best_odds == comparison.platforms[0].odds
    assert comparison.best_odds >= comparison.average_odds
    assert comparison.value_opportunity >= 0


def test_find_opportunities_sorted_and_filtered():
    found = find_opportunities(0.0, rng=random.Random(11))
    assert len(found) == 9
    values = [c.value_opportunity for c in found]
    assert values == sorted(values, reverse=True)

    assert find_opportunities(1000.0, rng=random.Random(11)) == []


# ── Advisory ───────────────────────────────────────────────

NOW = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)  # a Wednesday


def _user_stats(wins=0, losses=0, streak=0, profit=0.0, average_odds=0.0):
    return {
        "wins": wins,
        "losses": losses,
        "current_streak": streak,
        "total_profit": profit,
        "average_odds": average_odds,
    }


def _bet(n, minutes_ago, stake=10.0, odds=2.0):
    return BetRecord(
        id=f"bet_{n}",
        user_id="ana",
        match="A vs B",
        odds=odds,
        stake=stake,
        placed_at=NOW - timedelta(minutes=minutes_ago),
    )


def test_market_conditions_always_cover_goals_and_handicap():
    conditions = analyze_market_conditions(random.Random(3))
    markets = [c.market for c in conditions]
    assert "Total goals" in markets
    assert markets[-1] == "Asian handicap"
    assert 2 <= len(conditions) <= 4
    assert conditions == analyze_market_conditions(random.Random(3))


def test_daily_advice_follows_streak():
    hot = daily_advice("balanced", _user_stats(wins=5, streak=4, profit=20), [], NOW)
    assert "good run" in hot.main_message
    assert hot.date == "2024-01-10"
    assert hot.motivational.startswith("💪")

    cold = daily_advice("balanced", _user_stats(losses=5, streak=-4, profit=-60), [], NOW)
    assert "Losing streak" in cold.main_message
    assert cold.tips[0].startswith("Back to basics")
    assert cold.motivational.startswith("🎯")


def test_daily_advice_style_warnings_and_markets():
    conservative = daily_advice("conservative", _user_stats(wins=1, losses=1), [], NOW)
    assert any("hit rate" in w for w in conservative.warnings)

    risky = daily_advice("highRisk", _user_stats(profit=-5), [], NOW)
    assert len(risky.warnings) == 2

    conditions = [
        MarketCondition("Corners", "high", "low", "favorable", "consistent"),
        MarketCondition("Accumulators", "low", "high", "avoid", "upsets"),
    ]
    advice = daily_advice("strategic", _user_stats(), conditions, NOW)
    assert "Avoid Accumulators today: upsets" in advice.warnings
    assert any(i.startswith("✅ Corners") for i in advice.market_insights)


def test_risk_alert_none_for_calm_history():
    assert risk_alert([_bet(1, 60), _bet(2, 120)], 1000, NOW) is None
    # Older than 24h is ignored
    assert risk_alert([_bet(n, 2000 + n) for n in range(12)], 1000, NOW) is None


def test_risk_alert_levels():
    many = [_bet(n, 20 * n) for n in range(11)]
    alert = risk_alert(many, 1000, NOW)
    assert alert.severity == "high"
    assert "more than 10 bets" in alert.message

    big = risk_alert([_bet(1, 30, stake=200)], 1000, NOW)
    assert big.severity == "medium"
    assert "10% of your bankroll" in big.message

    rapid = risk_alert([_bet(n, n) for n in range(5)], 1000, NOW)
    assert rapid.severity == "high"
    assert "tilt" in rapid.message


def test_contextual_and_calendar_advice():
    assert "favourites" in contextual_message("pre_match", "conservative")
    assert contextual_message("post_match", "balanced", won=True).startswith("🎉")
    assert contextual_message("losing_streak", "balanced").count("\n") == 4
    assert "Midweek" in weekday_advice(NOW)
    assert time_of_day_advice(NOW).startswith("☀️")
    assert time_of_day_advice(NOW.replace(hour=23)).startswith("🌃")


# ── Personalisation ────────────────────────────────────────


def test_strategy_lookup():
    assert strategy_for("conservative").stake_pct == 2
    assert strategy_for("highRisk").odds_range == (2.50, 5.00)
    assert strategy_for("unknown") == strategy_for("balanced")
    assert suggested_stake("highRisk", 1000) == 50.0


@pytest.mark.parametrize(
    "probability, odds, style, expected",
    [
        (60, 2.0, "balanced", 30.0),  # Kelly 100, capped at 3%
        (60, 2.0, "conservative", 20.0),
        (52, 2.0, "conservative", 10.0),
        (40, 2.0, "highRisk", 0.0),  # negative edge
    ],
)
def test_kelly_stake(probability, odds, style, expected):
    assert kelly_stake(probability, odds, 1000, style) == expected


def test_filter_recommendations_by_style():
    recs = [
        Recommendation("conservative", "Home win", 1.5, 80, "", 5.0),
        Recommendation("balanced", "Home win", 2.0, 70, "", 4.0),
        Recommendation("highRisk", "Away win", 3.5, 50, "", 2.0),
    ]
    assert [r.level for r in filter_recommendations(recs, "conservative")] == ["conservative"]
    assert [r.level for r in filter_recommendations(recs, "balanced")] == ["balanced"]
    assert [r.level for r in filter_recommendations(recs, "highRisk")] == ["highRisk"]


def test_multiple_suggestion():
    matches = [
        {"match": "A vs B", "odds": 1.5, "confidence": 80},
        {"match": "C vs D", "odds": 2.0, "confidence": 60},
        {"match": "E vs F", "odds": 1.8, "confidence": 70},
    ]
    assert multiple_suggestion("conservative", matches) is None

    double = multiple_suggestion("balanced", matches)
    assert [m["match"] for m in double["matches"]] == ["A vs B", "E vs F"]
    assert double["combined_odds"] == 2.7
    assert double["combined_confidence"] == 64

    assert multiple_suggestion("highRisk", matches[:2]) is None


def test_personalized_insights():
    good = personalized_insights("conservative", _user_stats(wins=8, losses=2, average_odds=2.2))
    assert good[0].startswith("Excellent")
    assert any("average odds" in i for i in good)

    poor = personalized_insights("highRisk", _user_stats(wins=1, losses=4, profit=-30))
    assert any("Bankroll at risk" in i for i in poor)
    assert poor[-1].startswith("📉")

    assert len(personalized_insights("recreational", _user_stats())) == 1
