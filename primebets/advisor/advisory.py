"""Daily advice, market conditions and risk alerts for a bettor style.

Pure functions; randomness comes only from the ``rng`` argument and the
current time only from ``now``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Literal

from primebets.storage.models import BetRecord

Situation = Literal["pre_match", "live", "post_match", "losing_streak", "winning_streak"]


@dataclass
class MarketCondition:
    market: str
    predictability: str  # low | medium | high
    volatility: str
    recommendation: str  # avoid | caution | favorable
    reasoning: str


@dataclass
class DailyAdvice:
    date: str
    main_message: str
    tips: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    market_insights: list[str] = field(default_factory=list)
    motivational: str = ""


@dataclass
class RiskAlert:
    severity: str  # low | medium | high
    message: str
    recommendations: list[str] = field(default_factory=list)


STYLE_TIPS: dict[str, list[str]] = {
    "conservative": [
        "Focus on clear favourites with odds between 1.30 and 1.80.",
        "Avoid accumulators. Singles are safer for your profile.",
    ],
    "balanced": [
        "Look for a balance between attractive odds (1.80-2.50) and confidence.",
        "An occasional two-match accumulator can lift returns without much extra risk.",
    ],
    "highRisk": [
        "Keep accumulators to 3-4 selections at most.",
    ],
    "strategic": [
        "Look for value bets where the odds exceed the real probability.",
        "Study the statistics before betting. Your profile benefits from research.",
    ],
    "recreational": [
        "Only stake what you can lose without hurting your budget.",
        "Fun comes first. Do not chase losses.",
    ],
}


def analyze_market_conditions(rng: random.Random | None = None) -> list[MarketCondition]:
    """Simulated reading of today's markets."""
    rng = rng or random.Random()
    conditions: list[MarketCondition] = []

    multiples = rng.random()
    if multiples < 0.3:
        conditions.append(MarketCondition(
            "Accumulators", "low", "high", "avoid",
            "Many unpredictable matches today. Favourites are underperforming.",
        ))
    elif multiples > 0.7:
        conditions.append(MarketCondition(
            "Accumulators", "high", "low", "favorable",
            "Round with clear favourites. Good moment for conservative accumulators.",
        ))

    if rng.random() > 0.6:
        conditions.append(MarketCondition(
            "Corners", "high", "low", "favorable",
            "Corner statistics have been very consistent over recent rounds.",
        ))

    if rng.random() < 0.4:
        conditions.append(MarketCondition(
            "Total goals", "low", "high", "caution",
            "High variation in goals. Over/under is hard to call with confidence.",
        ))
    else:
        conditions.append(MarketCondition(
            "Total goals", "medium", "medium", "favorable",
            "Stable scoring patterns. Check each team's averages.",
        ))

    conditions.append(MarketCondition(
        "Asian handicap", "medium", "medium", "caution",
        "Needs deep technical analysis. Recommended for experienced bettors only.",
    ))
    return conditions


def daily_advice(
    style: str,
    stats: dict,
    conditions: list[MarketCondition],
    now: datetime,
) -> DailyAdvice:
    """Advice for today from the style, recent statistics and market conditions.

    ``stats`` is the shape returned by ``BetHistory.statistics``; the keys used
    are ``wins``, ``losses``, ``current_streak`` and ``total_profit``.
    """
    tips: list[str] = []
    warnings: list[str] = []
    insights: list[str] = []

    wins, losses = stats.get("wins", 0), stats.get("losses", 0)
    win_rate = wins / (wins + losses) * 100 if wins + losses else None
    streak = stats.get("current_streak", 0)
    profit = stats.get("total_profit", 0.0)

    if streak > 3:
        main = "🔥 You are on a good run! Stay disciplined and do not raise stakes on impulse."
        warnings.append("Beware of overconfidence. Keep your strategy even during winning runs.")
    elif streak < -3:
        main = "⚠️ Losing streak detected. Time to review your strategy and maybe lower stakes."
        warnings.append("Do not chase losses. Take a break if you need one.")
        tips.append("Back to basics: only bet on matches you have really analysed.")
    else:
        main = "📊 Steady performance. Keep following your strategy with discipline."

    tips.extend(STYLE_TIPS.get(style, STYLE_TIPS["balanced"]))
    if style == "conservative" and win_rate is not None and win_rate < 70:
        warnings.append("Your hit rate is below what a conservative profile expects. Be more selective.")
    elif style == "highRisk":
        warnings.append("Never stake more than 5% of your bankroll per bet, even at high odds.")
        if profit < 0:
            warnings.append("⚠️ Bankroll at risk! Drop to 2-3% per bet until you recover.")
    elif style == "strategic":
        insights.append("Compare odds across platforms to maximise value.")

    for condition in conditions:
        if condition.recommendation == "avoid":
            warnings.append(f"Avoid {condition.market} today: {condition.reasoning}")
        elif condition.recommendation == "favorable":
            insights.append(f"✅ {condition.market} looks favourable: {condition.reasoning}")
        else:
            insights.append(f"⚠️ {condition.market} needs caution: {condition.reasoning}")

    if profit > 0:
        motivational = "💪 Keep it up! Discipline and patience win in the long run."
    elif profit < -50:
        motivational = "🎯 Every bettor has bad spells. Keep a cool head and follow the plan."
    else:
        motivational = "📈 Betting is a marathon, not a sprint. Focus on the long term."

    return DailyAdvice(
        date=now.date().isoformat(),
        main_message=main,
        tips=tips,
        warnings=warnings,
        market_insights=insights,
        motivational=motivational,
    )


def contextual_message(situation: Situation, style: str, won: bool = False) -> str:
    if situation == "pre_match":
        if style == "conservative":
            return "🎯 Analyse carefully before betting. Clear favourites are your best option."
        if style == "highRisk":
            return "🔥 High odds are tempting, but do not forget bankroll management!"
        return "📊 Review your analysis and bet with confidence."
    if situation == "live":
        return "⚡ Live betting needs quick decisions. Do not bet on impulse!"
    if situation == "post_match":
        if won:
            return "🎉 Congratulations! One win does not change your long-term strategy."
        return "😔 Losses are part of it. See what you can improve and move on."
    if situation == "losing_streak":
        return (
            "⚠️ Losing streak detected. Consider:\n"
            "1. Lowering stakes for a while\n"
            "2. Taking a 24-48h break\n"
            "3. Reviewing your strategy\n"
            "4. Not trying to win losses back quickly"
        )
    if situation == "winning_streak":
        return (
            "🔥 Winning streak! But careful:\n"
            "1. Do not raise stakes sharply\n"
            "2. Stay disciplined\n"
            "3. Do not bet on matches you have not analysed\n"
            "4. Remember that luck runs out"
        )
    return "📈 Stay disciplined and follow your betting plan."


def risk_alert(bets: list[BetRecord], bankroll: float, now: datetime) -> RiskAlert | None:
    """Flag impulsive behaviour in the last 24h of bets. None when nothing stands out."""
    recent = sorted(
        (b for b in bets if now - b.placed_at < timedelta(hours=24)),
        key=lambda b: b.placed_at,
    )
    severity = "low"
    message = ""
    recommendations: list[str] = []

    if len(recent) > 10:
        severity = "high"
        message = "⚠️ You placed more than 10 bets in the last 24h. This may signal impulsive betting."
        recommendations += [
            "Take a break of at least 12 hours",
            "Set a daily limit of 5 bets",
            "Only bet on matches you have really analysed",
        ]

    if any(b.stake > bankroll * 0.1 for b in recent):
        severity = "high" if severity == "high" else "medium"
        message = message or "⚠️ Recent bets staked more than 10% of your bankroll."
        recommendations += [
            "Never stake more than 5% of your bankroll on a single bet",
            "Review your bankroll management",
        ]

    if sum(1 for b in recent if b.odds > 5.0) > 3:
        severity = "medium"
        message = message or "⚠️ You are frequently betting on very high odds."
        recommendations += [
            "High odds mean low probability. Be more selective",
            "Focus on value, not on big odds",
        ]

    rapid = sum(
        1 for prev, bet in zip(recent, recent[1:])
        if bet.placed_at - prev.placed_at < timedelta(minutes=5)
    )
    if rapid > 3:
        severity = "high"
        message = "🚨 You are betting very quickly. This can be a sign of tilt."
        recommendations += [
            "Stop betting now",
            "Take a 24 hour break",
            "Do not try to win losses back",
        ]

    if not message:
        return None
    return RiskAlert(severity=severity, message=message, recommendations=recommendations)


def time_of_day_advice(now: datetime) -> str:
    hour = now.hour
    if hour < 6:
        return "🌙 Betting late at night? Beware of impulsive decisions when tired."
    if hour < 12:
        return "☀️ Good morning! Analyse today's matches calmly before betting."
    if hour < 18:
        return "🌤️ Good afternoon! Review your planned bets and stay disciplined."
    if hour < 22:
        return "🌆 Prime time! Lots of matches on. Be selective."
    return "🌃 End of the day. Do not bet on impulse on the last matches."


WEEKDAY_ADVICE = (
    "📊 Start of the week. A good moment to plan your bets.",
    "🏆 Midweek European cups. Study the matchups carefully.",
    "🏆 Midweek European cups. Study the matchups carefully.",
    "📈 Thursday. Review your weekly performance before the weekend.",
    "🎯 Friday! A busy weekend is coming. Plan ahead.",
    "🔥 Saturday has the big matches! But do not bet on all of them.",
    "⚽ Sunday has lots of matches! Do not try to bet on every one.",
)


def weekday_advice(now: datetime) -> str:
    return WEEKDAY_ADVICE[now.weekday()]
