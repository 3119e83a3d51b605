"""Bettor profile quiz: six weighted questions → style + confidence."""

from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import dataclass

from primebets.core.errors import QuizIncompleteError, ValidationError
from primebets.storage.models import BettorProfile, QuizAnswer


@dataclass(frozen=True)
class Option:
    id: str
    text: str
    value: int
    risk_level: int


@dataclass(frozen=True)
class Question:
    id: int
    text: str
    category: str
    weight: float
    options: tuple[Option, ...]

    def option(self, option_id: str) -> Option | None:
        return next((o for o in self.options if o.id == option_id), None)


def _scale(prefix: str, labels: list[str], risks: list[int] | None = None) -> tuple[Option, ...]:
    risks = risks or [1, 2, 3, 4]
    return tuple(
        Option(f"{prefix}_{i}", label, i, risk)
        for i, (label, risk) in enumerate(zip(labels, risks), start=1)
    )


QUESTIONS: tuple[Question, ...] = (
    Question(1, "How often do you place sports bets?", "frequency", 1.2, _scale(
        "freq", ["Rarely (1-2 per month)", "Occasionally (1-2 per week)",
                 "Regularly (3-5 per week)", "Daily"])),
    Question(2, "What is your average stake per bet?", "amount", 1.5, _scale(
        "amount", ["Up to R$ 20", "R$ 20 - R$ 50", "R$ 50 - R$ 100", "Above R$ 100"])),
    Question(3, "What is your risk preference?", "risk", 2.0, _scale(
        "risk", ["Safety first, even with lower returns", "Balance of safety and return",
                 "Moderate risk for higher return", "High risk, high return"])),
    Question(4, "Which kind of bet do you prefer?", "type", 1.3, _scale(
        "type", ["Singles (1 match)", "Accumulators of 2-3 matches",
                 "Accumulators of 4-6 matches", "Accumulators of 7+ matches"])),
    Question(5, "Which odds range do you prefer?", "odds", 1.4, _scale(
        "odds", ["1.20 - 1.50 (favourites)", "1.50 - 2.00 (balanced)",
                 "2.00 - 3.50 (risky)", "Above 3.50 (long shots)"])),
    Question(6, "Which sport do you bet on most?", "sport", 1.0, _scale(
        "sport", ["Football", "Basketball", "Tennis", "Mixed sports"], [2, 2, 2, 3])),
)


@dataclass(frozen=True)
class StyleInfo:
    name: str
    description: str
    risk_level: str
    odds_range: tuple[float, float]
    recommended_stake_pct: float
    max_predictions: int


BETTOR_STYLES: dict[str, StyleInfo] = {
    "conservative": StyleInfo(
        "Conservative", "Prefers safety and low-risk bets with consistent returns",
        "low", (1.20, 1.80), 2, 3),
    "balanced": StyleInfo(
        "Balanced", "Looks for a balance between risk and return",
        "medium", (1.50, 2.50), 3, 5),
    "highRisk": StyleInfo(
        "High risk", "Accepts high risk chasing big returns",
        "high", (2.00, 5.00), 5, 8),
    "strategic": StyleInfo(
        "Strategic", "Analyses deeply and places calculated bets",
        "medium", (1.60, 2.80), 3, 4),
    "recreational": StyleInfo(
        "Recreational", "Bets for fun, without major concerns",
        "medium", (1.40, 3.00), 2, 6),
}

MIN_CONFIDENCE, MAX_CONFIDENCE = 60, 95


def _style_score(style: str, avg_score: float, avg_risk: float, rng: random.Random) -> float:
    score = 0.0
    # Risk component
    if style == "conservative" and avg_risk <= 2:
        score += 40
    elif style == "balanced" and 2 <= avg_risk <= 3:
        score += 40
    elif style == "highRisk" and avg_risk >= 3:
        score += 40
    elif style == "strategic" and 2 <= avg_risk <= 3:
        score += 35
    elif style == "recreational":
        score += 30
    # Weighted-answer component
    if style == "conservative" and avg_score <= 2:
        score += 30
    elif style == "balanced" and 2 <= avg_score <= 3:
        score += 30
    elif style == "highRisk" and avg_score >= 3:
        score += 30
    elif style == "strategic" and 2.5 <= avg_score <= 3.5:
        score += 35
    elif style == "recreational":
        score += 25
    score += rng.random() * 10
    return min(100.0, max(0.0, score))


def dominant_style(scores: dict[str, float]) -> str:
    """Highest score wins; ties keep the earlier style. Defaults to balanced."""
    best, best_score = "balanced", 0.0
    for style, score in scores.items():
        if score > best_score:
            best, best_score = style, score
    return best


def confidence(scores: dict[str, float], style: str) -> int:
    others = [s for name, s in scores.items() if name != style]
    diff = scores[style] - sum(others) / len(others)
    return round(min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, MIN_CONFIDENCE + diff * 1.5)))


def process_answers(
    answers: Iterable[QuizAnswer | dict],
    rng: random.Random | None = None,
) -> BettorProfile:
    """Score a complete set of answers.

    Raises ``QuizIncompleteError`` unless every question is answered, and
    ``ValidationError`` for unknown question or option ids.
    """
    rng = rng or random.Random()
    parsed = [a if isinstance(a, QuizAnswer) else QuizAnswer.model_validate(a) for a in answers]
    by_question = {a.question_id: a.option_id for a in parsed}
    missing = [q.id for q in QUESTIONS if q.id not in by_question]
    if missing or len(parsed) != len(QUESTIONS):
        raise QuizIncompleteError(f"All questions must be answered (missing: {missing})")

    weighted = total_weight = total_risk = 0.0
    for question in QUESTIONS:
        option = question.option(by_question[question.id])
        if option is None:
            raise ValidationError(
                f"Unknown option {by_question[question.id]!r} for question {question.id}"
            )
        weighted += option.value * question.weight
        total_weight += question.weight
        total_risk += option.risk_level

    avg_score = weighted / total_weight
    avg_risk = total_risk / len(QUESTIONS)
    scores = {style: _style_score(style, avg_score, avg_risk, rng) for style in BETTOR_STYLES}
    style = dominant_style(scores)
    return BettorProfile(
        style=style,
        scores={k: round(v, 1) for k, v in scores.items()},
        confidence=confidence(scores, style),
    )
