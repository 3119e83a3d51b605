"""Advisor formulas: quiz scoring, match predictions, odds comparison, advice."""

from primebets.advisor.advisory import analyze_market_conditions, daily_advice, risk_alert
from primebets.advisor.personalization import kelly_stake, personalized_insights, strategy_for
from primebets.advisor.platforms import PLATFORMS, compare_market_odds, find_opportunities
from primebets.advisor.predictions import daily_predictions, generate_probabilities
from primebets.advisor.quiz import BETTOR_STYLES, QUESTIONS, process_answers

__all__ = [
    "analyze_market_conditions",
    "daily_advice",
    "risk_alert",
    "kelly_stake",
    "personalized_insights",
    "strategy_for",
    "PLATFORMS",
    "compare_market_odds",
    "find_opportunities",
    "daily_predictions",
    "generate_probabilities",
    "BETTOR_STYLES",
    "QUESTIONS",
    "process_answers",
]
