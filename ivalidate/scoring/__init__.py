"""Evidence scoring engine."""

from .scorer import (
    calculate_competition_score,
    calculate_data_quality,
    calculate_market_demand_score,
    calculate_validation_score,
    format_score_insights,
    round_half_up,
)
from .tiers import grade_for_score

__all__ = [
    "calculate_market_demand_score",
    "calculate_competition_score",
    "calculate_data_quality",
    "calculate_validation_score",
    "format_score_insights",
    "grade_for_score",
    "round_half_up",
]
