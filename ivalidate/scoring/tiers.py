"""Tier tables for evidence scoring.

Every mapping is a step function over explicit thresholds so scores are
exactly reproducible. Tables are ordered from the highest tier down.
"""

from ivalidate.models.enums import Grade

Tier = tuple[float, int]

# Market demand: absolute mention count (value >= threshold), 0-30 pts
MENTION_VOLUME_TIERS: tuple[Tier, ...] = (
    (100, 30),
    (50, 26),
    (25, 22),
    (15, 18),
    (10, 14),
    (5, 10),
    (1, 6),
)
MENTION_VOLUME_FLOOR = 0

# Market demand: frustrated / total * 100 (value >= threshold), 0-35 pts
FRUSTRATION_TIERS: tuple[Tier, ...] = (
    (70, 35),
    (50, 28),
    (35, 22),
    (25, 16),
    (15, 12),
    (10, 8),
)
FRUSTRATION_FLOOR = 4

NO_MENTIONS_DEMAND_SCORE = 15

SEVERITY_KEYWORDS = (
    "$", "cost", "expensive", "waste", "hours", "days", "months",
    "fortune", "thousand", "million", "losing money", "time consuming",
)
SEVERITY_PER_HIT = 2
SEVERITY_DOLLAR_BONUS = 5
SEVERITY_THOUSAND_BONUS = 3
SEVERITY_DURATION_BONUS = 2
SEVERITY_CAP = 25

ENGAGEMENT_PER_UPVOTE = 0.5
ENGAGEMENT_CAP = 10

# Competition: competitor-referencing quotes as % of mentions (value <= threshold), 0-40 pts
COMPETITOR_PERCENT_TIERS: tuple[Tier, ...] = (
    (3, 40),
    (8, 34),
    (15, 28),
    (25, 22),
    (40, 16),
    (60, 10),
)
COMPETITOR_PERCENT_FLOOR = 5

# Competition: complaints about existing solutions (value >= threshold), 0-35 pts
COMPLAINT_TIERS: tuple[Tier, ...] = (
    (10, 35),
    (7, 30),
    (5, 25),
    (3, 20),
    (1, 15),
)
COMPLAINT_FLOOR = 8

# Competition: people looking for something that does not exist, 0-25 pts
GAP_TIERS: tuple[Tier, ...] = (
    (8, 25),
    (5, 20),
    (3, 15),
    (1, 10),
)
GAP_FLOOR = 5

COMPETITOR_KEYWORDS = (
    "competitor", "alternative", "better than", "instead of", "compared to",
    "switch from", "disappointed with", "doesn't work", "broken", "unreliable",
)
EXISTING_SOLUTION_WORDS = ("current", "existing", "using")
GAP_PHRASES = ("wish there was", "need something", "looking for", "anyone know")

MARKET_DEMAND_WEIGHT = 0.60
COMPETITION_WEIGHT = 0.40

GRADE_TIERS: tuple[tuple[int, Grade], ...] = (
    (90, Grade.A),
    (80, Grade.B_PLUS),
    (70, Grade.B),
    (60, Grade.C),
    (50, Grade.D),
)
GRADE_FLOOR = Grade.F

# Confidence / data quality
DATA_PRESENT_POINTS = 30
NO_DATA_CONFIDENCE = 10
SENTIMENT_PRESENT_POINTS = 10

SAMPLE_SIZE_TIERS: tuple[Tier, ...] = (
    (100, 30),
    (50, 25),
    (25, 20),
    (15, 15),
    (10, 10),
)
SAMPLE_SIZE_FLOOR = 5

QUOTE_DIVERSITY_TIERS: tuple[Tier, ...] = (
    (15, 15),
    (10, 12),
    (5, 8),
)
QUOTE_DIVERSITY_FLOOR = 3

ENGAGEMENT_QUALITY_TIERS: tuple[Tier, ...] = (
    (15, 15),
    (8, 10),
    (3, 5),
)
ENGAGEMENT_QUALITY_FLOOR = 0


def tier_at_least(value: float, tiers: tuple[Tier, ...], floor: int) -> int:
    """Points of the first tier whose threshold ``value`` reaches."""
    for threshold, points in tiers:
        if value >= threshold:
            return points
    return floor


def tier_at_most(value: float, tiers: tuple[Tier, ...], floor: int) -> int:
    """Points of the first tier whose threshold ``value`` does not exceed."""
    for threshold, points in tiers:
        if value <= threshold:
            return points
    return floor


def grade_for_score(score: int) -> Grade:
    """Letter grade for an overall score."""
    for threshold, grade in GRADE_TIERS:
        if score >= threshold:
            return grade
    return GRADE_FLOOR
