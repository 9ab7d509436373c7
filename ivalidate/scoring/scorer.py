"""Deterministic evidence scoring over discussion signals.

Scores are pure functions of a DiscussionInsight: market demand and
competition subscores (0-100 each), a 60/40 blend with a letter grade, and
an independent data-quality confidence.
"""

import math
import re

from ivalidate.models.enums import Sentiment
from ivalidate.models.evidence import DiscussionInsight
from ivalidate.models.scoring import (
    CompetitionDetails,
    CompetitionScore,
    MarketDemandDetails,
    MarketDemandScore,
    OverallScore,
    ScoreResult,
)
from ivalidate.scoring import tiers
from ivalidate.scoring.tiers import grade_for_score, tier_at_least, tier_at_most

_DOLLAR_AMOUNT_RE = re.compile(r"\$\d+")


def round_half_up(value: float) -> int:
    """Round halves upward (2.5 -> 3), unlike the built-in round()."""
    return math.floor(value + 0.5)


def _percentage(part: int, whole: int) -> float:
    return part * 100 / whole if whole > 0 else 0.0


def _quote_severity(quote_texts: list[str]) -> int:
    """Financial/time-cost language in quotes, capped at 25 points."""
    bonus = 0
    hits = 0
    for text in quote_texts:
        lowered = text.lower()
        for keyword in tiers.SEVERITY_KEYWORDS:
            if keyword not in lowered:
                continue
            hits += 1
            if _DOLLAR_AMOUNT_RE.search(lowered):
                bonus += tiers.SEVERITY_DOLLAR_BONUS
            if "thousand" in lowered or "k " in lowered:
                bonus += tiers.SEVERITY_THOUSAND_BONUS
            if "hours" in lowered or "days" in lowered:
                bonus += tiers.SEVERITY_DURATION_BONUS
    return min(bonus + hits * tiers.SEVERITY_PER_HIT, tiers.SEVERITY_CAP)


def calculate_market_demand_score(insight: DiscussionInsight) -> MarketDemandScore:
    """Market demand (0-100) from mention volume, frustration, severity and engagement."""
    metrics = insight.metrics
    total = metrics.total_mentions

    if total == 0:
        return MarketDemandScore(
            score=tiers.NO_MENTIONS_DEMAND_SCORE,
            details=MarketDemandDetails(),
        )

    mention_points = tier_at_least(total, tiers.MENTION_VOLUME_TIERS, tiers.MENTION_VOLUME_FLOOR)
    frustration_points = tier_at_least(
        _percentage(metrics.frustrated_users, total),
        tiers.FRUSTRATION_TIERS,
        tiers.FRUSTRATION_FLOOR,
    )
    severity_points = _quote_severity([q.text for q in metrics.top_quotes])
    engagement_points = min(insight.engagement_level * tiers.ENGAGEMENT_PER_UPVOTE, tiers.ENGAGEMENT_CAP)

    score = round_half_up(mention_points + frustration_points + severity_points + engagement_points)

    return MarketDemandScore(
        score=min(score, 100),
        details=MarketDemandDetails(
            mention_count=mention_points,
            frustration_level=frustration_points,
            severity_score=severity_points,
            engagement_score=engagement_points,
        ),
    )


def count_competition_signals(insight: DiscussionInsight) -> CompetitionDetails:
    """Count competitor mentions, complaints and opportunity gaps in top quotes."""
    competitor_mentions = 0
    user_complaints = 0
    opportunity_gaps = 0

    for quote in insight.metrics.top_quotes:
        text = quote.text.lower()
        if any(keyword in text for keyword in tiers.COMPETITOR_KEYWORDS):
            competitor_mentions += 1
        if quote.sentiment == Sentiment.FRUSTRATED and any(
            word in text for word in tiers.EXISTING_SOLUTION_WORDS
        ):
            user_complaints += 1
        if any(phrase in text for phrase in tiers.GAP_PHRASES):
            opportunity_gaps += 1

    return CompetitionDetails(
        competitor_mentions=competitor_mentions,
        user_complaints=user_complaints,
        opportunity_gaps=opportunity_gaps,
    )


def calculate_competition_score(insight: DiscussionInsight) -> CompetitionScore:
    """Competition (0-100): fewer competitor references, more complaints and gaps score higher."""
    details = count_competition_signals(insight)
    competitor_percent = _percentage(details.competitor_mentions, insight.metrics.total_mentions)

    score = (
        tier_at_most(competitor_percent, tiers.COMPETITOR_PERCENT_TIERS, tiers.COMPETITOR_PERCENT_FLOOR)
        + tier_at_least(details.user_complaints, tiers.COMPLAINT_TIERS, tiers.COMPLAINT_FLOOR)
        + tier_at_least(details.opportunity_gaps, tiers.GAP_TIERS, tiers.GAP_FLOOR)
    )
    return CompetitionScore(score=min(score, 100), details=details)


def calculate_data_quality(insight: DiscussionInsight) -> int:
    """Confidence (0-100) in how much evidence supports the score."""
    metrics = insight.metrics
    if metrics.total_mentions <= 0:
        return tiers.NO_DATA_CONFIDENCE

    quality = tiers.DATA_PRESENT_POINTS
    quality += tier_at_least(metrics.total_mentions, tiers.SAMPLE_SIZE_TIERS, tiers.SAMPLE_SIZE_FLOOR)
    quality += tier_at_least(len(metrics.top_quotes), tiers.QUOTE_DIVERSITY_TIERS, tiers.QUOTE_DIVERSITY_FLOOR)
    if metrics.frustrated_users > 0:
        quality += tiers.SENTIMENT_PRESENT_POINTS
    quality += tier_at_least(insight.engagement_level, tiers.ENGAGEMENT_QUALITY_TIERS, tiers.ENGAGEMENT_QUALITY_FLOOR)

    return min(quality, 100)


def calculate_validation_score(insight: DiscussionInsight) -> ScoreResult:
    """Blend subscores into the published score with grade and confidence."""
    market_demand = calculate_market_demand_score(insight)
    competition = calculate_competition_score(insight)

    weighted = (
        market_demand.score * tiers.MARKET_DEMAND_WEIGHT
        + competition.score * tiers.COMPETITION_WEIGHT
    )
    overall = max(0, min(round_half_up(weighted), 100))

    return ScoreResult(
        market_demand=market_demand,
        competition=competition,
        overall=OverallScore(
            score=overall,
            grade=grade_for_score(overall),
            confidence=calculate_data_quality(insight),
        ),
    )


def format_score_insights(score: ScoreResult) -> list[str]:
    """Human-readable highlights for a score."""
    insights: list[str] = []
    demand = score.market_demand.details
    competition = score.competition.details

    if demand.mention_count > 0:
        insights.append(
            f"Found real user discussions; frustration signals earned "
            f"{demand.frustration_level}/35 demand points"
        )
    if competition.user_complaints > 0:
        insights.append(f"{competition.user_complaints} users complained about existing solutions")
    if competition.opportunity_gaps > 0:
        insights.append(f"{competition.opportunity_gaps} users actively looking for alternatives")

    return insights
