"""Per-domain AI research: competitors, market size, scalability, moat, uniqueness.

Each researcher renders its prompt around the refined idea, recovers a
record that must carry the domain's required keys and validates it into
a typed payload. Default records are never accepted.
"""

from typing import Any

import structlog

from ivalidate.config.prompts import (
    COMPETITOR_PROMPT,
    MARKET_SIZE_PROMPT,
    MOAT_PROMPT,
    SCALABILITY_PROMPT,
    UNIQUENESS_PROMPT,
)
from ivalidate.config.settings import Settings
from ivalidate.extraction import FieldKind, FieldSpec
from ivalidate.llm import GenerativeTextProvider
from ivalidate.models.research import (
    CompetitorResearch,
    MarketSizeResearch,
    MoatResearch,
    ScalabilityResearch,
    UniquenessResearch,
)
from ivalidate.models.validation import RefinedIdea

from .base import as_float, clamp_score, dict_items, generate_structured, string_items, validate_payload

logger = structlog.get_logger(__name__)


# =============================================================================
# Competitors
# =============================================================================

COMPETITOR_FIELDS = (
    FieldSpec("competitors", FieldKind.ARRAY),
    FieldSpec("market_gaps", FieldKind.ARRAY),
    FieldSpec("opportunities", FieldKind.ARRAY),
    FieldSpec("competitive_landscape", FieldKind.STRING),
    FieldSpec("total_competitors", FieldKind.INTEGER),
)


async def research_competitors(
    idea: RefinedIdea,
    provider: GenerativeTextProvider,
    settings: Settings | None = None,
) -> CompetitorResearch:
    result = await generate_structured(
        COMPETITOR_PROMPT, idea, provider, COMPETITOR_FIELDS, ("competitors",),
        context="competitor_research", settings=settings,
    )
    data = result.data

    competitors = []
    for item in dict_items(data.get("competitors"), key="name"):
        if not str(item.get("name") or "").strip():
            continue
        competitors.append({
            **item,
            "user_complaints": string_items(item.get("user_complaints")),
            "strengths": string_items(item.get("strengths")),
            "weaknesses": string_items(item.get("weaknesses")),
        })

    research = validate_payload(
        CompetitorResearch,
        {
            "competitors": competitors,
            "market_gaps": string_items(data.get("market_gaps")),
            "opportunities": string_items(data.get("opportunities")),
            "competitive_landscape": str(data.get("competitive_landscape") or ""),
            "total_competitors": len(competitors),
        },
        context="competitor_research",
    )
    logger.info(
        "competitor_research_complete",
        competitors=research.total_competitors,
        complaints=research.complaint_count,
    )
    return research


# =============================================================================
# Market size
# =============================================================================

MARKET_SIZE_FIELDS = (
    FieldSpec("total_addressable_market", FieldKind.OBJECT),
    FieldSpec("serviceable_addressable_market", FieldKind.OBJECT),
    FieldSpec("serviceable_obtainable_market", FieldKind.OBJECT),
    FieldSpec("market_growth_rate", FieldKind.OBJECT),
    FieldSpec("market_segments", FieldKind.ARRAY),
    FieldSpec("industry_trends", FieldKind.ARRAY),
    FieldSpec("market_maturity", FieldKind.STRING, "unknown"),
    FieldSpec("key_insights", FieldKind.ARRAY),
)


def _estimate(value: Any) -> dict:
    """Market estimate with a non-negative numeric value."""
    if isinstance(value, (int, float, str)) and not isinstance(value, bool):
        value = {"value": value}
    if not isinstance(value, dict):
        return {}
    return {**value, "value": max(0.0, as_float(value.get("value"), 0.0))}


async def research_market_size(
    idea: RefinedIdea,
    provider: GenerativeTextProvider,
    settings: Settings | None = None,
) -> MarketSizeResearch:
    result = await generate_structured(
        MARKET_SIZE_PROMPT, idea, provider, MARKET_SIZE_FIELDS,
        ("total_addressable_market", "serviceable_addressable_market"),
        context="market_size_research", settings=settings,
    )
    data = result.data

    growth = data.get("market_growth_rate")
    growth = growth if isinstance(growth, dict) else {}
    segments = [
        {**s, "size": max(0.0, as_float(s.get("size"), 0.0))}
        for s in dict_items(data.get("market_segments"), key="segment")
        if s.get("segment")
    ]

    research = validate_payload(
        MarketSizeResearch,
        {
            "total_addressable_market": _estimate(data.get("total_addressable_market")),
            "serviceable_addressable_market": _estimate(data.get("serviceable_addressable_market")),
            "serviceable_obtainable_market": _estimate(data.get("serviceable_obtainable_market")),
            "market_growth_rate": {
                **growth,
                "annual": as_float(growth.get("annual"), 0.0),
                "drivers": string_items(growth.get("drivers")),
            },
            "market_segments": segments,
            "industry_trends": string_items(data.get("industry_trends")),
            "market_maturity": str(data.get("market_maturity") or "unknown"),
            "key_insights": string_items(data.get("key_insights")),
        },
        context="market_size_research",
    )
    logger.info(
        "market_size_research_complete",
        tam=research.total_addressable_market.value,
        growth=research.market_growth_rate.annual,
    )
    return research


# =============================================================================
# Scalability
# =============================================================================

SCALABILITY_FIELDS = (
    FieldSpec("scalability_score", FieldKind.INTEGER),
    FieldSpec("business_model", FieldKind.OBJECT),
    FieldSpec("scaling_factors", FieldKind.ARRAY),
    FieldSpec("growth_potential", FieldKind.OBJECT),
    FieldSpec("scaling_challenges", FieldKind.ARRAY),
    FieldSpec("revenue_streams", FieldKind.ARRAY),
    FieldSpec("infrastructure_needs", FieldKind.OBJECT),
    FieldSpec("benchmark_comparisons", FieldKind.ARRAY),
)


async def research_scalability(
    idea: RefinedIdea,
    provider: GenerativeTextProvider,
    settings: Settings | None = None,
) -> ScalabilityResearch:
    result = await generate_structured(
        SCALABILITY_PROMPT, idea, provider, SCALABILITY_FIELDS,
        ("business_model", "scaling_factors"),
        context="scalability_research", settings=settings,
    )
    data = dict(result.data)
    clamp_score(data, "scalability_score")

    research = validate_payload(
        ScalabilityResearch,
        {
            **data,
            "business_model": data["business_model"] if isinstance(data["business_model"], dict) else {},
            "scaling_factors": dict_items(data.get("scaling_factors"), key="factor"),
            "scaling_challenges": dict_items(data.get("scaling_challenges"), key="challenge"),
            "revenue_streams": dict_items(data.get("revenue_streams"), key="stream"),
            "benchmark_comparisons": dict_items(data.get("benchmark_comparisons"), key="company"),
            "growth_potential": data.get("growth_potential") or {},
            "infrastructure_needs": data.get("infrastructure_needs") or {},
        },
        context="scalability_research",
    )
    logger.info(
        "scalability_research_complete",
        score=research.scalability_score,
        model=research.business_model.type,
    )
    return research


# =============================================================================
# Moat
# =============================================================================

MOAT_FIELDS = (
    FieldSpec("moat_score", FieldKind.INTEGER),
    FieldSpec("defensibility_factors", FieldKind.ARRAY),
    FieldSpec("competitive_threats", FieldKind.ARRAY),
    FieldSpec("barriers_to_build", FieldKind.ARRAY),
    FieldSpec("moat_strategy", FieldKind.OBJECT),
    FieldSpec("first_mover_advantages", FieldKind.ARRAY),
    FieldSpec("network_effects", FieldKind.OBJECT),
    FieldSpec("switching_costs", FieldKind.OBJECT),
)


async def research_moat(
    idea: RefinedIdea,
    provider: GenerativeTextProvider,
    settings: Settings | None = None,
) -> MoatResearch:
    result = await generate_structured(
        MOAT_PROMPT, idea, provider, MOAT_FIELDS,
        ("defensibility_factors", "moat_strategy"),
        context="moat_research", settings=settings,
    )
    data = dict(result.data)
    clamp_score(data, "moat_score")

    research = validate_payload(
        MoatResearch,
        {
            **data,
            "defensibility_factors": dict_items(data.get("defensibility_factors"), key="factor"),
            "competitive_threats": dict_items(data.get("competitive_threats"), key="threat"),
            "barriers_to_build": dict_items(data.get("barriers_to_build"), key="barrier"),
            "moat_strategy": data["moat_strategy"] if isinstance(data["moat_strategy"], dict) else {},
            "first_mover_advantages": dict_items(data.get("first_mover_advantages"), key="advantage"),
            "network_effects": data.get("network_effects") or {},
            "switching_costs": data.get("switching_costs") or {},
        },
        context="moat_research",
    )
    logger.info(
        "moat_research_complete",
        score=research.moat_score,
        factors=len(research.defensibility_factors),
    )
    return research


# =============================================================================
# Unique value zone
# =============================================================================

UNIQUENESS_FIELDS = (
    FieldSpec("unique_value_proposition", FieldKind.OBJECT),
    FieldSpec("competitive_advantages", FieldKind.ARRAY),
    FieldSpec("market_gaps", FieldKind.ARRAY),
    FieldSpec("differentiation_strategy", FieldKind.OBJECT),
    FieldSpec("uniqueness_score", FieldKind.INTEGER),
    FieldSpec("risk_factors", FieldKind.ARRAY),
)


async def research_uniqueness(
    idea: RefinedIdea,
    provider: GenerativeTextProvider,
    settings: Settings | None = None,
) -> UniquenessResearch:
    result = await generate_structured(
        UNIQUENESS_PROMPT, idea, provider, UNIQUENESS_FIELDS,
        ("unique_value_proposition", "competitive_advantages"),
        context="uniqueness_research", settings=settings,
    )
    data = dict(result.data)
    clamp_score(data, "uniqueness_score")

    proposition = data["unique_value_proposition"]
    research = validate_payload(
        UniquenessResearch,
        {
            **data,
            "unique_value_proposition": proposition if isinstance(proposition, dict) else {},
            "competitive_advantages": dict_items(data.get("competitive_advantages"), key="advantage"),
            "market_gaps": dict_items(data.get("market_gaps"), key="gap"),
            "differentiation_strategy": data.get("differentiation_strategy") or {},
            "risk_factors": dict_items(data.get("risk_factors"), key="risk"),
        },
        context="uniqueness_research",
    )
    logger.info(
        "uniqueness_research_complete",
        score=research.uniqueness_score,
        advantages=len(research.competitive_advantages),
    )
    return research
