"""Narrative synthesis over the collected discussion evidence."""

from typing import Any

import structlog

from ivalidate.config.prompts import STARTUP_ANALYSIS_PROMPT
from ivalidate.config.settings import Settings
from ivalidate.extraction import FieldKind, FieldSpec, extract_json_object
from ivalidate.llm import GenerativeTextProvider, generate_with_retry, render_prompt
from ivalidate.models.enums import Recommendation, RiskLevel, RiskType
from ivalidate.models.evidence import DiscussionInsight
from ivalidate.models.research import StartupAnalysis

from .base import as_float, clamp, dict_items, log_extraction, string_items, validate_payload

logger = structlog.get_logger(__name__)

STARTUP_ANALYSIS_FIELDS = (
    FieldSpec("recommendation", FieldKind.STRING, Recommendation.PASS.value),
    FieldSpec("reasoning", FieldKind.STRING),
    FieldSpec("confidence", FieldKind.INTEGER, 50),
    FieldSpec("risks", FieldKind.ARRAY),
    FieldSpec("opportunities", FieldKind.ARRAY),
    FieldSpec("next_steps", FieldKind.ARRAY),
    FieldSpec("market_size", FieldKind.OBJECT),
)


def format_evidence(insight: DiscussionInsight) -> str:
    """Summarize discussion evidence for the synthesis prompt."""
    metrics = insight.metrics
    if metrics.total_mentions == 0:
        return (
            f"No relevant discussions were found ({insight.posts_collected} posts searched). "
            "Base the analysis on general market knowledge and state the data limitation."
        )

    lines = [
        f"Relevant mentions: {metrics.total_mentions}",
        f"Frustrated users: {metrics.frustrated_users}",
        f"Neutral users: {metrics.neutral_users}",
        f"Satisfied users: {metrics.satisfied_users}",
        f"Average sentiment (1-10): {insight.sentiment:.1f}",
        f"Average upvotes per quote: {insight.engagement_level:.1f}",
    ]
    if insight.pain_points:
        lines.append("Pain points:")
        lines.extend(f"- {p}" for p in insight.pain_points)
    if metrics.top_quotes:
        lines.append("Top quotes:")
        lines.extend(
            f'- "{q.text}" (r/{q.community}, {q.upvotes} upvotes, {q.sentiment.value})'
            for q in metrics.top_quotes
        )
    return "\n".join(lines)


def _enum_value(value: Any, enum_type: type, fallback):
    try:
        return enum_type(str(value).strip().upper())
    except ValueError:
        return fallback


def normalize_analysis(data: dict[str, Any]) -> dict[str, Any]:
    """Coerce unknown enum values and out-of-range numbers to safe defaults."""
    market = data.get("market_size")
    market = market if isinstance(market, dict) else {}

    return {
        "recommendation": _enum_value(data.get("recommendation"), Recommendation, Recommendation.PASS),
        "reasoning": str(data.get("reasoning") or ""),
        "next_steps": string_items(data.get("next_steps")),
        "opportunities": string_items(data.get("opportunities")),
        "risks": [
            {
                "type": _enum_value(risk.get("type"), RiskType, RiskType.MARKET),
                "level": _enum_value(risk.get("level"), RiskLevel, RiskLevel.MEDIUM),
                "description": str(risk.get("description") or ""),
                "mitigation": str(risk.get("mitigation") or ""),
            }
            for risk in dict_items(data.get("risks"), key="description")
        ],
        "market_size": {
            key: max(0.0, as_float(market.get(key), 0.0)) for key in ("tam", "sam", "som")
        },
        "confidence": int(round(clamp(as_float(data.get("confidence"), 50), 0, 100))),
    }


async def analyze_startup(
    idea_description: str,
    insight: DiscussionInsight,
    provider: GenerativeTextProvider,
    settings: Settings | None = None,
) -> StartupAnalysis:
    """Produce a BUILD/PIVOT/PASS recommendation with risks and opportunities.

    Malformed output is tolerated; a default record yields a PASS with no
    content rather than an error.
    """
    prompt = render_prompt(
        STARTUP_ANALYSIS_PROMPT,
        idea=idea_description,
        evidence=format_evidence(insight),
    )
    text = await generate_with_retry(provider, prompt, context="startup_analysis", settings=settings)

    result = extract_json_object(text, STARTUP_ANALYSIS_FIELDS)
    log_extraction("startup_analysis", result)

    analysis = validate_payload(StartupAnalysis, normalize_analysis(result.data), context="startup_analysis")
    if result.is_default:
        analysis.confidence = min(analysis.confidence, int(result.confidence * 100))

    logger.info(
        "startup_analysis_complete",
        recommendation=analysis.recommendation.value,
        confidence=analysis.confidence,
        risks=len(analysis.risks),
    )
    return analysis
