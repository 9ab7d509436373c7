"""Keyword and target-community generation."""

import structlog

from ivalidate.config.prompts import TARGETING_PROMPT
from ivalidate.config.settings import Settings
from ivalidate.extraction import FieldKind, FieldSpec
from ivalidate.llm import GenerativeTextProvider
from ivalidate.models.research import KeywordPlan
from ivalidate.models.validation import RefinedIdea

from .base import dict_items, generate_structured, string_items, validate_payload

logger = structlog.get_logger(__name__)

TARGETING_FIELDS = (
    FieldSpec("recommended_communities", FieldKind.ARRAY),
    FieldSpec("search_keywords", FieldKind.ARRAY),
    FieldSpec("focus_queries", FieldKind.ARRAY),
    FieldSpec("pain_point_queries", FieldKind.ARRAY),
)

TARGETING_REQUIRED = ("recommended_communities", "search_keywords", "focus_queries")


def _normalize_communities(items: list[dict]) -> list[dict]:
    communities = []
    seen = set()
    for item in items:
        name = str(item.get("name") or "").strip().removeprefix("r/").strip("/ ")
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        communities.append({**item, "name": name})
    return communities


async def generate_targeting(
    idea: RefinedIdea,
    provider: GenerativeTextProvider,
    settings: Settings | None = None,
) -> KeywordPlan:
    """Ask the provider which communities and queries to search.

    There is no sensible default plan, so anything short of communities,
    keywords and focus queries is fatal.

    Raises:
        ParseError: Response lacked a usable plan.
        ServiceUnavailableError: Provider overload outlasted the retry budget.
    """
    result = await generate_structured(
        TARGETING_PROMPT,
        idea,
        provider,
        TARGETING_FIELDS,
        TARGETING_REQUIRED,
        context="targeting",
        settings=settings,
    )
    data = result.data

    plan = validate_payload(
        KeywordPlan,
        {
            "recommended_communities": _normalize_communities(
                dict_items(data.get("recommended_communities"), key="name")
            ),
            "search_keywords": string_items(data.get("search_keywords")),
            "focus_queries": string_items(data.get("focus_queries")),
            "pain_point_queries": string_items(data.get("pain_point_queries")),
        },
        context="targeting",
    )

    logger.info(
        "targeting_generated",
        communities=plan.community_names,
        keywords=len(plan.search_keywords),
        queries=len(plan.focus_queries) + len(plan.pain_point_queries),
    )
    return plan
