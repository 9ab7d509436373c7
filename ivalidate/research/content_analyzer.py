"""AI content analysis of raw discussion posts.

Relevance is not guaranteed by the discussion source, so the provider is
asked to pick out quotes that actually concern the idea and classify
their sentiment. This step tolerates malformed output: a low-confidence
or default extraction still yields an AnalyzedContent, with confidence
capped accordingly.
"""

from typing import Any

import structlog

from ivalidate.config.prompts import CONTENT_ANALYSIS_PROMPT
from ivalidate.config.settings import Settings, get_settings
from ivalidate.extraction import FieldKind, FieldSpec, extract_json_object
from ivalidate.llm import GenerativeTextProvider, generate_with_retry, render_idea_prompt
from ivalidate.models.enums import Sentiment
from ivalidate.models.evidence import AnalyzedContent, EvidenceQuote, RawPost
from ivalidate.models.validation import RefinedIdea

from .base import as_float, clamp, dict_items, log_extraction, string_items

logger = structlog.get_logger(__name__)

CONTENT_ANALYSIS_FIELDS = (
    FieldSpec("relevant_quotes", FieldKind.ARRAY),
    FieldSpec("overall_sentiment", FieldKind.NUMBER, 5.0),
    FieldSpec("pain_points", FieldKind.ARRAY),
    FieldSpec("key_insights", FieldKind.ARRAY),
    FieldSpec("frustration_level", FieldKind.NUMBER, 0.5),
    FieldSpec("total_relevant_posts", FieldKind.INTEGER),
    FieldSpec("analysis_confidence", FieldKind.NUMBER, 0.3),
)

# Quotes below this sentiment confidence count as uncertain
LOW_SENTIMENT_CONFIDENCE = 0.6
UNCERTAIN_CONFIDENCE_CAP = 0.6
DEFAULT_SENTIMENT_CONFIDENCE = 0.7


def empty_analysis() -> AnalyzedContent:
    """Analysis used when there is nothing to analyze."""
    return AnalyzedContent(
        quotes=[],
        overall_sentiment=5.0,
        pain_points=["No relevant discussions found"],
        key_insights=["Insufficient data for analysis"],
        frustration_level=0.0,
        total_relevant_posts=0,
        analysis_confidence=0.0,
    )


def format_posts(posts: list[RawPost]) -> str:
    """Render posts as numbered blocks for the analysis prompt."""
    blocks = []
    for i, post in enumerate(posts, 1):
        parts = [post.title, post.body] + [c.body for c in post.comments]
        content = " | ".join(p.strip() for p in parts if p and p.strip())
        blocks.append(
            f"POST {i}:\n"
            f"Community: {post.community}\n"
            f"Author: {post.author}\n"
            f"Upvotes: {post.upvotes}\n"
            f"URL: {post.permalink or '#'}\n"
            f"Content: {content}"
        )
    return "\n\n".join(blocks)


def _parse_sentiment(value: Any) -> Sentiment:
    try:
        return Sentiment(str(value).strip().lower())
    except ValueError:
        return Sentiment.NEUTRAL


def _build_quote(raw: dict, posts_by_author: dict[str, RawPost]) -> EvidenceQuote | None:
    text = str(raw.get("text") or "").strip()
    if not text:
        return None

    author = str(raw.get("author") or "unknown").strip() or "unknown"
    url = str(raw.get("url") or "").strip()
    if not url or url in ("post_url", "#"):
        source = posts_by_author.get(author)
        url = source.permalink if source and source.permalink else "#"

    return EvidenceQuote(
        text=text,
        author=author,
        community=str(raw.get("community") or "unknown").removeprefix("r/"),
        upvotes=max(0, int(as_float(raw.get("upvotes"), 0))),
        url=url,
        sentiment=_parse_sentiment(raw.get("sentiment")),
        relevance_score=clamp(as_float(raw.get("relevance_score"), 0.5), 0.0, 1.0),
        sentiment_confidence=clamp(
            as_float(raw.get("sentiment_confidence"), DEFAULT_SENTIMENT_CONFIDENCE), 0.0, 1.0
        ),
        pain_point_category=str(raw.get("pain_point_category") or "general"),
    )


async def analyze_discussions(
    posts: list[RawPost],
    idea: RefinedIdea,
    provider: GenerativeTextProvider,
    settings: Settings | None = None,
) -> AnalyzedContent:
    """Extract relevant quotes and aggregate sentiment from posts.

    Args:
        posts: Raw posts from the discussion source.
        idea: Refined idea used to judge relevance.
        provider: Generative-text provider.
        settings: Limits; cached settings if not provided.

    Returns:
        AnalyzedContent. Zero posts gives the empty analysis without a provider call.
    """
    settings = settings or get_settings()
    if not posts:
        logger.info("content_analysis_skipped", reason="no_posts")
        return empty_analysis()

    selected = posts[: settings.content_analysis_max_posts]
    prompt = render_idea_prompt(
        CONTENT_ANALYSIS_PROMPT,
        idea,
        post_count=len(selected),
        posts=format_posts(selected),
    )
    text = await generate_with_retry(provider, prompt, context="content_analysis", settings=settings)

    result = extract_json_object(text, CONTENT_ANALYSIS_FIELDS)
    log_extraction("content_analysis", result, posts=len(selected))
    data = result.data

    posts_by_author: dict[str, RawPost] = {}
    for post in selected:
        posts_by_author.setdefault(post.author, post)

    quotes = [
        quote
        for quote in (_build_quote(raw, posts_by_author) for raw in dict_items(data.get("relevant_quotes"), key="text"))
        if quote is not None
    ]

    confidence = clamp(as_float(data.get("analysis_confidence"), 0.3), 0.0, 1.0)
    confidence = min(confidence, result.confidence)
    uncertain = sum(1 for q in quotes if q.sentiment_confidence < LOW_SENTIMENT_CONFIDENCE)
    if quotes and uncertain > len(quotes) / 2:
        confidence = min(confidence, UNCERTAIN_CONFIDENCE_CAP)

    analysis = AnalyzedContent(
        quotes=quotes,
        overall_sentiment=clamp(as_float(data.get("overall_sentiment"), 5.0), 0.0, 10.0),
        pain_points=string_items(data.get("pain_points")),
        key_insights=string_items(data.get("key_insights")),
        frustration_level=clamp(as_float(data.get("frustration_level"), 0.5), 0.0, 1.0),
        total_relevant_posts=max(0, int(as_float(data.get("total_relevant_posts"), len(quotes)))),
        analysis_confidence=confidence,
    )

    logger.info(
        "content_analysis_complete",
        quotes=len(quotes),
        uncertain_quotes=uncertain,
        confidence=round(confidence, 2),
    )
    return analysis
