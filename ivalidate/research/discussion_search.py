"""Discussion step: search communities and turn posts into insight."""

import hashlib

import structlog

from ivalidate.config.settings import Settings, get_settings
from ivalidate.llm import GenerativeTextProvider
from ivalidate.models.enums import Sentiment
from ivalidate.models.evidence import (
    AnalyzedContent,
    DiscussionInsight,
    DiscussionMetrics,
    EvidencePost,
    ProbeResult,
    RawPost,
)
from ivalidate.models.research import KeywordPlan
from ivalidate.models.validation import RefinedIdea
from ivalidate.scoring import round_half_up
from ivalidate.sources.discussion import DiscussionSource
from ivalidate.storage import RecordStore, to_jsonable

from .content_analyzer import analyze_discussions

logger = structlog.get_logger(__name__)

SENTIMENT_WEIGHTS = {
    Sentiment.FRUSTRATED: 3,
    Sentiment.NEUTRAL: 5,
    Sentiment.SATISFIED: 8,
}

MAX_EVIDENCE_POSTS = 20
MAX_TOP_QUOTES = 10
EMPTY_DISCUSSION_SCORE = 20


def average_sentiment(analysis: AnalyzedContent) -> float:
    """Weighted quote sentiment on the 3/5/8 scale; 5 when there are no quotes."""
    if not analysis.quotes:
        return 5.0
    return sum(SENTIMENT_WEIGHTS[q.sentiment] for q in analysis.quotes) / len(analysis.quotes)


def discussion_score(analysis: AnalyzedContent) -> int:
    """Legacy 0-100 discussion score from volume, frustration and engagement."""
    quotes = analysis.quotes
    if not quotes:
        return EMPTY_DISCUSSION_SCORE

    count = len(quotes)
    frustrated = sum(1 for q in quotes if q.sentiment == Sentiment.FRUSTRATED)
    average_upvotes = sum(q.upvotes for q in quotes) / count

    score = min(count * 0.6, 30) + (frustrated / count) * 40 + min(average_upvotes * 2, 30)
    return max(0, min(round_half_up(score), 100))


def build_discussion_insight(
    analysis: AnalyzedContent,
    probes: list[ProbeResult] | None = None,
    posts_collected: int = 0,
) -> DiscussionInsight:
    """Fold analyzed content into the discussion-step payload."""
    quotes = analysis.quotes

    posts = [
        EvidencePost(
            title=f"{q.text[:100]}...",
            content=q.text,
            community=q.community,
            upvotes=q.upvotes,
            comments=0,
            sentiment=SENTIMENT_WEIGHTS[q.sentiment],
            url=q.url,
        )
        for q in quotes[:MAX_EVIDENCE_POSTS]
    ]

    metrics = DiscussionMetrics(
        total_mentions=len(quotes),
        frustrated_users=sum(1 for q in quotes if q.sentiment == Sentiment.FRUSTRATED),
        neutral_users=sum(1 for q in quotes if q.sentiment == Sentiment.NEUTRAL),
        satisfied_users=sum(1 for q in quotes if q.sentiment == Sentiment.SATISFIED),
        total_relevant_posts=analysis.total_relevant_posts,
        overall_sentiment=analysis.overall_sentiment,
        frustration_level=analysis.frustration_level,
        key_insights=list(analysis.key_insights),
        top_quotes=sorted(quotes, key=lambda q: q.upvotes, reverse=True)[:MAX_TOP_QUOTES],
    )

    return DiscussionInsight(
        posts=posts,
        sentiment=average_sentiment(analysis),
        pain_points=list(analysis.pain_points),
        discussion_volume=len(quotes),
        engagement_level=sum(q.upvotes for q in quotes) / max(1, len(quotes)),
        score=discussion_score(analysis),
        metrics=metrics,
        analysis_confidence=analysis.analysis_confidence,
        probes=probes or [],
        posts_collected=posts_collected,
    )


async def _probe(
    source: DiscussionSource,
    communities: list[str],
    queries: list[str],
) -> tuple[list[RawPost], list[ProbeResult]]:
    search_with_probes = getattr(source, "search_with_probes", None)
    if search_with_probes is not None:
        return await search_with_probes(communities, queries)
    return await source.search(communities, queries), []


def search_queries(plan: KeywordPlan, settings: Settings) -> list[str]:
    """Focus queries first, then pain-point queries, up to the configured limit."""
    return (plan.focus_queries + plan.pain_point_queries)[: settings.discussion_max_queries]


def discussion_cache_key(idea: RefinedIdea) -> str:
    """Cache key for an idea's raw posts.

    The digest of the full one-liner keeps ideas apart even when the
    readable part reduces to nothing (e.g. non-ASCII text).
    """
    digest = hashlib.sha1(idea.one_liner.encode("utf-8")).hexdigest()[:12]
    return f"discussion_{digest}_{idea.one_liner[:60]}"


async def _collect(
    source: DiscussionSource,
    communities: list[str],
    queries: list[str],
    idea: RefinedIdea,
    settings: Settings,
    cache: RecordStore | None,
) -> tuple[list[RawPost], list[ProbeResult]]:
    ttl = settings.discussion_cache_ttl_seconds
    if cache is None or ttl <= 0:
        return await _probe(source, communities, queries)

    key = discussion_cache_key(idea)
    cached = await cache.load_cache(key)
    if isinstance(cached, list):
        logger.info("discussion_cache_hit", key=key, posts=len(cached))
        return [RawPost.model_validate(item) for item in cached], []

    posts, probes = await _probe(source, communities, queries)
    if posts:
        await cache.save_cache(key, to_jsonable(posts), ttl_seconds=ttl)
    return posts, probes


async def search_discussions(
    plan: KeywordPlan,
    idea: RefinedIdea,
    source: DiscussionSource,
    provider: GenerativeTextProvider,
    settings: Settings | None = None,
    cache: RecordStore | None = None,
) -> DiscussionInsight:
    """Search the planned communities and analyze what comes back.

    Zero posts is not an error here: the result is an empty insight and
    the caller decides how to continue. Raw posts are cached in ``cache``
    when ``discussion_cache_ttl_seconds`` is positive.
    """
    settings = settings or get_settings()
    communities = plan.community_names
    queries = search_queries(plan, settings)

    logger.info("discussion_search_started", communities=communities, queries=len(queries))
    posts, probes = await _collect(source, communities, queries, idea, settings, cache)

    analysis = await analyze_discussions(posts, idea, provider, settings)
    insight = build_discussion_insight(analysis, probes=probes, posts_collected=len(posts))

    logger.info(
        "discussion_insight_built",
        posts_collected=len(posts),
        mentions=insight.metrics.total_mentions,
        frustrated=insight.metrics.frustrated_users,
        score=insight.score,
    )
    return insight
