"""Pytest configuration and fixtures."""

import json

import pytest

from ivalidate.config.settings import Settings
from ivalidate.errors import ProviderOverloadError
from ivalidate.models import (
    DiscussionInsight,
    DiscussionMetrics,
    EvidenceQuote,
    RawComment,
    RawPost,
    RefinedIdea,
    Sentiment,
    ValidationTrigger,
)
from ivalidate.storage import RecordStore

# Substrings that identify each prompt template
TARGETING = "most active, relevant online discussion communities"
CONTENT_ANALYSIS = "You are analyzing online discussions"
COMPETITORS = "Research the competitive landscape"
MARKET_SIZE = "market sizing analyst"
SCALABILITY = "startup scaling expert"
MOAT = "expert in competitive strategy"
UNIQUENESS = "positioning strategist"
STARTUP_ANALYSIS = "expert startup advisor"
REFINE = "Refine this startup idea"


class FakeProvider:
    """Scripted GenerativeTextProvider.

    ``routes`` maps a prompt marker to a response. A response may be a
    string, an exception to raise, or a list consumed one call at a time.
    """

    def __init__(self, routes: dict):
        self.routes = {k: list(v) if isinstance(v, list) else v for k, v in routes.items()}
        self.calls: list[str] = []
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        for marker, response in self.routes.items():
            if marker not in prompt:
                continue
            self.calls.append(marker)
            self.prompts.append(prompt)
            if isinstance(response, list):
                response = response.pop(0)
            if isinstance(response, BaseException):
                raise response
            return response
        raise AssertionError(f"No scripted response for prompt: {prompt[:80]}")

    def count(self, marker: str) -> int:
        return self.calls.count(marker)


class FakeSource:
    """DiscussionSource returning fixed posts."""

    def __init__(self, posts: list[RawPost] | None = None, error: Exception | None = None):
        self.posts = posts or []
        self.error = error
        self.calls: list[tuple[list[str], list[str]]] = []

    async def search(self, communities: list[str], queries: list[str]) -> list[RawPost]:
        self.calls.append((list(communities), list(queries)))
        if self.error:
            raise self.error
        return list(self.posts)


async def no_sleep(seconds: float) -> None:
    return None


def as_json(data: dict) -> str:
    return json.dumps(data)


# =============================================================================
# Canned provider responses
# =============================================================================

TARGETING_RESPONSE = {
    "recommended_communities": [
        {"name": "r/doggrooming", "reason": "Groomers discuss bookings", "member_count": "40k", "activity_level": "high"},
        {"name": "smallbusiness", "reason": "Owners discuss no-shows", "member_count": "1.5M", "activity_level": "high"},
    ],
    "search_keywords": ["grooming no-shows", "grooming booking app", "groomer scheduling"],
    "focus_queries": ["grooming booking software", "dog groomer scheduling app"],
    "pain_point_queries": ["clients no show grooming", "booking app sucks"],
}

CONTENT_ANALYSIS_RESPONSE = {
    "relevant_quotes": [
        {
            "text": "I'm so frustrated with my current booking app, it's expensive and costs me hours every week",
            "author": "groomer_jane",
            "community": "doggrooming",
            "upvotes": 24,
            "url": "",
            "sentiment": "frustrated",
            "relevance_score": 0.9,
            "pain_point_category": "scheduling",
            "sentiment_confidence": 0.9,
        },
        {
            "text": "Anyone know a scheduling tool that handles mobile routes? I wish there was something built for groomers.",
            "author": "mobile_mike",
            "community": "doggrooming",
            "upvotes": 12,
            "url": "https://reddit.com/r/doggrooming/comments/abc",
            "sentiment": "neutral",
            "relevance_score": 0.8,
            "pain_point_category": "routing",
            "sentiment_confidence": 0.8,
        },
        {
            "text": "We use a paper calendar and it works fine for us",
            "author": "old_school",
            "community": "smallbusiness",
            "upvotes": 3,
            "url": "https://reddit.com/r/smallbusiness/comments/def",
            "sentiment": "satisfied",
            "relevance_score": 0.6,
            "pain_point_category": "none",
            "sentiment_confidence": 0.7,
        },
    ],
    "overall_sentiment": 4.5,
    "pain_points": ["No-shows", "Expensive software"],
    "key_insights": ["Groomers want route-aware booking"],
    "frustration_level": 0.6,
    "total_relevant_posts": 3,
    "analysis_confidence": 0.8,
}

COMPETITOR_RESPONSE = {
    "competitors": [
        {
            "name": "MoeGo",
            "description": "Grooming business software",
            "category": "direct",
            "funding_status": "series-a",
            "user_complaints": ["Expensive", "Steep learning curve"],
            "strengths": ["Feature rich"],
            "weaknesses": ["Price"],
            "pricing": "$49/month",
            "market_position": "leader",
        },
        {
            "name": "Gingr",
            "description": "Pet care management",
            "category": "indirect",
            "user_complaints": ["Clunky mobile app"],
        },
    ],
    "market_gaps": ["Route-aware scheduling"],
    "opportunities": ["Cheaper plan for solo groomers"],
    "competitive_landscape": "Crowded at the top, thin for solo operators",
    "total_competitors": 7,
}

MARKET_SIZE_RESPONSE = {
    "total_addressable_market": {"value": 2500000000, "currency": "USD", "timeframe": "annual", "source": "Industry reports"},
    "serviceable_addressable_market": {"value": 300000000, "currency": "USD", "description": "US mobile groomers"},
    "serviceable_obtainable_market": {"value": 6000000, "currency": "USD", "description": "5-year capture"},
    "market_growth_rate": {"annual": 8.5, "trend": "growing", "drivers": ["Pet ownership"]},
    "market_segments": [{"segment": "Mobile groomers", "size": 300000000, "growth_potential": "high"}],
    "industry_trends": ["Mobile services"],
    "market_maturity": "growing",
    "key_insights": ["Solo groomers are underserved"],
}

SCALABILITY_RESPONSE = {
    "scalability_score": 72,
    "business_model": {"type": "saas", "scalability_rating": "high", "revenue_model": "Subscriptions", "unit_economics": "Good"},
    "scaling_factors": [{"factor": "Self-serve onboarding", "category": "operations", "impact": "high", "scalability": "excellent", "details": "No sales team"}],
    "growth_potential": {"short_term": "US", "long_term": "Global", "global_potential": True, "market_expansion": ["Pet sitters"]},
    "scaling_challenges": [],
    "revenue_streams": [{"stream": "Subscriptions", "scalability": "high", "implementation": "Stripe"}],
    "infrastructure_needs": {"technology": ["Maps API"], "operations": [], "team": ["Engineer"], "funding": "$500k"},
    "benchmark_comparisons": [],
}

MOAT_RESPONSE = {
    "moat_score": 45,
    "defensibility_factors": [
        {"factor": "Route data", "category": "data", "strength": "medium", "sustainability": "medium-term", "details": "", "build_time": "1 year"},
        {"factor": "Switching costs", "category": "switching-costs", "strength": "low", "sustainability": "short-term", "details": "", "build_time": ""},
    ],
    "competitive_threats": [],
    "barriers_to_build": [],
    "moat_strategy": {"primary_moat": "Data", "secondary_moats": [], "building_sequence": [], "timeline": "2 years", "key_milestones": []},
    "first_mover_advantages": [],
    "network_effects": {"potential": "low", "type": "", "scaling_factor": "", "critical_mass": ""},
    "switching_costs": {"data_lock": "medium", "learning_curve": "low", "integration": "low", "financial_cost": "low"},
}

UNIQUENESS_RESPONSE = {
    "unique_value_proposition": {"primary_value": "Route-aware booking", "secondary_values": [], "target_differentiator": "Built for mobile"},
    "competitive_advantages": [{"advantage": "Routing", "category": "technology", "strength": "high", "evidence": "", "defensibility": "medium"}],
    "market_gaps": [{"gap": "Mobile routing", "opportunity": "", "market_size": "niche", "timing_advantage": True}],
    "differentiation_strategy": {"primary_differentiator": "Routing", "supporting_differentiators": [], "positioning_statement": "", "target_weakness": "Price"},
    "uniqueness_score": 68,
    "risk_factors": [],
}

STARTUP_ANALYSIS_RESPONSE = {
    "recommendation": "BUILD",
    "reasoning": "Clear frustration with existing tools",
    "confidence": 70,
    "risks": [{"type": "COMPETITIVE", "level": "MEDIUM", "description": "Incumbents copy routing", "mitigation": "Move fast"}],
    "opportunities": ["Solo groomer plan", "Route optimisation add-on", "Pet sitter expansion"],
    "next_steps": ["Interview 20 groomers"],
    "market_size": {"tam": 2500000000, "sam": 300000000, "som": 6000000},
}

REFINE_RESPONSE = {
    "one_liner": "Route-aware booking for mobile dog groomers",
    "target_audience": "Independent mobile dog groomers",
    "problem": "No-shows and inefficient routes cost groomers income",
}


@pytest.fixture
def canned_routes() -> dict:
    """Provider routes for a full successful pipeline run."""
    return {
        TARGETING: as_json(TARGETING_RESPONSE),
        CONTENT_ANALYSIS: "```json\n" + as_json(CONTENT_ANALYSIS_RESPONSE) + "\n```",
        COMPETITORS: as_json(COMPETITOR_RESPONSE),
        MARKET_SIZE: as_json(MARKET_SIZE_RESPONSE),
        SCALABILITY: as_json(SCALABILITY_RESPONSE),
        MOAT: as_json(MOAT_RESPONSE),
        UNIQUENESS: as_json(UNIQUENESS_RESPONSE),
        STARTUP_ANALYSIS: as_json(STARTUP_ANALYSIS_RESPONSE),
        REFINE: as_json(REFINE_RESPONSE),
    }


# =============================================================================
# Domain fixtures
# =============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with no delays, pointed at a temp data dir."""
    return Settings(
        data_dir=tmp_path / "data",
        storage_read_delay_seconds=0,
        provider_backoff_seconds=0,
        provider_backoff_max_seconds=0,
        discussion_request_delay_seconds=0,
    )


@pytest.fixture
def store(tmp_path) -> RecordStore:
    return RecordStore(tmp_path / "data", read_delay_seconds=0, sleep=no_sleep)


@pytest.fixture
def refined_idea() -> RefinedIdea:
    return RefinedIdea(
        one_liner="Route-aware booking for mobile dog groomers",
        target_audience="Independent mobile dog groomers",
        problem="No-shows and inefficient routes cost groomers income",
    )


@pytest.fixture
def trigger(refined_idea) -> ValidationTrigger:
    return ValidationTrigger(
        id="run-001",
        idea_description="A booking app for mobile dog groomers",
        refined_idea=refined_idea,
    )


@pytest.fixture
def raw_posts() -> list[RawPost]:
    return [
        RawPost(
            title="Booking app costs me hours",
            body="My current booking app is expensive and slow",
            author="groomer_jane",
            upvotes=24,
            community="doggrooming",
            permalink="https://www.reddit.com/r/doggrooming/comments/xyz/booking/",
            comment_count=8,
            comments=[RawComment(body="Same here", author="other", upvotes=3)],
        ),
        RawPost(
            title="Routing for mobile groomers?",
            body="Anyone know a tool?",
            author="mobile_mike",
            upvotes=12,
            community="doggrooming",
            permalink="https://www.reddit.com/r/doggrooming/comments/abc/routing/",
        ),
    ]


def make_quote(
    text: str,
    sentiment: Sentiment = Sentiment.NEUTRAL,
    upvotes: int = 0,
    community: str = "doggrooming",
    author: str = "user",
) -> EvidenceQuote:
    return EvidenceQuote(
        text=text,
        author=author,
        community=community,
        upvotes=upvotes,
        url=f"https://reddit.com/r/{community}/comments/1",
        sentiment=sentiment,
    )


def make_insight(
    quotes: list[EvidenceQuote] | None = None,
    total_mentions: int | None = None,
    frustrated: int | None = None,
    neutral: int = 0,
    satisfied: int = 0,
    engagement: float = 0.0,
) -> DiscussionInsight:
    """Insight with explicit metrics; counts default to what the quotes say."""
    quotes = quotes or []
    if total_mentions is None:
        total_mentions = len(quotes)
    if frustrated is None:
        frustrated = sum(1 for q in quotes if q.sentiment == Sentiment.FRUSTRATED)
    return DiscussionInsight(
        discussion_volume=total_mentions,
        engagement_level=engagement,
        metrics=DiscussionMetrics(
            total_mentions=total_mentions,
            frustrated_users=frustrated,
            neutral_users=neutral,
            satisfied_users=satisfied,
            top_quotes=quotes,
        ),
    )


@pytest.fixture
def overload() -> ProviderOverloadError:
    return ProviderOverloadError("503 model overloaded")
