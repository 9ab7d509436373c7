"""Models for discussion evidence and its analysis."""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import Sentiment


class RawComment(BaseModel):
    """Top-level comment attached to a discussion post."""

    body: str = ""
    author: str = "anonymous"
    upvotes: int = 0


class RawPost(BaseModel):
    """Post as returned by a discussion source. No relevance guarantee."""

    title: str = ""
    body: str = ""
    author: str = "anonymous"
    upvotes: int = 0
    community: str = Field(..., description="Community the post was found in")
    permalink: str = Field("", description="Absolute URL of the post")
    timestamp_utc: datetime | None = None
    comment_count: int = 0
    comments: list[RawComment] = Field(default_factory=list)


class ProbeResult(BaseModel):
    """Outcome of one (community, query) search probe."""

    community: str
    query: str
    posts_found: int = 0
    error: str | None = None


class EvidenceQuote(BaseModel):
    """A quoted signal extracted from a discussion."""

    text: str = Field(..., description="Quoted text")
    author: str = "unknown"
    community: str = "unknown"
    upvotes: int = Field(0, ge=0)
    url: str = ""
    sentiment: Sentiment = Sentiment.NEUTRAL
    relevance_score: float = Field(0.5, ge=0.0, le=1.0)
    sentiment_confidence: float = Field(0.7, ge=0.0, le=1.0)
    pain_point_category: str = "general"


class AnalyzedContent(BaseModel):
    """Aggregate analysis of a batch of discussion posts."""

    quotes: list[EvidenceQuote] = Field(default_factory=list)
    overall_sentiment: float = Field(5.0, ge=0.0, le=10.0)
    pain_points: list[str] = Field(default_factory=list)
    key_insights: list[str] = Field(default_factory=list)
    frustration_level: float = Field(0.0, ge=0.0, le=1.0)
    total_relevant_posts: int = Field(0, ge=0)
    analysis_confidence: float = Field(0.0, ge=0.0, le=1.0)


class EvidencePost(BaseModel):
    """Quote re-shaped as a post for display."""

    title: str
    content: str
    community: str
    upvotes: int = 0
    comments: int = 0
    sentiment: int = Field(5, description="3 frustrated, 5 neutral, 8 satisfied")
    url: str = ""
    created_at: datetime | None = None


class DiscussionMetrics(BaseModel):
    """Counts derived from analyzed discussion content."""

    total_mentions: int = Field(0, ge=0)
    frustrated_users: int = Field(0, ge=0)
    neutral_users: int = Field(0, ge=0)
    satisfied_users: int = Field(0, ge=0)
    total_relevant_posts: int = Field(0, ge=0)
    overall_sentiment: float = 5.0
    frustration_level: float = 0.0
    key_insights: list[str] = Field(default_factory=list)
    top_quotes: list[EvidenceQuote] = Field(default_factory=list)


class DiscussionInsight(BaseModel):
    """Result of the discussion-search step."""

    posts: list[EvidencePost] = Field(default_factory=list)
    sentiment: float = 5.0
    pain_points: list[str] = Field(default_factory=list)
    discussion_volume: int = 0
    engagement_level: float = Field(0.0, ge=0.0, description="Average upvotes per quote")
    score: int = Field(20, ge=0, le=100, description="Legacy discussion score")
    metrics: DiscussionMetrics = Field(default_factory=DiscussionMetrics)
    analysis_confidence: float = 0.0
    probes: list[ProbeResult] = Field(default_factory=list)
    posts_collected: int = 0
