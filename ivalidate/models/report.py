"""Models for the evidence report."""

from pydantic import BaseModel, Field

from .enums import ConfidenceLevel, Sentiment


class ReportQuote(BaseModel):
    text: str
    author: str
    community: str
    upvotes: int = 0
    url: str = ""
    sentiment: Sentiment = Sentiment.NEUTRAL


class SentimentBreakdown(BaseModel):
    frustrated_percent: int = 0
    neutral_percent: int = 0
    satisfied_percent: int = 0
    seeking_solutions: int = 0


class SocialEvidence(BaseModel):
    """Proof drawn from community discussions."""

    posts_found: int = 0
    top_quotes: list[ReportQuote] = Field(default_factory=list)
    sentiment_breakdown: SentimentBreakdown = Field(default_factory=SentimentBreakdown)
    evidence_summary: list[str] = Field(default_factory=list)


class UserComplaint(BaseModel):
    complaint: str
    about: str = "existing solution"
    author: str = "unknown"
    community: str = "unknown"


class CompetitionEvidence(BaseModel):
    """Competitive signals drawn from user feedback."""

    direct_competitors: int = 0
    user_complaints: list[UserComplaint] = Field(default_factory=list)
    identified_gaps: list[str] = Field(default_factory=list)
    complaint_themes: list[str] = Field(default_factory=list)
    evidence_summary: list[str] = Field(default_factory=list)


class OverallEvidence(BaseModel):
    data_quality: int = Field(0, ge=0, le=100)
    total_data_points: int = 0
    confidence_level: ConfidenceLevel = ConfidenceLevel.LOW
    key_findings: list[str] = Field(default_factory=list)


class EvidenceReport(BaseModel):
    """Evidence behind a validation score."""

    social: SocialEvidence
    competition: CompetitionEvidence
    overall: OverallEvidence
