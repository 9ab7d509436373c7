"""Models for evidence scores."""

from pydantic import BaseModel, Field

from .enums import Grade


class MarketDemandDetails(BaseModel):
    """Points contributed by each market-demand component."""

    mention_count: int = Field(0, ge=0, le=30, description="Mention-volume tier points")
    frustration_level: int = Field(0, ge=0, le=35, description="Frustration-percentage tier points")
    severity_score: int = Field(0, ge=0, le=25, description="Quote severity points")
    engagement_score: float = Field(0.0, ge=0, le=10, description="Engagement points")


class MarketDemandScore(BaseModel):
    score: int = Field(..., ge=0, le=100)
    details: MarketDemandDetails = Field(default_factory=MarketDemandDetails)


class CompetitionDetails(BaseModel):
    """Raw signal counts behind the competition score."""

    competitor_mentions: int = Field(0, ge=0)
    user_complaints: int = Field(0, ge=0)
    opportunity_gaps: int = Field(0, ge=0)


class CompetitionScore(BaseModel):
    score: int = Field(..., ge=0, le=100)
    details: CompetitionDetails = Field(default_factory=CompetitionDetails)


class OverallScore(BaseModel):
    score: int = Field(..., ge=0, le=100)
    grade: Grade
    confidence: int = Field(..., ge=0, le=100, description="Data-quality confidence")


class ScoreResult(BaseModel):
    """Published validation score."""

    market_demand: MarketDemandScore
    competition: CompetitionScore
    overall: OverallScore
