"""Pydantic data models for validation runs."""

from .enums import (
    ConfidenceLevel,
    Grade,
    Recommendation,
    RiskLevel,
    RiskType,
    Sentiment,
    StepStatus,
    ValidationStatus,
)
from .scoring import (
    CompetitionDetails,
    CompetitionScore,
    MarketDemandDetails,
    MarketDemandScore,
    OverallScore,
    ScoreResult,
)
from .evidence import (
    AnalyzedContent,
    DiscussionInsight,
    DiscussionMetrics,
    EvidencePost,
    EvidenceQuote,
    ProbeResult,
    RawComment,
    RawPost,
)
from .research import (
    CompetitorResearch,
    KeywordPlan,
    MarketSizeResearch,
    MoatResearch,
    ScalabilityResearch,
    SentimentSummary,
    StartupAnalysis,
    TargetCommunity,
    UniquenessResearch,
)
from .report import EvidenceReport
from .validation import (
    IdeaInput,
    RefinedIdea,
    StepRecord,
    ValidationRecord,
    ValidationTrigger,
)

__all__ = [
    # Enums
    "ValidationStatus",
    "StepStatus",
    "Sentiment",
    "Grade",
    "ConfidenceLevel",
    "Recommendation",
    "RiskType",
    "RiskLevel",
    # Scoring
    "ScoreResult",
    "MarketDemandScore",
    "MarketDemandDetails",
    "CompetitionScore",
    "CompetitionDetails",
    "OverallScore",
    # Evidence
    "RawPost",
    "RawComment",
    "ProbeResult",
    "EvidenceQuote",
    "EvidencePost",
    "AnalyzedContent",
    "DiscussionMetrics",
    "DiscussionInsight",
    # Research
    "KeywordPlan",
    "TargetCommunity",
    "SentimentSummary",
    "CompetitorResearch",
    "MarketSizeResearch",
    "ScalabilityResearch",
    "MoatResearch",
    "UniquenessResearch",
    "StartupAnalysis",
    # Report
    "EvidenceReport",
    # Validation
    "RefinedIdea",
    "IdeaInput",
    "ValidationTrigger",
    "StepRecord",
    "ValidationRecord",
]
