"""Enumeration types for validation models."""

from enum import Enum


class ValidationStatus(str, Enum):
    """Lifecycle status of a validation run."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (ValidationStatus.COMPLETED, ValidationStatus.FAILED)


class StepStatus(str, Enum):
    """Status of a single pipeline step."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Sentiment(str, Enum):
    """Sentiment classification of a discussion quote."""

    FRUSTRATED = "frustrated"
    NEUTRAL = "neutral"
    SATISFIED = "satisfied"


class Grade(str, Enum):
    """Letter grade derived from the overall score."""

    A = "A"
    B_PLUS = "B+"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class ConfidenceLevel(str, Enum):
    """Evidence report confidence bucket."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Recommendation(str, Enum):
    """Narrative recommendation from the synthesis step."""

    BUILD = "BUILD"
    PIVOT = "PIVOT"
    PASS = "PASS"


class RiskType(str, Enum):
    """Risk category in the narrative analysis."""

    MARKET = "MARKET"
    TECHNICAL = "TECHNICAL"
    COMPETITIVE = "COMPETITIVE"
    REGULATORY = "REGULATORY"


class RiskLevel(str, Enum):
    """Risk severity in the narrative analysis."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
