"""Models for validation runs and their persisted record."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from .enums import StepStatus, ValidationStatus
from .scoring import ScoreResult


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RefinedIdea(BaseModel):
    """Structured idea triple required before research can start."""

    one_liner: str = Field(..., min_length=1, description="One-sentence idea description")
    target_audience: str = Field(..., min_length=1, description="Who the product is for")
    problem: str = Field(..., min_length=1, description="Problem the idea solves")


class IdeaInput(BaseModel):
    """Idea as submitted by the user."""

    description: str = Field(..., description="Free-form idea description")
    refined: RefinedIdea | None = Field(None, description="Refined idea triple")


class ValidationTrigger(BaseModel):
    """Request to start a validation run."""

    id: str = Field(..., description="Run identifier")
    idea_description: str = Field(..., description="Free-form idea description")
    refined_idea: RefinedIdea | None = Field(None, description="Refined idea triple")


class StepRecord(BaseModel):
    """Progress entry for one pipeline step."""

    index: int = Field(..., ge=1, description="1-based step position")
    title: str = Field(..., description="Short step title")
    description: str = Field(..., description="Human-readable status text")
    target_progress: int = Field(..., ge=0, le=100, description="Progress checkpoint reached on completion")
    status: StepStatus = Field(StepStatus.PENDING, description="Step status")
    data_points_found: int | None = Field(None, ge=0, description="Evidence items found by the step")
    error_message: str | None = Field(None, description="Failure message, if failed")


class ValidationRecord(BaseModel):
    """Persisted state of one validation run."""

    id: str = Field(..., description="Run identifier")
    created_at: datetime = Field(default_factory=_utc_now)
    idea: IdeaInput
    status: ValidationStatus = ValidationStatus.PENDING
    progress: int = Field(0, ge=0, le=100)
    current_step: str = Field("Queued for validation", description="Human-readable current activity")
    processing_steps: list[StepRecord] = Field(default_factory=list)

    # Terminal payloads
    final_score: ScoreResult | None = None
    competitor_data: dict[str, Any] | None = None
    market_size_data: dict[str, Any] | None = None
    scalability_data: dict[str, Any] | None = None
    moat_data: dict[str, Any] | None = None
    uniqueness_data: dict[str, Any] | None = None
    discussion_data: dict[str, Any] | None = None
    analysis: dict[str, Any] | None = None
    evidence_report: dict[str, Any] | None = None
    formatted_report: str | None = None
    total_data_points: int | None = None

    error_message: str | None = None
    completed_at: datetime | None = None
