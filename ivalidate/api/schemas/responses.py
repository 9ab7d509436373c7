"""
Response schemas for the API.

Key Design Decisions:
- Status responses are the progress surface built from the stored record
- Result payloads are returned as stored, snake_case JSON
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from ivalidate.models.enums import ValidationStatus
from ivalidate.models.scoring import ScoreResult
from ivalidate.models.validation import IdeaInput, RefinedIdea


class StartValidationResponse(BaseModel):
    """Response after starting a validation run."""
    validation_id: str = Field(..., description="Identifier to poll for progress")
    status: ValidationStatus = ValidationStatus.PENDING
    estimated_time: int = Field(..., description="Expected duration in minutes")


class ValidationResultsResponse(BaseModel):
    """Completed validation with every research payload."""
    validation_id: str
    status: ValidationStatus
    idea: IdeaInput
    created_at: datetime
    completed_at: Optional[datetime] = None
    score: ScoreResult
    insights: list[str] = Field(default_factory=list, description="Human-readable score highlights")
    total_data_points: int = 0
    competitor_data: Optional[dict[str, Any]] = None
    market_size_data: Optional[dict[str, Any]] = None
    scalability_data: Optional[dict[str, Any]] = None
    moat_data: Optional[dict[str, Any]] = None
    uniqueness_data: Optional[dict[str, Any]] = None
    discussion_data: Optional[dict[str, Any]] = None
    analysis: Optional[dict[str, Any]] = None
    evidence_report: Optional[dict[str, Any]] = None
    formatted_report: Optional[str] = None


class RefineIdeaResponse(BaseModel):
    """Refined idea triple."""
    original_idea: str
    refined_idea: RefinedIdea


class ErrorResponse(BaseModel):
    """Error body for mapped pipeline errors."""
    error: str
    detail: str


class DebugStepPreview(BaseModel):
    """One debug log entry with nested values collapsed to their sizes."""
    step: Optional[str] = None
    timestamp: Optional[str] = None
    success: bool = False
    error: Optional[str] = None
    data_preview: Any = None


class DebugSummaryResponse(BaseModel):
    """Keyword and search traces recorded for a run."""
    validation_id: str
    total_steps: int = 0
    steps: list[DebugStepPreview] = Field(default_factory=list)
    keyword_step: Optional[dict[str, Any]] = None
    search_step: Optional[dict[str, Any]] = None
    entries: Optional[list[dict[str, Any]]] = Field(None, description="Raw entries, when requested")
