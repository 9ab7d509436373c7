"""API request and response schemas."""

from .requests import IdeaPayload, RefineIdeaRequest, StartValidationRequest
from .responses import (
    DebugStepPreview,
    DebugSummaryResponse,
    ErrorResponse,
    RefineIdeaResponse,
    StartValidationResponse,
    ValidationResultsResponse,
)

__all__ = [
    "IdeaPayload",
    "RefineIdeaRequest",
    "StartValidationRequest",
    "DebugStepPreview",
    "DebugSummaryResponse",
    "ErrorResponse",
    "RefineIdeaResponse",
    "StartValidationResponse",
    "ValidationResultsResponse",
]
