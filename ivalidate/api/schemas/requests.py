"""
Request schemas for the API.

Using Pydantic v2 for validation and serialization.
"""

from typing import Optional

from pydantic import BaseModel, Field

from ivalidate.models.validation import RefinedIdea


class IdeaPayload(BaseModel):
    """Idea as submitted for validation."""
    description: str = Field(..., min_length=10, max_length=2000, description="Free-form idea description")
    refined_idea: Optional[RefinedIdea] = Field(None, description="Refined idea triple from /refine-idea")


class StartValidationRequest(BaseModel):
    """Request to start a validation run."""
    validation_id: Optional[str] = Field(
        None,
        pattern=r"^[A-Za-z0-9_-]{1,128}$",
        description="Client-chosen run id; generated when omitted",
    )
    idea: IdeaPayload

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "validation_id": "run-2026-001",
                    "idea": {
                        "description": "A scheduling tool for independent dog groomers",
                        "refined_idea": {
                            "one_liner": "Booking and reminders for mobile dog groomers",
                            "target_audience": "Independent mobile dog groomers",
                            "problem": "No-shows and double bookings cost groomers income",
                        },
                    },
                }
            ]
        }
    }


class RefineIdeaRequest(BaseModel):
    """Request to refine a free-form idea description."""
    idea: str = Field(..., description="Idea description, at most 500 characters")
