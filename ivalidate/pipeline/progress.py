"""Progress surface derived from a persisted validation record."""

import math
from datetime import datetime

from pydantic import BaseModel, Field

from ivalidate.models.enums import ValidationStatus
from ivalidate.models.validation import StepRecord, ValidationRecord

# Minutes per remaining percentage point
MINUTES_PER_PERCENT = 0.15


class ProgressSnapshot(BaseModel):
    """What a polling client sees for a run."""

    id: str
    status: ValidationStatus
    progress: int = Field(..., ge=0, le=100)
    current_step: str
    processing_steps: list[StepRecord] = Field(default_factory=list)
    estimated_time_remaining: int | None = Field(None, description="Minutes, while processing")
    error_message: str | None = None
    completed_at: datetime | None = None


def estimate_minutes_remaining(progress: int) -> int:
    return math.ceil((100 - progress) * MINUTES_PER_PERCENT)


def build_progress(record: ValidationRecord) -> ProgressSnapshot:
    """Snapshot of a record for the progress surface."""
    eta = None
    if record.status == ValidationStatus.PROCESSING:
        eta = estimate_minutes_remaining(record.progress)

    return ProgressSnapshot(
        id=record.id,
        status=record.status,
        progress=record.progress,
        current_step=record.current_step,
        processing_steps=record.processing_steps,
        estimated_time_remaining=eta,
        error_message=record.error_message,
        completed_at=record.completed_at,
    )
