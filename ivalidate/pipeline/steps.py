"""Step templates, step results and the step board."""

from dataclasses import dataclass
from typing import Any, Sequence

from ivalidate.errors import StepTransitionError
from ivalidate.models.enums import StepStatus
from ivalidate.models.validation import StepRecord


@dataclass(frozen=True)
class StepTemplate:
    """Fixed definition of one pipeline step."""

    title: str
    description: str
    target_progress: int


# Competitor and market-size research share the 75 checkpoint
DEFAULT_STEP_TEMPLATES: tuple[StepTemplate, ...] = (
    StepTemplate("Extract Keywords", "AI analyzing your idea to find target communities", 15),
    StepTemplate("Search Discussions", "Searching real user discussions", 35),
    StepTemplate("Analyze Sentiment", "Analyzing user sentiment and frustration", 55),
    StepTemplate("AI Competitor Research", "AI researching competitors and user complaints", 75),
    StepTemplate("AI Market Research", "AI estimating market size and growth", 75),
    StepTemplate("AI Scalability Research", "AI assessing business model scalability", 80),
    StepTemplate("AI Moat Research", "AI evaluating defensibility and moat", 85),
    StepTemplate("AI UVZ Research", "AI identifying the unique value zone", 90),
    StepTemplate("Generate Report", "AI synthesizing the validation analysis", 95),
    StepTemplate("Calculate Scores", "Calculating evidence-based scores", 100),
)


@dataclass
class StepResult:
    """What a step function hands back to the orchestrator."""

    success: bool
    data: Any = None
    data_points: int = 0
    summary: str = ""


_ALLOWED_TRANSITIONS: dict[StepStatus, frozenset[StepStatus]] = {
    StepStatus.PENDING: frozenset({StepStatus.PROCESSING}),
    StepStatus.PROCESSING: frozenset({StepStatus.COMPLETED, StepStatus.FAILED}),
    StepStatus.COMPLETED: frozenset(),
    StepStatus.FAILED: frozenset(),
}


class StepBoard:
    """Owned, 1-indexed list of step records.

    ``transition`` is the only way to change a step, and it enforces
    pending -> processing -> completed|failed with at most one step
    processing at a time.
    """

    def __init__(self, templates: Sequence[StepTemplate] = DEFAULT_STEP_TEMPLATES):
        if not templates:
            raise ValueError("At least one step template is required")
        self._templates = tuple(templates)
        self._records = [
            StepRecord(
                index=i,
                title=t.title,
                description=t.description,
                target_progress=t.target_progress,
            )
            for i, t in enumerate(self._templates, 1)
        ]

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> StepRecord:
        return self._records[self._position(index)].model_copy()

    def template(self, index: int) -> StepTemplate:
        return self._templates[self._position(index)]

    @property
    def steps(self) -> list[StepRecord]:
        """Snapshot copies, safe to persist or hand out."""
        return [record.model_copy() for record in self._records]

    @property
    def processing(self) -> StepRecord | None:
        for record in self._records:
            if record.status == StepStatus.PROCESSING:
                return record.model_copy()
        return None

    def _position(self, index: int) -> int:
        if not 1 <= index <= len(self._records):
            raise StepTransitionError(f"No step with index {index}", step_index=index)
        return index - 1

    def transition(
        self,
        index: int,
        status: StepStatus,
        description: str | None = None,
        data_points: int | None = None,
        error_message: str | None = None,
    ) -> StepRecord:
        """Move a step to a new status.

        Raises:
            StepTransitionError: Unknown index, illegal status change, or a
                second step entering processing.
        """
        record = self._records[self._position(index)]

        if status not in _ALLOWED_TRANSITIONS[record.status]:
            raise StepTransitionError(
                f"Step {index} cannot move from {record.status.value} to {status.value}",
                step_index=index,
            )
        if status == StepStatus.PROCESSING:
            active = self.processing
            if active is not None:
                raise StepTransitionError(
                    f"Step {active.index} is still processing",
                    step_index=index,
                )

        record.status = status
        if description is not None:
            record.description = description
        if data_points is not None:
            record.data_points_found = data_points
        if error_message is not None:
            record.error_message = error_message
        return record.model_copy()
