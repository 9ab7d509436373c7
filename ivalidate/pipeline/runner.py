"""
Validation Runner

Creates validation records and runs pipelines in the background.

Design Decisions:
- The PENDING record (with the full step template) is persisted before
  anything runs, so a client can poll immediately
- Starting a run returns the id, never a handle to the task
- Background tasks are kept referenced until they finish
"""

import asyncio
from typing import Sequence

import structlog

from ivalidate.config.settings import Settings
from ivalidate.llm import GenerativeTextProvider
from ivalidate.models.validation import IdeaInput, ValidationRecord, ValidationTrigger
from ivalidate.sources.discussion import DiscussionSource
from ivalidate.storage import RecordStore

from .orchestrator import PipelineResult, ValidationPipeline
from .steps import DEFAULT_STEP_TEMPLATES, StepBoard, StepTemplate

logger = structlog.get_logger(__name__)

_background_tasks: set[asyncio.Task] = set()


async def create_validation(
    trigger: ValidationTrigger,
    store: RecordStore,
    templates: Sequence[StepTemplate] = DEFAULT_STEP_TEMPLATES,
) -> ValidationRecord:
    """Persist the PENDING record for a new run."""
    record = ValidationRecord(
        id=trigger.id,
        idea=IdeaInput(description=trigger.idea_description, refined=trigger.refined_idea),
        processing_steps=StepBoard(templates).steps,
    )
    await store.save_validation(record)
    logger.info("validation_created", validation_id=trigger.id)
    return record


async def run_validation_pipeline(
    trigger: ValidationTrigger,
    store: RecordStore,
    provider: GenerativeTextProvider,
    source: DiscussionSource,
    settings: Settings | None = None,
    templates: Sequence[StepTemplate] = DEFAULT_STEP_TEMPLATES,
) -> PipelineResult:
    """Run the pipeline for an existing record to completion."""
    pipeline = ValidationPipeline(trigger, store, provider, source, settings=settings, templates=templates)
    return await pipeline.execute()


async def start_validation(
    trigger: ValidationTrigger,
    store: RecordStore,
    provider: GenerativeTextProvider,
    source: DiscussionSource,
    settings: Settings | None = None,
    templates: Sequence[StepTemplate] = DEFAULT_STEP_TEMPLATES,
) -> str:
    """Create the record and run the pipeline as a detached task.

    Returns:
        The run id. Progress is observed through the record store.
    """
    await create_validation(trigger, store, templates)

    task = asyncio.create_task(
        run_validation_pipeline(trigger, store, provider, source, settings, templates),
        name=f"validation-{trigger.id}",
    )
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    logger.info("validation_started", validation_id=trigger.id)
    return trigger.id


def active_runs() -> int:
    """Number of background runs still executing."""
    return sum(1 for task in _background_tasks if not task.done())
