"""
Validate Routes

Start and poll validation runs, then fetch their results or debug traces.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from ivalidate.api.deps import get_provider, get_source, get_store
from ivalidate.api.schemas import (
    DebugSummaryResponse,
    StartValidationRequest,
    StartValidationResponse,
    ValidationResultsResponse,
)
from ivalidate.config.settings import Settings, get_settings
from ivalidate.errors import PreconditionError
from ivalidate.llm import GenerativeTextProvider
from ivalidate.models.enums import ValidationStatus
from ivalidate.models.validation import ValidationRecord, ValidationTrigger
from ivalidate.pipeline import (
    ProgressSnapshot,
    build_progress,
    create_validation,
    run_validation_pipeline,
    summarize_debug_entries,
)
from ivalidate.pipeline.progress import estimate_minutes_remaining
from ivalidate.scoring import format_score_insights
from ivalidate.sources import DiscussionSource
from ivalidate.storage import RecordStore, generate_id

router = APIRouter(prefix="/validate")


async def _load_record(store: RecordStore, validation_id: str) -> ValidationRecord:
    try:
        record = await store.load_validation(validation_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if record is None:
        raise HTTPException(status_code=404, detail=f"No validation found with ID: {validation_id}")
    return record


@router.post("/start", response_model=StartValidationResponse)
async def start_validation_run(
    request: StartValidationRequest,
    background_tasks: BackgroundTasks,
    store: RecordStore = Depends(get_store),
    provider: GenerativeTextProvider = Depends(get_provider),
    source: DiscussionSource = Depends(get_source),
    settings: Settings = Depends(get_settings),
) -> StartValidationResponse:
    """
    Start validating an idea.

    The pipeline runs in the background. Poll /validate/status/{id}
    with the returned validation_id.
    """
    if request.idea.refined_idea is None:
        raise PreconditionError(
            "Refined idea data is required. Call /refine-idea first and submit its result."
        )

    validation_id = request.validation_id or generate_id()
    if await store.load_validation(validation_id) is not None:
        raise HTTPException(status_code=409, detail=f"Validation already exists: {validation_id}")

    trigger = ValidationTrigger(
        id=validation_id,
        idea_description=request.idea.description,
        refined_idea=request.idea.refined_idea,
    )
    await create_validation(trigger, store)

    background_tasks.add_task(run_validation_pipeline, trigger, store, provider, source, settings)

    return StartValidationResponse(
        validation_id=validation_id,
        status=ValidationStatus.PENDING,
        estimated_time=estimate_minutes_remaining(0),
    )


@router.get("/status/{validation_id}", response_model=ProgressSnapshot)
async def get_validation_status(
    validation_id: str,
    store: RecordStore = Depends(get_store),
) -> ProgressSnapshot:
    """Progress of a run, read straight from its stored record."""
    record = await _load_record(store, validation_id)
    return build_progress(record)


@router.get("/results/{validation_id}", response_model=ValidationResultsResponse)
async def get_validation_results(
    validation_id: str,
    store: RecordStore = Depends(get_store),
) -> ValidationResultsResponse:
    """Full results of a completed run."""
    record = await _load_record(store, validation_id)

    if record.status != ValidationStatus.COMPLETED or record.final_score is None:
        raise HTTPException(
            status_code=409,
            detail=(
                f"Validation is still {record.status.value.lower()}. "
                f"Current progress: {record.progress}%"
            ),
        )

    return ValidationResultsResponse(
        validation_id=record.id,
        status=record.status,
        idea=record.idea,
        created_at=record.created_at,
        completed_at=record.completed_at,
        score=record.final_score,
        insights=format_score_insights(record.final_score),
        total_data_points=record.total_data_points or 0,
        competitor_data=record.competitor_data,
        market_size_data=record.market_size_data,
        scalability_data=record.scalability_data,
        moat_data=record.moat_data,
        uniqueness_data=record.uniqueness_data,
        discussion_data=record.discussion_data,
        analysis=record.analysis,
        evidence_report=record.evidence_report,
        formatted_report=record.formatted_report,
    )


@router.get("/debug/{validation_id}", response_model=DebugSummaryResponse)
async def get_validation_debug(
    validation_id: str,
    raw: bool = Query(False, description="Include the raw log entries"),
    store: RecordStore = Depends(get_store),
) -> DebugSummaryResponse:
    """
    Keyword generation and discussion search traces of a run.

    Shows what the AI was asked, what it answered and what each search
    probe returned.
    """
    await _load_record(store, validation_id)
    entries = await store.load_debug_entries(validation_id)
    summary = DebugSummaryResponse(**summarize_debug_entries(validation_id, entries))
    if raw:
        summary.entries = entries
    return summary
