"""Validation pipeline: steps, orchestration, background runs and progress."""

from .orchestrator import PipelineResult, ResearchPayloads, ValidationPipeline
from .progress import ProgressSnapshot, build_progress
from .runner import create_validation, run_validation_pipeline, start_validation
from .steps import DEFAULT_STEP_TEMPLATES, StepBoard, StepResult, StepTemplate
from .trace import summarize_debug_entries

__all__ = [
    "PipelineResult",
    "ResearchPayloads",
    "ValidationPipeline",
    "ProgressSnapshot",
    "build_progress",
    "create_validation",
    "run_validation_pipeline",
    "start_validation",
    "DEFAULT_STEP_TEMPLATES",
    "StepBoard",
    "StepResult",
    "StepTemplate",
    "summarize_debug_entries",
]
