"""Shared helpers for research collaborators."""

import math
from typing import Any, Sequence, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from ivalidate.config.settings import Settings
from ivalidate.errors import ParseError
from ivalidate.extraction import ExtractionResult, FieldSpec, require_structured
from ivalidate.llm import GenerativeTextProvider, generate_with_retry, render_idea_prompt
from ivalidate.models.validation import RefinedIdea

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def as_float(value: Any, default: float) -> float:
    """Coerce provider numbers that may arrive as strings.

    NaN and infinities (which ``json.loads`` accepts) fall back to ``default``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip().rstrip("%").replace(",", "")
    elif not isinstance(value, (int, float)):
        return default
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return default
    return number if math.isfinite(number) else default


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def clamp_score(data: dict[str, Any], key: str, default: int = 0) -> None:
    """Coerce ``data[key]`` to an int score in [0, 100]."""
    data[key] = int(round(clamp(as_float(data.get(key), default), 0, 100)))


def dict_items(value: Any, key: str | None = None) -> list[dict]:
    """Keep dict entries of a list; bare strings become ``{key: text}``."""
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if isinstance(item, dict):
            items.append(item)
        elif key and isinstance(item, str) and item.strip():
            items.append({key: item.strip()})
    return items


def string_items(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if isinstance(item, (str, int, float)) and str(item).strip()]


def log_extraction(context: str, result: ExtractionResult, **extra) -> None:
    """Record which recovery strategy produced a record."""
    log = logger.info if result.confidence >= 0.9 else logger.warning
    log(
        f"{context}_extracted",
        strategy=result.strategy.value,
        confidence=result.confidence,
        recovered_fields=len(result.recovered_fields),
        failures=[f.reason for f in result.failures],
        **extra,
    )


def validate_payload(model: type[ModelT], data: dict[str, Any], context: str) -> ModelT:
    """Build a typed payload, turning schema errors into ParseError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"{context}_schema_invalid", errors=e.error_count())
        raise ParseError(f"{context} response did not match the expected schema: {e}") from e


async def generate_structured(
    template: str,
    idea: RefinedIdea,
    provider: GenerativeTextProvider,
    fields: Sequence[FieldSpec],
    required: Sequence[str],
    context: str,
    settings: Settings | None = None,
) -> ExtractionResult:
    """Render, generate and recover a record that must carry its required keys.

    Raises:
        ServiceUnavailableError: Provider overload outlasted the retry budget.
        ParseError: No usable structure could be recovered.
    """
    prompt = render_idea_prompt(template, idea)
    text = await generate_with_retry(provider, prompt, context=context, settings=settings)
    try:
        result = require_structured(text, fields, required=required, accept_partial=True)
    except ParseError as e:
        logger.error(f"{context}_parse_failed", error=str(e), failures=[f.reason for f in e.failures])
        raise
    log_extraction(context, result)
    return result
