"""Turn a free-form idea description into the refined idea triple."""

import structlog

from ivalidate.config.prompts import REFINE_IDEA_PROMPT
from ivalidate.config.settings import Settings
from ivalidate.errors import PreconditionError
from ivalidate.extraction import FieldKind, FieldSpec, require_structured
from ivalidate.llm import GenerativeTextProvider, generate_with_retry, render_prompt
from ivalidate.models.validation import RefinedIdea

from .base import log_extraction, validate_payload

logger = structlog.get_logger(__name__)

MAX_IDEA_LENGTH = 500

REFINE_FIELDS = (
    FieldSpec("one_liner", FieldKind.STRING),
    FieldSpec("target_audience", FieldKind.STRING),
    FieldSpec("problem", FieldKind.STRING),
)


async def refine_idea(
    description: str,
    provider: GenerativeTextProvider,
    settings: Settings | None = None,
) -> RefinedIdea:
    """Refine an idea description.

    Raises:
        PreconditionError: Description is empty or longer than MAX_IDEA_LENGTH.
        ParseError: Response lacked one of the three fields.
        ServiceUnavailableError: Provider overload outlasted the retry budget.
    """
    description = (description or "").strip()
    if not description:
        raise PreconditionError("Idea description is required")
    if len(description) > MAX_IDEA_LENGTH:
        raise PreconditionError(f"Idea must be {MAX_IDEA_LENGTH} characters or less")

    prompt = render_prompt(REFINE_IDEA_PROMPT, idea=description)
    text = await generate_with_retry(provider, prompt, context="refine_idea", settings=settings)

    result = require_structured(
        text,
        REFINE_FIELDS,
        required=[f.name for f in REFINE_FIELDS],
        accept_partial=True,
    )
    log_extraction("refine_idea", result)

    refined = validate_payload(
        RefinedIdea,
        {f.name: str(result.data.get(f.name) or "").strip() for f in REFINE_FIELDS},
        context="refine_idea",
    )
    logger.info("idea_refined", one_liner=refined.one_liner)
    return refined
