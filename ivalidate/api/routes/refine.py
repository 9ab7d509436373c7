"""
Refine Route

Turns a free-form idea into the refined triple the pipeline requires.
"""

from fastapi import APIRouter, Depends

from ivalidate.api.deps import get_provider
from ivalidate.api.schemas import RefineIdeaRequest, RefineIdeaResponse
from ivalidate.config.settings import Settings, get_settings
from ivalidate.llm import GenerativeTextProvider
from ivalidate.research import refine_idea

router = APIRouter()


@router.post("/refine-idea", response_model=RefineIdeaResponse)
async def refine_idea_route(
    request: RefineIdeaRequest,
    provider: GenerativeTextProvider = Depends(get_provider),
    settings: Settings = Depends(get_settings),
) -> RefineIdeaResponse:
    """Refine an idea description (at most 500 characters)."""
    refined = await refine_idea(request.idea, provider, settings)
    return RefineIdeaResponse(original_idea=request.idea, refined_idea=refined)
