"""Render prompt templates."""

from langchain_core.prompts import PromptTemplate

from ivalidate.models.validation import RefinedIdea


def render_prompt(template: str, **variables) -> str:
    """Fill a LangChain-style template ({var}, literal braces as {{ }})."""
    return PromptTemplate.from_template(template).format(**variables)


def render_idea_prompt(template: str, idea: RefinedIdea, **variables) -> str:
    """Render a template that embeds the refined idea triple."""
    return render_prompt(
        template,
        one_liner=idea.one_liner,
        target_audience=idea.target_audience,
        problem=idea.problem,
        **variables,
    )
