"""Generative-text provider client, retries and prompt rendering."""

from .client import (
    GenerativeTextProvider,
    LLMSettings,
    OllamaTextProvider,
    create_llm_client,
    is_overload_error,
)
from .prompting import render_idea_prompt, render_prompt
from .retry import generate_with_retry

__all__ = [
    "GenerativeTextProvider",
    "LLMSettings",
    "OllamaTextProvider",
    "create_llm_client",
    "is_overload_error",
    "generate_with_retry",
    "render_prompt",
    "render_idea_prompt",
]
