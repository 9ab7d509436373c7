"""Research collaborators backed by the generative-text provider."""

from .content_analyzer import analyze_discussions, empty_analysis
from .discussion_search import build_discussion_insight, search_discussions
from .keywords import generate_targeting
from .refine import refine_idea
from .researchers import (
    research_competitors,
    research_market_size,
    research_moat,
    research_scalability,
    research_uniqueness,
)
from .summarizer import analyze_startup

__all__ = [
    "analyze_discussions",
    "empty_analysis",
    "build_discussion_insight",
    "search_discussions",
    "generate_targeting",
    "refine_idea",
    "research_competitors",
    "research_market_size",
    "research_moat",
    "research_scalability",
    "research_uniqueness",
    "analyze_startup",
]
