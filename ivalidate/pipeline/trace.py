"""
Debug traces for the AI-driven steps.

The keyword and discussion-search steps record what they were given and
what came back, so a run with surprising results can be inspected after
the fact without rerunning it.
"""

from typing import Any, Optional

from ivalidate.models.evidence import DiscussionInsight
from ivalidate.models.research import KeywordPlan
from ivalidate.models.validation import RefinedIdea
from ivalidate.storage import to_jsonable

KEYWORD_TRACE_STEP = "keyword_generation"
SEARCH_TRACE_STEP = "discussion_search"


def keyword_trace(idea: RefinedIdea, plan: Optional[KeywordPlan] = None) -> dict[str, Any]:
    """Inputs and outcome of keyword generation; empty lists when it failed."""
    return {
        "refined_idea_input": to_jsonable(idea),
        "ai_response": {
            "recommended_communities": to_jsonable(plan.recommended_communities) if plan else [],
            "search_keywords": list(plan.search_keywords) if plan else [],
            "focus_queries": list(plan.focus_queries) if plan else [],
            "pain_point_queries": list(plan.pain_point_queries) if plan else [],
        },
    }


def search_trace(
    plan: KeywordPlan,
    queries: list[str],
    insight: Optional[DiscussionInsight] = None,
) -> dict[str, Any]:
    """Inputs, per-probe outcomes and analysis summary of the discussion search."""
    trace: dict[str, Any] = {
        "input_keywords": list(plan.search_keywords),
        "target_communities": plan.community_names,
        "search_queries": list(queries),
        "search_results": [],
        "total_mentions": 0,
        "frustrated_users": 0,
    }
    if insight is None:
        return trace

    metrics = insight.metrics
    trace.update({
        "search_results": to_jsonable(insight.probes),
        "total_mentions": metrics.total_mentions,
        "frustrated_users": metrics.frustrated_users,
        "ai_analysis": {
            "total_posts_analyzed": insight.posts_collected,
            "relevant_quotes_found": metrics.total_mentions,
            "overall_sentiment": metrics.overall_sentiment,
            "frustration_level": metrics.frustration_level,
            "key_insights": list(metrics.key_insights),
        },
    })
    return trace


def _preview(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    preview = {}
    for key, value in data.items():
        if isinstance(value, list):
            preview[key] = f"Array({len(value)})"
        elif isinstance(value, dict):
            preview[key] = f"Object({len(value)} keys)"
        else:
            preview[key] = value
    return preview


def summarize_debug_entries(validation_id: str, entries: list[dict]) -> dict[str, Any]:
    """Condensed view of a debug log: one preview line per entry plus the two AI traces."""

    def latest(step: str) -> Optional[dict]:
        matches = [e for e in entries if e.get("step") == step]
        return matches[-1] if matches else None

    return {
        "validation_id": validation_id,
        "total_steps": len(entries),
        "steps": [
            {
                "step": entry.get("step"),
                "timestamp": entry.get("timestamp"),
                "success": bool(entry.get("success")),
                "error": entry.get("error"),
                "data_preview": _preview(entry.get("data")),
            }
            for entry in entries
        ],
        "keyword_step": latest(KEYWORD_TRACE_STEP),
        "search_step": latest(SEARCH_TRACE_STEP),
    }
