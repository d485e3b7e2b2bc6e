"""
Contextual Enhancer Node - Re-analysis With Document History

Runs after a fresh classification pass when a document is re-analyzed.
Documents the user has already tagged get one extra "Similar to Previous"
suggestion, and the list cap is relaxed to make room for it.
"""

import logging
from typing import List, Optional, Sequence

from state import AnalysisState, TagRecord
from nodes.catalog import TagCategory
from nodes.classifier import Evidence, TagSuggestion
from nodes.aggregator import AnalysisResult

logger = logging.getLogger(__name__)

# Tag suggestions kept on a re-analysis pass
REANALYSIS_TAG_LIMIT = 6

PREVIOUSLY_TAGGED = TagSuggestion(
    tag_id="previously_tagged",
    name="Similar to Previous",
    category=TagCategory.CONTEXT,
    color="#a8e6cf",
    evidence=Evidence(
        confidence=0.7,
        rationale="Based on your previous tagging patterns",
    ),
)


def enhance_with_context(
    result: AnalysisResult,
    existing_tags: Optional[Sequence[TagRecord]],
    limit: int = REANALYSIS_TAG_LIMIT,
) -> AnalysisResult:
    """
    Add history-based suggestions to a fresh analysis.

    The contextual suggestion is appended after the ranked list rather than
    sorted into it. When the list exceeds `limit`, the lowest-confidence
    entries are dropped first, the contextual suggestion included.

    Returns:
        New AnalysisResult marked as a re-analysis
    """
    ranked: List[TagSuggestion] = list(result.suggested_tags)
    contextual: List[TagSuggestion] = []

    if existing_tags:
        contextual.append(PREVIOUSLY_TAGGED)

    tags = ranked + contextual
    if len(tags) > limit:
        # keep the highest-confidence entries in their listed order
        order = sorted(range(len(tags)), key=lambda i: tags[i].confidence, reverse=True)
        tags = [tags[i] for i in sorted(order[:max(limit, 0)])]

    return result.with_tags(tags, is_reanalysis=True)


# ============================================================================
# Main Node Function
# ============================================================================

def enhancer_node(state: AnalysisState) -> dict:
    """
    Node D: Contextual Enhancer

    Only wired into the graph for re-analysis passes.
    """
    existing = state.get("existing_tags") or []
    limit = state.get("max_reanalysis_suggestions", REANALYSIS_TAG_LIMIT)

    enhanced = enhance_with_context(state["result"], existing, limit)
    if existing:
        logger.debug(f"Added contextual suggestion ({len(existing)} existing tag(s))")

    return {"result": enhanced}
