"""
Confidence Aggregator Node - Document-Level Confidence

Folds the per-suggestion confidences into one integer percentage and
assembles the AnalysisResult handed back to the caller.
"""

import math
import logging
from typing import List, Dict, Any, Optional, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from state import AnalysisState
from nodes.classifier import (
    DocumentTypeSuggestion,
    ProjectSuggestion,
    TagSuggestion,
)
from nodes.resolver import preview_content, PREVIEW_LENGTH

logger = logging.getLogger(__name__)

# Returned when there is neither a project nor a tag signal
NEUTRAL_CONFIDENCE = 50


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def aggregate_confidence(
    tags: Optional[Sequence[TagSuggestion]],
    project: Optional[ProjectSuggestion],
) -> int:
    """
    Combine suggestion confidences into an overall percentage.

    The mean tag confidence and the project confidence each count as one
    component when present; the result is the rounded mean of the present
    components, times 100.

    Returns:
        int in 0..100, NEUTRAL_CONFIDENCE when no component is present
    """
    components: List[float] = []

    if tags:
        components.append(sum(t.confidence for t in tags) / len(tags))

    if project is not None:
        components.append(project.confidence)

    if not components:
        return NEUTRAL_CONFIDENCE

    overall = _round_half_up(100 * sum(components) / len(components))
    return max(0, min(100, overall))


# ============================================================================
# Analysis Result
# ============================================================================

@dataclass
class AnalysisResult:
    """Result of one analysis pass over a document."""

    document_type: DocumentTypeSuggestion
    suggested_project: Optional[ProjectSuggestion]
    suggested_tags: List[TagSuggestion]
    extracted_content: str  # Preview of the resolved content
    overall_confidence: int  # 0 to 100

    analyzed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    is_reanalysis: bool = False

    # Caller metadata, merged into the serialized result but not interpreted
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def suggested_document_type(self) -> str:
        return self.document_type.document_type.value

    def with_tags(self, tags: List[TagSuggestion], **changes: Any) -> "AnalysisResult":
        """Copy with a new tag list; the original is left untouched."""
        return replace(self, suggested_tags=list(tags), **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = dict(self.metadata)
        result.update({
            "suggested_document_type": self.suggested_document_type,
            "document_type": self.document_type.to_dict(),
            "suggested_project": (
                self.suggested_project.to_dict() if self.suggested_project else None
            ),
            "suggested_tags": [t.to_dict() for t in self.suggested_tags],
            "extracted_content": self.extracted_content,
            "confidence": self.overall_confidence,
            "analysis_timestamp": self.analyzed_at,
            "is_reanalysis": self.is_reanalysis,
        })
        return result


# ============================================================================
# Main Node Function
# ============================================================================

def aggregator_node(state: AnalysisState) -> dict:
    """
    Node C: Confidence Aggregator

    Scores the classifier output and builds the AnalysisResult.
    """
    tags = state.get("suggested_tags") or []
    project = state.get("suggested_project")
    content = state.get("resolved_content", "")

    result = AnalysisResult(
        document_type=state["document_type"],
        suggested_project=project,
        suggested_tags=list(tags),
        extracted_content=preview_content(
            content, state.get("preview_length", PREVIEW_LENGTH)
        ),
        overall_confidence=aggregate_confidence(tags, project),
        metadata=dict(state.get("metadata") or {}),
    )

    return {"result": result}
