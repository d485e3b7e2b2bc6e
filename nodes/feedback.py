"""
Feedback Recorder - Accept/Reject Signal From Suggestion Review

Called once the user finalizes which suggestions they accepted or rejected.
This is a stateless stand-in for model training: it reports a new
confidence baseline but stores nothing and has no effect on later
classification.
"""

import logging
from typing import Any, Dict, Sequence, Union
from dataclasses import dataclass, field
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

BASELINE_CONFIDENCE = 75
BASELINE_STEP = 5
MAX_BASELINE_CONFIDENCE = 95

SuggestionCount = Union[int, Sequence[Any]]


@dataclass
class FeedbackResult:
    """Outcome of recording user feedback on one document."""
    document_id: str
    accepted_count: int
    rejected_count: int
    new_confidence_baseline: int
    model_updated: bool = True
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document_id": self.document_id,
            "accepted": self.accepted_count,
            "rejected": self.rejected_count,
            "model_updated": self.model_updated,
            "new_confidence": self.new_confidence_baseline,
            "timestamp": self.timestamp,
        }


def _count(value: SuggestionCount, label: str) -> int:
    """Accept either a count or the list of suggestions themselves."""
    if isinstance(value, bool):
        raise TypeError(f"{label} must be a count or a sequence, not bool")
    count = value if isinstance(value, int) else len(value)
    if count < 0:
        raise ValueError(f"{label} cannot be negative: {count}")
    return count


def confidence_baseline(accepted_count: int) -> int:
    return min(MAX_BASELINE_CONFIDENCE, BASELINE_CONFIDENCE + accepted_count * BASELINE_STEP)


def record_feedback(
    document_id: str,
    accepted: SuggestionCount,
    rejected: SuggestionCount,
) -> FeedbackResult:
    """
    Record accepted/rejected suggestions for a document.

    Args:
        document_id: The reviewed document
        accepted: Number of accepted suggestions, or the suggestions
        rejected: Number of rejected suggestions, or the suggestions

    Returns:
        FeedbackResult with the updated confidence baseline

    Raises:
        ValueError: If a count is negative
    """
    accepted_count = _count(accepted, "accepted")
    rejected_count = _count(rejected, "rejected")

    result = FeedbackResult(
        document_id=document_id,
        accepted_count=accepted_count,
        rejected_count=rejected_count,
        new_confidence_baseline=confidence_baseline(accepted_count),
    )

    logger.info(
        f"Feedback for document {document_id}: "
        f"{accepted_count} accepted, {rejected_count} rejected "
        f"-> baseline {result.new_confidence_baseline}%"
    )
    return result
