"""
Tagging Engine - Async Boundary for Document Analysis

The UI/state layer calls into the engine through four operations:

- analyze(file, metadata): first-pass analysis of an uploaded file
- reanalyze(document): fresh pass plus contextual suggestions
- batch_reanalyze(documents): sequential re-analysis, failures isolated
- record_feedback(document_id, accepted, rejected): stubbed learning signal

Analysis latency is simulated with a single awaited sleep at this boundary;
the pipeline itself is synchronous and holds no state between calls.
"""

import os
import asyncio
import logging
from typing import List, Dict, Any, Optional, Sequence, Mapping, Callable, Awaitable
from dataclasses import dataclass

from state import AnalysisState, DocumentSnapshot
from main import build_graph
from nodes.catalog import RuleCatalog, DEFAULT_CATALOG
from nodes.resolver import PREVIEW_LENGTH
from nodes.classifier import MAX_TAG_SUGGESTIONS, TagSuggestion, filter_existing_tags
from nodes.aggregator import AnalysisResult
from nodes.enhancer import REANALYSIS_TAG_LIMIT
from nodes.feedback import FeedbackResult, SuggestionCount, record_feedback

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """Raised when a document cannot be analyzed."""


# ============================================================================
# Engine Configuration
# ============================================================================

@dataclass
class EngineConfig:
    """Configuration for the tagging engine."""

    # Simulated processing time, in seconds
    analysis_latency: float = 1.5
    reanalysis_latency: float = 1.0

    # Output shaping
    preview_length: int = PREVIEW_LENGTH
    max_tag_suggestions: int = MAX_TAG_SUGGESTIONS
    max_reanalysis_suggestions: int = REANALYSIS_TAG_LIMIT

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build configuration from TAGGING_* environment variables."""
        return cls(
            analysis_latency=float(os.getenv("TAGGING_ANALYSIS_LATENCY", "1.5")),
            reanalysis_latency=float(os.getenv("TAGGING_REANALYSIS_LATENCY", "1.0")),
            preview_length=int(os.getenv("TAGGING_PREVIEW_LENGTH", str(PREVIEW_LENGTH))),
        )


# ============================================================================
# Batch Outcome
# ============================================================================

@dataclass
class BatchOutcome:
    """Per-document result of a batch re-analysis."""
    document_id: Optional[str]
    success: bool
    analysis: Optional[AnalysisResult] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "document_id": self.document_id,
            "success": self.success,
        }
        if self.success and self.analysis is not None:
            result["analysis"] = self.analysis.to_dict()
        else:
            result["error"] = self.error
        return result


def _snapshot(document: Any) -> Mapping:
    if not isinstance(document, Mapping):
        raise AnalysisError(f"Expected a document mapping, got {type(document).__name__}")
    return document


def _file_name(source: Any) -> str:
    """Read `name` from a mapping or an object exposing it."""
    if isinstance(source, Mapping):
        name = source.get("name")
    else:
        name = getattr(source, "name", None)
    if not isinstance(name, str):
        raise AnalysisError(f"Document has no file name: {source!r}")
    return name


# ============================================================================
# Engine
# ============================================================================

class TaggingEngine:
    """
    Stateless document tagging engine.

    One instance per process is enough; every call builds its result from
    the inputs and the read-only rule catalog.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        catalog: Optional[RuleCatalog] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.config = config or EngineConfig()
        self.catalog = catalog or DEFAULT_CATALOG
        self._sleep = sleep
        self._graph = build_graph(self.catalog)

    def run_pass(
        self,
        file_name: str,
        content: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        existing_tags: Optional[List[Dict[str, Any]]] = None,
        is_reanalysis: bool = False,
    ) -> AnalysisResult:
        """Run one synchronous pass through the analysis pipeline."""
        state: AnalysisState = {
            "file_name": file_name,
            "content": content,
            "metadata": dict(metadata or {}),
            "existing_tags": list(existing_tags or []),
            "is_reanalysis": is_reanalysis,
            "preview_length": self.config.preview_length,
            "max_tag_suggestions": self.config.max_tag_suggestions,
            "max_reanalysis_suggestions": self.config.max_reanalysis_suggestions,
        }
        final_state = self._graph.invoke(state)
        return final_state["result"]

    async def analyze(
        self,
        file_descriptor: Any,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AnalysisResult:
        """
        Analyze an uploaded file.

        Args:
            file_descriptor: Mapping or object exposing `name`
            metadata: Caller metadata merged into the result

        Raises:
            AnalysisError: If the descriptor has no string `name`
        """
        file_name = _file_name(file_descriptor)
        await self._sleep(self.config.analysis_latency)

        result = self.run_pass(file_name, metadata=metadata)
        logger.info(
            f"Analyzed {file_name}: {result.suggested_document_type}, "
            f"{len(result.suggested_tags)} tag(s), {result.overall_confidence}% confidence"
        )
        return result

    async def reanalyze(self, document: DocumentSnapshot) -> AnalysisResult:
        """
        Re-analyze a document from scratch, adding contextual suggestions.

        Raises:
            AnalysisError: If the snapshot has no string `name`
        """
        document = _snapshot(document)
        file_name = _file_name(document)
        await self._sleep(self.config.reanalysis_latency)

        result = self.run_pass(
            file_name,
            content=document.get("content"),
            existing_tags=document.get("tags"),
            is_reanalysis=True,
        )
        logger.info(
            f"Re-analyzed {file_name}: {len(result.suggested_tags)} tag(s), "
            f"{result.overall_confidence}% confidence"
        )
        return result

    async def batch_reanalyze(
        self,
        documents: Sequence[DocumentSnapshot],
    ) -> List[BatchOutcome]:
        """
        Re-analyze documents one at a time, in order.

        A failure on one document is recorded in its outcome and does not
        stop the batch.
        """
        outcomes: List[BatchOutcome] = []

        for document in documents:
            document_id = document.get("id") if isinstance(document, Mapping) else None
            try:
                analysis = await self.reanalyze(document)
                outcomes.append(BatchOutcome(document_id, True, analysis=analysis))
            except Exception as e:
                logger.warning(f"Re-analysis failed for document {document_id}: {e}")
                outcomes.append(BatchOutcome(document_id, False, error=str(e)))

        succeeded = sum(1 for o in outcomes if o.success)
        logger.info(f"Batch re-analysis: {succeeded}/{len(outcomes)} succeeded")
        return outcomes

    async def regenerate_tags(self, document: DocumentSnapshot) -> List[TagSuggestion]:
        """Fresh tag suggestions that are not already on the document."""
        document = _snapshot(document)
        file_name = _file_name(document)
        await self._sleep(self.config.analysis_latency)

        result = self.run_pass(file_name, content=document.get("content"))
        return filter_existing_tags(result.suggested_tags, document.get("tags"))

    async def record_feedback(
        self,
        document_id: str,
        accepted: SuggestionCount,
        rejected: SuggestionCount,
    ) -> FeedbackResult:
        """Report accepted/rejected suggestions; does not change future output."""
        return record_feedback(document_id, accepted, rejected)
