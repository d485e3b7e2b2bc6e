"""
Document Classifier Node - Document Type, Project and Tag Suggestions

Pure keyword matching against the Rule Catalog:

- Document type: looked up from the file extension, "Other" when unknown
- Project: first project rule (in catalog order) with any keyword hit
- Tags: every tag rule with a keyword hit, ranked by confidence

Confidence for a rule is matched-keyword-count / total-keyword-count,
clamped to 1.0. Keywords are matched as substrings of the corpus, the
lower-cased file name and content joined by a space.
"""

import time
import logging
from pathlib import PurePath
from typing import List, Dict, Any, Optional, Sequence, Tuple
from dataclasses import dataclass

from state import AnalysisState, TagRecord
from nodes.catalog import (
    DocumentType,
    TagCategory,
    RuleCatalog,
    TagRule,
    DEFAULT_CATALOG,
)

logger = logging.getLogger(__name__)

# Tag suggestions kept after ranking on a first-pass analysis
MAX_TAG_SUGGESTIONS = 5


# ============================================================================
# Suggestion Records
# ============================================================================

@dataclass(frozen=True)
class Evidence:
    """Confidence and human-readable justification shared by all suggestions."""
    confidence: float  # 0.0 to 1.0
    rationale: str

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence {self.confidence} outside [0, 1]")


@dataclass(frozen=True)
class TagSuggestion:
    """A suggested tag for the document."""
    tag_id: str
    name: str
    category: TagCategory
    color: str
    evidence: Evidence

    @property
    def confidence(self) -> float:
        return self.evidence.confidence

    @property
    def rationale(self) -> str:
        return self.evidence.rationale

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.tag_id,
            "name": self.name,
            "type": self.category.value,
            "color": self.color,
            "confidence": round(self.confidence, 4),
            "reason": self.rationale,
        }


@dataclass(frozen=True)
class ProjectSuggestion:
    """A suggested project assignment."""
    name: str
    evidence: Evidence

    @property
    def confidence(self) -> float:
        return self.evidence.confidence

    @property
    def rationale(self) -> str:
        return self.evidence.rationale

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "confidence": round(self.confidence, 4),
            "reason": self.rationale,
        }


@dataclass(frozen=True)
class DocumentTypeSuggestion:
    """The document type inferred from the file extension."""
    document_type: DocumentType
    extension: str
    evidence: Evidence

    @property
    def confidence(self) -> float:
        return self.evidence.confidence

    @property
    def rationale(self) -> str:
        return self.evidence.rationale

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.document_type.value,
            "extension": self.extension,
            "confidence": round(self.confidence, 4),
            "reason": self.rationale,
        }


# ============================================================================
# Document Type
# ============================================================================

def detect_extension(file_name: str) -> str:
    """Return the lowercase file extension including the dot, e.g. '.pdf'."""
    try:
        return PurePath(file_name or "").suffix.lower()
    except (TypeError, ValueError):
        return ""


def identify_document_type(
    extension: str,
    catalog: RuleCatalog = DEFAULT_CATALOG,
) -> DocumentType:
    """
    Map an extension to a document type label.

    Returns the first label whose extension set contains `extension`,
    or DocumentType.OTHER. Never raises.
    """
    ext = (extension or "").lower()
    if not ext:
        return DocumentType.OTHER
    for doc_type, extensions in catalog.document_type_extensions.items():
        if ext in extensions:
            return doc_type
    return DocumentType.OTHER


def suggest_document_type(
    file_name: str,
    catalog: RuleCatalog = DEFAULT_CATALOG,
) -> DocumentTypeSuggestion:
    """Document type decision as a suggestion record."""
    extension = detect_extension(file_name)
    doc_type = identify_document_type(extension, catalog)
    if doc_type == DocumentType.OTHER:
        reason = (
            f"Unrecognized extension '{extension}'" if extension
            else "File name has no extension"
        )
        return DocumentTypeSuggestion(doc_type, extension, Evidence(0.0, reason))
    return DocumentTypeSuggestion(
        doc_type,
        extension,
        Evidence(1.0, f"File extension {extension}"),
    )


# ============================================================================
# Keyword Matching
# ============================================================================

def build_corpus(file_name: str, content: str) -> str:
    """Lower-cased matching surface; empty when both inputs are empty."""
    file_name = file_name or ""
    content = content or ""
    if not file_name and not content:
        return ""
    return f"{file_name} {content}".lower()


def match_keywords(corpus: str, keywords: Sequence[str]) -> List[str]:
    """Keywords found in the corpus, in rule order."""
    if not corpus:
        return []
    return [kw for kw in keywords if kw in corpus]


def keyword_confidence(matched: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return min(matched / total, 1.0)


def identify_project(
    file_name: str,
    content: str,
    catalog: RuleCatalog = DEFAULT_CATALOG,
) -> Optional[ProjectSuggestion]:
    """
    Suggest a project for the document.

    First match wins: rules are checked in catalog order and the first one
    with at least one keyword hit is returned, even if a later rule would
    match more keywords.

    Returns:
        ProjectSuggestion, or None when no rule matches
    """
    corpus = build_corpus(file_name, content)
    for project in catalog.project_rules:
        matched = match_keywords(corpus, project.keywords)
        if matched:
            return ProjectSuggestion(
                name=project.name,
                evidence=Evidence(
                    confidence=keyword_confidence(len(matched), len(project.keywords)),
                    rationale=f"Matched keywords: {', '.join(matched)}",
                ),
            )
    return None


def _tag_suggestion(rule: TagRule, matched: List[str]) -> TagSuggestion:
    return TagSuggestion(
        tag_id=rule.tag_id,
        name=rule.name,
        category=rule.category,
        color=rule.color,
        evidence=Evidence(
            confidence=keyword_confidence(len(matched), len(rule.keywords)),
            rationale=f"Matched keywords: {', '.join(matched)}",
        ),
    )


def rank_suggestions(suggestions: Sequence[TagSuggestion]) -> List[TagSuggestion]:
    """Sort by confidence, highest first. Equal confidences keep their order."""
    # sorted() is stable, including with reverse=True
    return sorted(suggestions, key=lambda s: s.confidence, reverse=True)


def generate_tag_suggestions(
    file_name: str,
    content: str,
    catalog: RuleCatalog = DEFAULT_CATALOG,
    limit: int = MAX_TAG_SUGGESTIONS,
) -> List[TagSuggestion]:
    """
    Suggest tags for the document.

    Every tag rule with at least one keyword hit produces a suggestion.
    Results are ranked by confidence (ties keep catalog order) and
    truncated to `limit`.
    """
    corpus = build_corpus(file_name, content)
    suggestions: List[TagSuggestion] = []
    for rule in catalog.tag_rules:
        matched = match_keywords(corpus, rule.keywords)
        if matched:
            suggestions.append(_tag_suggestion(rule, matched))
    return rank_suggestions(suggestions)[:limit]


def filter_existing_tags(
    suggestions: Sequence[TagSuggestion],
    existing_tags: Optional[Sequence[TagRecord]],
) -> List[TagSuggestion]:
    """Drop suggestions whose name is already on the document (case-insensitive)."""
    existing = {
        (tag.get("name") or "").lower()
        for tag in (existing_tags or [])
        if isinstance(tag, dict)
    }
    return [s for s in suggestions if s.name.lower() not in existing]


def classify(
    file_name: str,
    content: str,
    catalog: RuleCatalog = DEFAULT_CATALOG,
    limit: int = MAX_TAG_SUGGESTIONS,
) -> Tuple[DocumentTypeSuggestion, Optional[ProjectSuggestion], List[TagSuggestion]]:
    """Run all three classifiers over one document."""
    return (
        suggest_document_type(file_name, catalog),
        identify_project(file_name, content, catalog),
        generate_tag_suggestions(file_name, content, catalog, limit),
    )


# ============================================================================
# Main Node Function
# ============================================================================

def classifier_node(
    state: AnalysisState,
    catalog: Optional[RuleCatalog] = None,
) -> dict:
    """
    Node B: Classifier

    Reads the file name and resolved content, produces the document type,
    project and ranked tag suggestions.
    """
    catalog = catalog or DEFAULT_CATALOG
    start_time = time.time()

    file_name = state.get("file_name", "")
    content = state.get("resolved_content", "")
    limit = state.get("max_tag_suggestions", MAX_TAG_SUGGESTIONS)

    doc_type, project, tags = classify(file_name, content, catalog, limit)

    elapsed_ms = (time.time() - start_time) * 1000
    logger.debug(
        f"Classified {file_name!r} as {doc_type.document_type.value}, "
        f"project={project.name if project else None}, "
        f"{len(tags)} tag(s) in {elapsed_ms:.2f}ms"
    )

    return {
        "document_type": doc_type,
        "suggested_project": project,
        "suggested_tags": tags,
    }
