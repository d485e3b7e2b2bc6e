from typing import TypedDict, List, Dict, Optional, Any

# ============================================================================
# Caller-Owned Records
# ============================================================================

class TagRecord(TypedDict, total=False):
    """
    A tag already applied to a document by the user.
    Only `name` is read by the tagging engine.
    """
    id: str
    name: str
    color: Optional[str]
    type: Optional[str]  # 'priority', 'status', 'category', 'manual', ...


class DocumentSnapshot(TypedDict, total=False):
    """
    A document as held by the UI/state layer.
    The engine only reads this; it never writes back.
    """
    id: str
    name: str  # Original file name, e.g. "Q1_invoice_draft.pdf"
    content: Optional[str]  # Extracted text, resolved from `name` when absent
    tags: List[TagRecord]  # Tags the user has accepted so far
    project: Optional[str]
    type: Optional[str]  # MIME type reported by the browser
    status: Optional[str]  # 'pending_review', 'approved', 'rejected'


# ============================================================================
# Pipeline State
# ============================================================================

class AnalysisState(TypedDict, total=False):
    """
    The state passed between pipeline nodes for one analysis pass.
    Each node returns only the keys it produces.
    """
    # Input
    file_name: str
    content: Optional[str]  # Pre-extracted text; resolved from file_name when None
    metadata: Dict[str, Any]
    existing_tags: List[TagRecord]
    is_reanalysis: bool
    preview_length: int
    max_tag_suggestions: int
    max_reanalysis_suggestions: int

    # Resolver output
    resolved_content: str

    # Classifier output
    document_type: Any  # DocumentTypeSuggestion
    suggested_project: Any  # Optional[ProjectSuggestion]
    suggested_tags: List[Any]  # List[TagSuggestion]

    # Aggregator / enhancer output
    result: Any  # AnalysisResult
