"""
Content Resolver Node - Simulated Text Extraction

Stands in for real text extraction (pdf-parse, mammoth, OCR...). Returns
representative text for a file by matching fragments of its name against
the catalog's content templates.
"""

import logging
from typing import Optional

from state import AnalysisState
from nodes.catalog import RuleCatalog, DEFAULT_CATALOG

logger = logging.getLogger(__name__)

# Characters of content kept in AnalysisResult.extracted_content
PREVIEW_LENGTH = 500
PREVIEW_MARKER = "..."


def resolve_content(file_name: str, catalog: RuleCatalog = DEFAULT_CATALOG) -> str:
    """
    Return template text for a file name.

    Templates are checked in catalog order and the first key contained in
    the lower-cased name wins. Names matching no key get the default text.
    """
    name_lower = (file_name or "").lower()
    for key, text in catalog.content_templates:
        if key in name_lower:
            return text
    return catalog.default_content


def preview_content(content: str, limit: int = PREVIEW_LENGTH) -> str:
    """Cut content to `limit` raw characters, marking the cut."""
    if len(content) <= limit:
        return content
    return content[:limit] + PREVIEW_MARKER


def content_resolver_node(
    state: AnalysisState,
    catalog: Optional[RuleCatalog] = None,
) -> dict:
    """
    Node A: Content Resolver

    Uses pre-extracted content from the state when present, otherwise
    resolves template text from the file name.
    """
    catalog = catalog or DEFAULT_CATALOG
    content = state.get("content")
    if content:
        return {"resolved_content": content}

    file_name = state.get("file_name", "")
    resolved = resolve_content(file_name, catalog)
    logger.debug(f"Resolved content for {file_name!r} ({len(resolved)} chars)")
    return {"resolved_content": resolved}
