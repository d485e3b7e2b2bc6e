"""
Rule Catalog - Static Lookup Tables for Document Tagging

Holds every table the tagging pipeline reads:
- File extension sets per document type
- Project keyword rules (checked in order, first match wins)
- Tag keyword rules with display metadata
- Simulated content templates keyed by file name fragments

The catalog is built once per process and never mutated. Adding a tag rule
is a data change only: append a TagRule to TAG_RULES.
"""

import re
from typing import Dict, List, Tuple
from dataclasses import dataclass, field
from enum import Enum


class CatalogError(ValueError):
    """Raised when rule tables are misconfigured."""


# ============================================================================
# Labels
# ============================================================================

class DocumentType(Enum):
    """Document type labels inferred from the file extension."""
    PDF = "PDF"
    WORD = "Word"
    EXCEL = "Excel"
    POWERPOINT = "PowerPoint"
    IMAGE = "Image"
    TEXT = "Text"
    OTHER = "Other"


class TagCategory(Enum):
    """Semantic category of a tag suggestion."""
    PRIORITY = "priority"
    STATUS = "status"
    CATEGORY = "category"
    DOCUMENT_TYPE = "document_type"
    SECURITY = "security"
    CONTEXT = "context"


# ============================================================================
# Rule Records
# ============================================================================

def make_tag_id(name: str) -> str:
    """'Review Required' -> 'review_required'."""
    return re.sub(r"\s+", "_", name.strip().lower())


@dataclass(frozen=True)
class ProjectRule:
    """Keyword rule assigning a document to a project."""
    name: str
    keywords: Tuple[str, ...]


@dataclass(frozen=True)
class TagRule:
    """Keyword rule producing a tag suggestion."""
    name: str
    category: TagCategory
    color: str
    keywords: Tuple[str, ...]
    tag_id: str = ""

    def __post_init__(self):
        if not self.tag_id:
            # frozen dataclass: bypass __setattr__ for the derived default
            object.__setattr__(self, "tag_id", make_tag_id(self.name))


# ============================================================================
# Default Tables
# ============================================================================

DOCUMENT_TYPE_EXTENSIONS: Dict[DocumentType, Tuple[str, ...]] = {
    DocumentType.PDF: (".pdf",),
    DocumentType.WORD: (".doc", ".docx"),
    DocumentType.EXCEL: (".xls", ".xlsx", ".csv"),
    DocumentType.POWERPOINT: (".ppt", ".pptx"),
    DocumentType.IMAGE: (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg"),
    DocumentType.TEXT: (".txt", ".md", ".rtf"),
}

PROJECT_RULES: Tuple[ProjectRule, ...] = (
    ProjectRule("Project Alpha", ("alpha", "development", "phase1", "initial")),
    ProjectRule("Project Beta", ("beta", "research", "analysis", "study")),
    ProjectRule("Administrative", ("admin", "policy", "procedure", "hr", "finance")),
    ProjectRule("Client Work", ("client", "customer", "proposal", "contract")),
    ProjectRule("Documentation", ("manual", "guide", "specification", "requirements")),
)

TAG_RULES: Tuple[TagRule, ...] = (
    TagRule(
        name="Important",
        category=TagCategory.PRIORITY,
        color="#ff6b6b",
        keywords=("urgent", "critical", "important", "priority", "deadline"),
    ),
    TagRule(
        name="Review Required",
        category=TagCategory.STATUS,
        color="#ffd93d",
        keywords=("review", "check", "verify", "approve", "draft"),
    ),
    TagRule(
        name="Financial",
        category=TagCategory.CATEGORY,
        color="#4ecdc4",
        keywords=("budget", "cost", "expense", "invoice", "payment", "financial"),
    ),
    TagRule(
        name="Legal",
        category=TagCategory.CATEGORY,
        color="#45b7d1",
        keywords=("contract", "agreement", "legal", "compliance", "terms"),
    ),
    TagRule(
        name="Technical",
        category=TagCategory.CATEGORY,
        color="#96ceb4",
        keywords=("technical", "specification", "architecture", "design", "implementation"),
    ),
    TagRule(
        name="Meeting Notes",
        category=TagCategory.DOCUMENT_TYPE,
        color="#feca57",
        keywords=("meeting", "notes", "minutes", "discussion", "agenda"),
    ),
    TagRule(
        name="Report",
        category=TagCategory.DOCUMENT_TYPE,
        color="#ff9ff3",
        keywords=("report", "summary", "analysis", "findings", "results"),
    ),
    TagRule(
        name="Confidential",
        category=TagCategory.SECURITY,
        color="#fd79a8",
        keywords=("confidential", "private", "sensitive", "restricted", "internal"),
    ),
)

# Checked in order; the first key found in the lower-cased file name wins
CONTENT_TEMPLATES: Tuple[Tuple[str, str], ...] = (
    ("contract", "This agreement is entered into between the parties for the "
                 "provision of services. Terms and conditions apply. Payment "
                 "due within 30 days."),
    ("report", "Executive Summary: This report presents findings from our "
               "quarterly analysis. Key metrics show improvement in "
               "performance indicators."),
    ("meeting", "Meeting Minutes: Attendees discussed project timeline and "
                "deliverables. Action items assigned to team members."),
    ("proposal", "Project Proposal: We propose to implement a comprehensive "
                 "solution that addresses the client requirements and "
                 "objectives."),
    ("invoice", "Invoice for services rendered. Amount due: $5,000. Net 30 "
                "days from receipt. Thank you for your business."),
    ("specification", "Technical Specification Document: System requirements, "
                      "architecture overview, and implementation guidelines."),
    ("manual", "User Manual: Step-by-step instructions for system operation. "
               "Please follow safety guidelines and procedures."),
    ("policy", "Company Policy: This document outlines procedures and "
               "guidelines for employee conduct and organizational standards."),
)

DEFAULT_CONTENT = (
    "Document content analysis in progress. This file contains structured "
    "information relevant to business operations and documentation requirements."
)


# ============================================================================
# Catalog
# ============================================================================

def _check_keywords(owner: str, keywords: Tuple[str, ...]) -> None:
    if not keywords:
        raise CatalogError(f"Rule '{owner}' has no keywords")
    for keyword in keywords:
        if not keyword or not keyword.strip():
            raise CatalogError(f"Rule '{owner}' has a blank keyword")
        if keyword != keyword.lower():
            raise CatalogError(f"Rule '{owner}' keyword '{keyword}' is not lower-case")


@dataclass(frozen=True)
class RuleCatalog:
    """
    Immutable bundle of the rule tables.

    Build custom catalogs for tests or alternate deployments by passing
    tables explicitly; call validate() to check them.
    """
    document_type_extensions: Dict[DocumentType, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DOCUMENT_TYPE_EXTENSIONS)
    )
    project_rules: Tuple[ProjectRule, ...] = PROJECT_RULES
    tag_rules: Tuple[TagRule, ...] = TAG_RULES
    content_templates: Tuple[Tuple[str, str], ...] = CONTENT_TEMPLATES
    default_content: str = DEFAULT_CONTENT

    def validate(self) -> "RuleCatalog":
        """
        Check the catalog invariants.

        Raises:
            CatalogError: on duplicate extensions, empty or non-lower-case
                keywords, or duplicate tag ids
        """
        owners: Dict[str, DocumentType] = {}
        for doc_type, extensions in self.document_type_extensions.items():
            if doc_type == DocumentType.OTHER:
                raise CatalogError("'Other' is the fallback label and takes no extensions")
            for ext in extensions:
                if not ext.startswith(".") or ext != ext.lower():
                    raise CatalogError(
                        f"Extension '{ext}' for {doc_type.value} must be lower-case with a leading dot"
                    )
                if ext in owners:
                    raise CatalogError(
                        f"Extension '{ext}' is mapped to both "
                        f"{owners[ext].value} and {doc_type.value}"
                    )
                owners[ext] = doc_type

        for project in self.project_rules:
            _check_keywords(project.name, project.keywords)

        seen_ids: List[str] = []
        for rule in self.tag_rules:
            _check_keywords(rule.name, rule.keywords)
            if rule.tag_id in seen_ids:
                raise CatalogError(f"Duplicate tag id '{rule.tag_id}'")
            seen_ids.append(rule.tag_id)

        for key, _ in self.content_templates:
            if not key or key != key.lower():
                raise CatalogError(f"Content template key '{key}' must be non-empty lower-case")

        return self

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "document_types": {
                doc_type.value: list(exts)
                for doc_type, exts in self.document_type_extensions.items()
            },
            "projects": [
                {"name": p.name, "keywords": list(p.keywords)}
                for p in self.project_rules
            ],
            "tags": [
                {
                    "id": r.tag_id,
                    "name": r.name,
                    "type": r.category.value,
                    "color": r.color,
                    "keywords": list(r.keywords),
                }
                for r in self.tag_rules
            ],
        }


DEFAULT_CATALOG = RuleCatalog().validate()
