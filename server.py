"""
FastAPI Server for the Document Tagging Engine

Provides endpoints for:
- Analyzing uploaded files (document type, project, tag suggestions)
- Re-analyzing documents with their tagging history
- Batch re-analysis
- Regenerating tag suggestions for a document
- Recording accept/reject feedback
- Inspecting the rule catalog
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Dict, Any, List, Optional
from dotenv import load_dotenv

from state import DocumentSnapshot, TagRecord
from engine import TaggingEngine, EngineConfig, AnalysisError

load_dotenv()

# ============================================================================
# Engine (stateless, one per process)
# ============================================================================

engine = TaggingEngine(EngineConfig.from_env())

# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Document Tagging API",
    description="Document type, project and tag suggestions for uploaded files",
    version="0.1.0",
)

# CORS for React frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Pydantic Models for API
# ============================================================================

class FileDescriptor(BaseModel):
    """What the browser knows about an uploaded file."""
    name: str
    size: Optional[int] = None
    type: Optional[str] = None
    last_modified: Optional[int] = None


class AnalyzeRequest(BaseModel):
    """Request to analyze a newly uploaded file."""
    file: FileDescriptor
    metadata: Dict[str, Any] = {}


class TagModel(BaseModel):
    """A tag already applied to a document."""
    id: Optional[str] = None
    name: str
    color: Optional[str] = None
    type: Optional[str] = None


class DocumentModel(BaseModel):
    """A document snapshot sent for re-analysis."""
    id: str
    name: str
    content: Optional[str] = None
    tags: List[TagModel] = []
    project: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None


class BatchReanalyzeRequest(BaseModel):
    """
    Documents to re-analyze in order.

    Items are left unvalidated so one malformed document fails alone
    instead of rejecting the whole batch.
    """
    documents: List[Any]


class FeedbackRequest(BaseModel):
    """Accepted/rejected suggestion counts for a reviewed document."""
    accepted: int = Field(0, ge=0)
    rejected: int = Field(0, ge=0)


def _to_snapshot(document: DocumentModel) -> DocumentSnapshot:
    tags: List[TagRecord] = [
        {"id": t.id, "name": t.name, "color": t.color, "type": t.type}
        for t in document.tags
    ]
    return {
        "id": document.id,
        "name": document.name,
        "content": document.content,
        "tags": tags,
        "project": document.project,
        "type": document.type,
        "status": document.status,
    }


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/api/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "doc-tagging-api"}


@app.get("/api/catalog")
def get_catalog() -> Dict[str, Any]:
    """Rule tables used for suggestions."""
    return engine.catalog.to_dict()


@app.post("/api/documents/analyze")
async def analyze_document(request: AnalyzeRequest) -> Dict[str, Any]:
    """Analyze an uploaded file and return suggestions."""
    metadata = dict(request.metadata)
    for key in ("size", "type", "last_modified"):
        value = getattr(request.file, key)
        if value is not None:
            metadata.setdefault(key, value)
    metadata.setdefault("name", request.file.name)

    try:
        result = await engine.analyze({"name": request.file.name}, metadata)
    except AnalysisError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return result.to_dict()


@app.post("/api/documents/reanalyze")
async def reanalyze_document(document: DocumentModel) -> Dict[str, Any]:
    """Re-analyze a document, taking its existing tags into account."""
    try:
        result = await engine.reanalyze(_to_snapshot(document))
    except AnalysisError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return result.to_dict()


@app.post("/api/documents/batch-reanalyze")
async def batch_reanalyze(request: BatchReanalyzeRequest) -> Dict[str, Any]:
    """Re-analyze several documents; failures are reported per document."""
    outcomes = await engine.batch_reanalyze(request.documents)
    return {
        "results": [o.to_dict() for o in outcomes],
        "succeeded": sum(1 for o in outcomes if o.success),
        "failed": sum(1 for o in outcomes if not o.success),
    }


@app.post("/api/documents/{document_id}/regenerate-tags")
async def regenerate_tags(document_id: str, document: DocumentModel) -> Dict[str, Any]:
    """Suggest tags the document does not have yet."""
    if document.id != document_id:
        raise HTTPException(status_code=400, detail="Document ID mismatch")
    try:
        suggestions = await engine.regenerate_tags(_to_snapshot(document))
    except AnalysisError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "document_id": document_id,
        "suggested_tags": [s.to_dict() for s in suggestions],
    }


@app.post("/api/documents/{document_id}/feedback")
async def submit_feedback(document_id: str, feedback: FeedbackRequest) -> Dict[str, Any]:
    """Record which suggestions the user accepted and rejected."""
    result = await engine.record_feedback(document_id, feedback.accepted, feedback.rejected)
    return result.to_dict()


# ============================================================================
# Run with: uvicorn server:app --reload
# ============================================================================
