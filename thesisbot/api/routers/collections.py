"""Collection routes: CRUD, papers, citations, messages."""

from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from thesisbot.api.state import state
from thesisbot.exceptions import CollectionNotFoundError
from thesisbot.models.paper import Paper
from thesisbot.services.citation_service import STYLES, generate_citations

router = APIRouter(prefix="/api/collections", tags=["collections"])


class CollectionPayload(BaseModel):
    """Request body for creating a collection."""
    name: str
    thesis: Optional[str] = None


class PapersPayload(BaseModel):
    """Request body for adding papers (wire form) to a collection."""
    papers: list[dict] = Field(default_factory=list)


def _require(collection_id: str):
    collection = state.repo.get_collection(collection_id)
    if collection is None:
        raise CollectionNotFoundError(collection_id)
    return collection


# ============================================================================
# Collections
# ============================================================================


@router.get("")
async def list_collections():
    """Return all collections without their papers."""
    return JSONResponse([c.to_dict(include_papers=False) for c in state.repo.list_collections()])


@router.post("")
async def create_collection(body: CollectionPayload):
    """Create an empty collection."""
    name = body.name.strip()
    if not name:
        return JSONResponse({"error": "Collection name is required"}, status_code=400)
    collection = state.repo.create_collection(name, body.thesis)
    return JSONResponse(collection.to_dict(), status_code=201)


@router.get("/{collection_id}")
async def get_collection(collection_id: str):
    """Return one collection with its papers."""
    return JSONResponse(_require(collection_id).to_dict())


@router.delete("/{collection_id}")
async def delete_collection(collection_id: str):
    """Delete a collection (papers and messages included)."""
    if not state.repo.delete_collection(collection_id):
        raise CollectionNotFoundError(collection_id)
    return JSONResponse({"ok": True})


# ============================================================================
# Papers
# ============================================================================


@router.get("/{collection_id}/papers")
async def get_papers(collection_id: str):
    """Return a collection's papers."""
    return JSONResponse([p.to_dict() for p in state.repo.get_papers(collection_id)])


@router.get("/{collection_id}/papers/{paper_id}")
async def get_paper(collection_id: str, paper_id: str):
    """Return one paper of a collection."""
    paper = state.repo.get_paper(collection_id, paper_id)
    if paper is None:
        return JSONResponse({"error": "Paper not found"}, status_code=404)
    return JSONResponse(paper.to_dict())


@router.post("/{collection_id}/papers")
async def add_papers(collection_id: str, body: PapersPayload):
    """Add papers to a collection; already-present ids are skipped."""
    if not body.papers:
        return JSONResponse({"error": "No papers selected"}, status_code=400)
    papers = [Paper.from_dict(p) for p in body.papers]
    added = state.repo.add_papers(collection_id, papers)
    noun = "paper" if added == 1 else "papers"
    return JSONResponse({
        "added": added,
        "message": f"Added {added} {noun} to your collection",
    })


# ============================================================================
# Citations
# ============================================================================


@router.get("/{collection_id}/citations")
async def get_citations(
    collection_id: str,
    style: str = Query("APA", description="APA, MLA or Chicago"),
    paper_ids: Optional[str] = Query(None, description="Comma-separated paper ids"),
):
    """Generate citations for all (or the selected) papers of a collection."""
    if style not in STYLES:
        return JSONResponse({"error": f"Unknown citation style: {style}"}, status_code=400)
    papers = _require(collection_id).papers
    if paper_ids:
        wanted = {pid.strip() for pid in paper_ids.split(",") if pid.strip()}
        papers = [p for p in papers if p.paper_id in wanted]
    return JSONResponse({"style": style, "citations": generate_citations(papers, style)})


# ============================================================================
# Messages
# ============================================================================


@router.get("/{collection_id}/messages")
async def get_messages(collection_id: str, paper_id: Optional[str] = Query(None)):
    """Return the chat history of a collection (or of one of its papers)."""
    _require(collection_id)
    return JSONResponse([m.to_dict() for m in state.repo.get_messages(collection_id, paper_id)])
