"""Search routes: semantic parts, literature search proxy, thesis search."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from thesisbot.api.state import state
from thesisbot.exceptions import ConceptExtractionError, ThesisBotError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["search"])


class SemanticPartsPayload(BaseModel):
    """Request body for concept extraction passthrough."""
    user_query: str = ""


class LibraryPayload(BaseModel):
    """Request body for the literature search proxy."""
    query: str = ""
    limit: int = 3
    offset: int = 0


class MatchPayload(BaseModel):
    """Request body for the single-PDF title match."""
    query: str = ""


class ThesisPayload(BaseModel):
    """Request body for the thesis search."""
    thesis: str = ""


# ============================================================================
# Semantic parts (passthrough)
# ============================================================================


@router.post("/semanticparts")
async def semantic_parts(body: SemanticPartsPayload):
    """Forward a query to the backend's semantic-parts endpoint as-is."""
    if not body.user_query:
        return JSONResponse({"error": "Missing user_query"}, status_code=400)
    try:
        data = await state.analysis.semantic_parts(body.user_query)
    except ThesisBotError as e:
        logger.error("Semantic parts error: %s", e.message)
        return JSONResponse({"error": "Failed to get semantic parts"}, status_code=500)
    return JSONResponse(data)


# ============================================================================
# Literature search proxy
# ============================================================================


@router.post("/library")
async def library_search(body: LibraryPayload):
    """Search the configured provider; returns ``{papers, hasMore, total, nextOffset}``."""
    if not body.query.strip():
        return JSONResponse({"error": "Missing query"}, status_code=400)
    try:
        page = await state.provider.search(body.query, limit=body.limit, offset=body.offset)
    except ThesisBotError as e:
        logger.error("Search papers error: %s", e.message)
        return JSONResponse({"error": e.message}, status_code=e.status_code or 500)
    return JSONResponse(page.to_dict())


@router.post("/search-papers")
async def search_papers(body: MatchPayload):
    """Return the first open-access PDF matching a title query."""
    if not body.query.strip():
        return JSONResponse({"error": "Missing query"}, status_code=400)
    try:
        match = await state.semantic_scholar.match_pdf(body.query)
    except ThesisBotError as e:
        if e.status_code == 404:
            return JSONResponse({"error": e.message}, status_code=404)
        logger.error("Search papers error: %s", e.message)
        return JSONResponse({"error": "Failed to search for papers"}, status_code=500)
    return JSONResponse(match)


# ============================================================================
# Thesis search (concepts → fan-out)
# ============================================================================


@router.post("/theses/search")
async def thesis_search(body: ThesisPayload):
    """Split a thesis into concepts and search papers for each.

    An extraction failure is reported as an error state, never raised.
    """
    if not body.thesis.strip():
        return JSONResponse({"status": "error", "message": "Missing thesis"}, status_code=400)
    try:
        result = await state.thesis_search.run(body.thesis)
    except ConceptExtractionError as e:
        logger.error("Comprehensive search error: %s", e.message)
        return JSONResponse(
            {"status": "error", "message": f"Search failed: {e.message}", "groups": []},
            status_code=502,
        )
    return JSONResponse(result.to_dict())
