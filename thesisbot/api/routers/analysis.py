"""PDF routes: proxy, single upload, analyze-and-summarize, bulk upload."""

import logging
import time

from fastapi import APIRouter, Form
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from thesisbot.api.state import state
from thesisbot.exceptions import ThesisBotError
from thesisbot.models.paper import Paper
from thesisbot.services.pdf_service import summarize_outcomes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])


class PdfUrlPayload(BaseModel):
    """Request body carrying a single PDF URL."""
    pdfUrl: str = ""


class UploadBatchPayload(BaseModel):
    """Request body for bulk upload: papers in wire form."""
    papers: list[dict] = Field(default_factory=list)


# ============================================================================
# PDF proxy
# ============================================================================


@router.post("/proxy-pdf")
async def proxy_pdf(body: PdfUrlPayload):
    """Fetch a PDF with a browser User-Agent and return the raw bytes."""
    if not body.pdfUrl:
        return JSONResponse({"error": "PDF URL is required"}, status_code=400)
    try:
        data = await state.proxy.fetch(body.pdfUrl)
    except ThesisBotError as e:
        logger.error("PDF proxy error: %s", e.message)
        return JSONResponse({"error": "Failed to fetch PDF"}, status_code=500)
    return Response(content=data, media_type="application/pdf")


# ============================================================================
# Single upload / analysis
# ============================================================================


@router.post("/upload-pdf")
async def upload_pdf(body: PdfUrlPayload):
    """Fetch a PDF and forward it to the backend's ``/upload_pdf``."""
    if not body.pdfUrl:
        return JSONResponse({"message": "PDF URL is required"}, status_code=400)
    try:
        data = await state.proxy.fetch(body.pdfUrl)
        result = await state.analysis.upload_pdf("document.pdf", data)
    except ThesisBotError as e:
        logger.error("Error uploading PDF: %s", e.message)
        return JSONResponse(
            {"message": "Error uploading PDF", "error": e.message},
            status_code=500,
        )
    return JSONResponse(result)


@router.post("/analyzepdf")
async def analyze_pdf(pdfUrl: str = Form("")):
    """Fetch a PDF and return the backend's summary and chart."""
    if not pdfUrl:
        return JSONResponse({"error": "No PDF URL provided"}, status_code=400)
    logger.info("Fetching PDF from: %s", pdfUrl)
    try:
        data = await state.analysis.fetch_document(pdfUrl)
        result = await state.analysis.analyze_pdf(f"document_{int(time.time() * 1000)}.pdf", data)
    except ThesisBotError as e:
        logger.error("Error in analyze route: %s", e.message)
        return JSONResponse(
            {"status": "error", "message": e.message or "Failed to analyze PDF"},
            status_code=500,
        )
    return JSONResponse(result)


# ============================================================================
# Bulk upload
# ============================================================================


@router.post("/upload-batch")
async def upload_batch(body: UploadBatchPayload):
    """Upload every selected paper that has a PDF URL.

    Returns one outcome per eligible paper plus separate success and
    error counts.
    """
    papers = [Paper.from_dict(p) for p in body.papers]
    outcomes = await state.uploader.upload_batch(papers)
    report = summarize_outcomes(outcomes)
    return JSONResponse({
        "outcomes": [o.to_dict() for o in outcomes],
        "succeeded": report.succeeded,
        "failed": report.failed,
        "summary": report.summary,
        "notifications": report.notifications,
    })
