"""Application state shared by all routers."""

import logging
from typing import Optional

import httpx

from thesisbot.config import Settings
from thesisbot.database.repository import CollectionRepository
from thesisbot.services.analysis_service import AnalysisClient
from thesisbot.services.concept_service import ConceptExtractor
from thesisbot.services.pdf_service import PdfProxy, UploadService
from thesisbot.services.search_service import (
    PaperSearch,
    SearchProvider,
    ThesisSearchService,
    build_provider,
)
from thesisbot.services.semantic_scholar_service import SemanticScholarService

logger = logging.getLogger(__name__)


# ============================================================================
# Global State
# ============================================================================


class AppState:
    """Mutable singleton holding all runtime services."""

    settings: Settings
    repo: CollectionRepository
    http: httpx.AsyncClient
    analysis: AnalysisClient
    provider: SearchProvider
    semantic_scholar: SemanticScholarService
    proxy: PdfProxy
    uploader: UploadService
    thesis_search: ThesisSearchService
    # Optional transport override (tests plug an httpx.MockTransport in here)
    transport: Optional[httpx.AsyncBaseTransport] = None


state = AppState()


def init_services(settings: Settings) -> None:
    """Build every service from *settings* and store them on ``state``."""
    state.settings = settings
    state.repo = CollectionRepository(settings.db_path)
    state.http = httpx.AsyncClient(timeout=settings.request_timeout, transport=state.transport)
    state.analysis = AnalysisClient(settings, state.http)
    state.provider = build_provider(settings, state.http)
    state.semantic_scholar = SemanticScholarService(state.http, settings.semantic_scholar_url)
    state.proxy = PdfProxy(state.http, settings.pdf_user_agent, settings.request_timeout)
    state.uploader = UploadService(state.proxy, state.analysis)
    state.thesis_search = ThesisSearchService(
        ConceptExtractor(state.analysis),
        PaperSearch(state.provider, limit=settings.search_limit),
    )
    logger.info(
        "Services ready (backend=%s, search=%s)",
        settings.analysis_url,
        settings.search_provider,
    )


async def close_services() -> None:
    """Release the shared HTTP client."""
    if getattr(state, "http", None) is not None:
        await state.http.aclose()
