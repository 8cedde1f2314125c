"""FastAPI application for thesisbot."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from thesisbot import __version__
from thesisbot.api.routers import analysis, chat, collections, search
from thesisbot.api.state import close_services, init_services, state
from thesisbot.config import Settings
from thesisbot.exceptions import CollectionNotFoundError, ThesisBotError, UpstreamError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize services on startup, close the HTTP client on shutdown."""
    init_services(Settings.load())
    yield
    await close_services()


app = FastAPI(title="thesisbot", version=__version__, lifespan=lifespan)

app.include_router(search.router)
app.include_router(analysis.router)
app.include_router(collections.router)
app.include_router(chat.router)


# ============================================================================
# Error handlers
# ============================================================================


@app.exception_handler(ThesisBotError)
async def thesisbot_error_handler(request: Request, exc: ThesisBotError):
    """Render uncaught service errors as JSON instead of a 500 page."""
    if isinstance(exc, CollectionNotFoundError):
        status_code = 404
    elif isinstance(exc, UpstreamError):
        status_code = 502
    else:
        status_code = 500
    return JSONResponse({"status": "error", "error": exc.message}, status_code=status_code)


# ============================================================================
# Health
# ============================================================================


@app.get("/api/health")
async def health():
    """Return version and the configured backend location."""
    return JSONResponse({
        "status": "ok",
        "version": __version__,
        "analysisUrl": state.settings.analysis_url,
        "searchProvider": state.settings.search_provider,
    })
