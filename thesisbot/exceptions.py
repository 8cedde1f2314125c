"""Exception types raised by thesisbot services.

Callers only ever read ``message``; ``status_code`` is kept for upstream
HTTP failures so the retry policy can tell permanent rejections apart.
"""

from typing import Optional


class ThesisBotError(Exception):
    """Base class for all thesisbot errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UpstreamError(ThesisBotError):
    """An external HTTP service failed or answered with a non-2xx status."""


class AnalysisError(UpstreamError):
    """The document-analysis backend failed or returned an unusable body."""


class SearchError(UpstreamError):
    """A literature search provider failed."""


class PdfFetchError(UpstreamError):
    """A PDF could not be fetched from its source URL."""


class ConceptExtractionError(ThesisBotError):
    """A thesis could not be decomposed into concepts."""


class RetryExhaustedError(ThesisBotError):
    """The retry budget ran out without a recorded failure."""


class CollectionNotFoundError(ThesisBotError):
    """The requested collection does not exist."""

    def __init__(self, collection_id: str):
        super().__init__(f"Collection not found: {collection_id}", status_code=404)
        self.collection_id = collection_id
