"""Client for the external document-analysis backend.

The backend is a separately maintained HTTP service exposing
``/upload_pdf``, ``/upload_pdf_get_sum_graph``, ``/semantic_parts``,
``/chatbot`` and ``/clear_history``.  Its base URL comes from
:class:`~thesisbot.config.Settings`.
"""

import logging
from typing import Any, Optional

import httpx

from thesisbot.config import Settings
from thesisbot.exceptions import AnalysisError, PdfFetchError
from thesisbot.services.retry_service import forward_with_retry

logger = logging.getLogger(__name__)

PDF_ACCEPT = "application/pdf,application/octet-stream"


class AnalysisClient:
    """Async client for the document-analysis backend."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        """Initialize the client.

        Args:
            settings: Application settings (backend URL, retry policy)
            client: Shared ``httpx.AsyncClient`` owned by the caller
        """
        self.settings = settings
        self._client = client

    @property
    def base_url(self) -> str:
        return self.settings.analysis_url.rstrip("/")

    # ── Low-level ────────────────────────────────────────────────────

    async def _post(self, path: str, **kwargs: Any) -> Any:
        """POST to the backend and return the decoded JSON body.

        Raises:
            AnalysisError: On transport failure, non-2xx status or a body
                that is not JSON
        """
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.post(url, timeout=self.settings.request_timeout, **kwargs)
        except httpx.HTTPError as e:
            raise AnalysisError(f"Analysis backend unreachable: {e}") from e

        if response.status_code >= 400:
            raise AnalysisError(
                f"Analysis backend error: {response.text or response.reason_phrase}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise AnalysisError("Analysis backend returned invalid JSON") from e

    async def _post_with_retry(self, path: str, **kwargs: Any) -> Any:
        return await forward_with_retry(
            lambda: self._post(path, **kwargs),
            attempts=self.settings.retry_attempts,
            delay=self.settings.retry_delay,
        )

    # ── Endpoints ────────────────────────────────────────────────────

    async def upload_pdf(self, filename: str, data: bytes) -> Any:
        """Forward a PDF to ``/upload_pdf`` (retried)."""
        files = {"pdf": (filename, data, "application/pdf")}
        return await self._post_with_retry("/upload_pdf", files=files)

    async def analyze_pdf(self, filename: str, data: bytes) -> dict[str, Any]:
        """Upload a PDF and get back its summary and chart.

        The backend answer is validated on every attempt, so a malformed
        body is retried like a transport failure.

        Returns:
            ``{status, message, data: {summary, visualization: {data, image}}}``
        """
        files = {"pdf": (filename, data, "application/pdf")}

        async def attempt() -> dict[str, Any]:
            body = await self._post("/upload_pdf_get_sum_graph", files=files)
            if not isinstance(body, dict):
                raise AnalysisError("Invalid response structure from analysis backend")
            payload = body.get("data")
            if (
                body.get("status") != "success"
                or not isinstance(payload, dict)
                or not payload.get("summary")
                or not payload.get("visualization")
            ):
                raise AnalysisError("Invalid response structure from analysis backend")
            visualization = payload["visualization"]
            return {
                "status": body["status"],
                "message": body.get("message", ""),
                "data": {
                    "summary": payload["summary"],
                    "visualization": {
                        "data": visualization.get("data"),
                        "image": visualization.get("image"),
                    },
                },
            }

        return await forward_with_retry(
            attempt,
            attempts=self.settings.retry_attempts,
            delay=self.settings.retry_delay,
        )

    async def semantic_parts(self, user_query: str) -> Any:
        """Ask the backend to split a query into its main concepts."""
        return await self._post("/semantic_parts", json={"user_query": user_query})

    async def chat(self, prompt: str) -> str:
        """Send a chat prompt and return the bot's reply text."""
        body = await self._post("/chatbot", json={"prompt": prompt})
        if not isinstance(body, dict) or not body.get("response"):
            raise AnalysisError("Invalid response from chatbot")
        return str(body["response"])

    async def clear_history(self) -> Any:
        """Reset the backend's chat history."""
        return await self._post("/clear_history")

    # ── Source documents ─────────────────────────────────────────────

    async def fetch_document(self, url: str) -> bytes:
        """Download a PDF directly from its source URL for analysis.

        Raises:
            PdfFetchError: On transport failure, non-2xx status or empty body
        """
        try:
            response = await self._client.get(
                url,
                headers={"Accept": PDF_ACCEPT},
                follow_redirects=True,
                timeout=self.settings.request_timeout,
            )
        except httpx.HTTPError as e:
            raise PdfFetchError(f"Failed to fetch PDF: {e}") from e
        if response.status_code >= 400:
            raise PdfFetchError(
                f"Failed to fetch PDF: {response.reason_phrase}",
                status_code=response.status_code,
            )
        if not response.content:
            raise PdfFetchError("Retrieved PDF is empty")
        logger.info("Fetched %d bytes from %s", len(response.content), url)
        return response.content
