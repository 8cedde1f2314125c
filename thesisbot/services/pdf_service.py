"""PDF proxy and bulk upload of selected papers to the analysis backend."""

import asyncio
import logging

import httpx

from thesisbot.exceptions import PdfFetchError, ThesisBotError
from thesisbot.models.paper import BatchReport, Paper, UploadOutcome
from thesisbot.services.analysis_service import AnalysisClient
from thesisbot.utils.text import pdf_filename

logger = logging.getLogger(__name__)


class PdfProxy:
    """Fetches PDFs with a browser User-Agent.

    Some publishers refuse non-browser clients; the proxy hides that
    from the rest of the app and hands back raw bytes.
    """

    def __init__(self, client: httpx.AsyncClient, user_agent: str, timeout: float = 60.0):
        self._client = client
        self.user_agent = user_agent
        self.timeout = timeout

    async def fetch(self, url: str) -> bytes:
        """Download *url* and return its body.

        Raises:
            PdfFetchError: On transport failure or non-2xx status
        """
        try:
            response = await self._client.get(
                url,
                headers={"User-Agent": self.user_agent},
                follow_redirects=True,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise PdfFetchError(f"Failed to fetch PDF: {e}") from e
        if response.status_code >= 400:
            raise PdfFetchError(
                f"Failed to fetch PDF: {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response.content


class UploadService:
    """Uploads the PDFs of selected papers, isolating each paper's failure."""

    def __init__(self, proxy: PdfProxy, analysis: AnalysisClient):
        self.proxy = proxy
        self.analysis = analysis

    async def upload_one(self, paper: Paper) -> UploadOutcome:
        """Proxy-fetch one paper's PDF and forward it to the backend."""
        try:
            data = await self.proxy.fetch(paper.pdf_url or "")
            await self.analysis.upload_pdf(pdf_filename(paper.paper_id, paper.title), data)
        except ThesisBotError as e:
            logger.error("Upload failed for %s: %s", paper.paper_id, e.message)
            return UploadOutcome(paper.paper_id, paper.title, "error", e.message)
        except Exception as e:
            logger.exception("Unexpected upload failure for %s", paper.paper_id)
            return UploadOutcome(paper.paper_id, paper.title, "error", str(e) or type(e).__name__)
        return UploadOutcome(paper.paper_id, paper.title, "success")

    async def upload_batch(self, papers: list[Paper]) -> list[UploadOutcome]:
        """Upload every eligible paper concurrently.

        Papers without a PDF URL are skipped and get no outcome.  Outcomes
        follow the order of the eligible input papers.
        """
        eligible = [p for p in papers if p.eligible]
        if len(eligible) < len(papers):
            logger.info("Skipping %d papers without a PDF URL", len(papers) - len(eligible))
        return list(await asyncio.gather(*(self.upload_one(p) for p in eligible)))


def summarize_outcomes(outcomes: list[UploadOutcome]) -> BatchReport:
    """Count successes and failures of an upload batch."""
    succeeded = sum(1 for o in outcomes if o.ok)
    return BatchReport(succeeded=succeeded, failed=len(outcomes) - succeeded)
