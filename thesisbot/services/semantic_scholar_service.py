"""Semantic Scholar Graph API client."""

from typing import Any, Optional

import httpx

from thesisbot.exceptions import SearchError
from thesisbot.models.paper import Author, Paper, SearchPage
from thesisbot.utils.text import clean_title


SEARCH_FIELDS = "paperId,title,url,openAccessPdf,authors,year,publicationTypes"
MATCH_FIELDS = "paperId,title,url,openAccessPdf"
TIMEOUT = 20.0


class SemanticScholarService:
    """Service for searching papers on Semantic Scholar."""

    def __init__(self, client: httpx.AsyncClient, base_url: str = "https://api.semanticscholar.org"):
        self._client = client
        self.base_url = base_url.rstrip("/")

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.get(
                f"{self.base_url}/graph/v1{path}", params=params, timeout=TIMEOUT
            )
        except httpx.HTTPError as e:
            raise SearchError(f"Semantic Scholar request failed: {e}") from e
        if response.status_code != 200:
            raise SearchError(
                "Failed to fetch from Semantic Scholar API",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise SearchError("Semantic Scholar returned invalid JSON") from e
        if not isinstance(data, dict):
            raise SearchError("Semantic Scholar returned an unexpected response")
        return data

    async def search(self, query: str, limit: int = 3, offset: int = 0) -> SearchPage:
        """Search papers, keeping only those with an open-access PDF.

        ``has_more`` is always True: the API total counts papers without a
        PDF too, so it cannot tell whether more *eligible* papers exist.

        Raises:
            SearchError: On transport failure, non-2xx status or a malformed body
        """
        data = await self._get(
            "/paper/search",
            {"query": query, "fields": SEARCH_FIELDS, "offset": offset, "limit": limit},
        )
        papers = [
            self.to_paper(item)
            for item in data.get("data") or []
            if (item.get("openAccessPdf") or {}).get("url")
        ]
        return SearchPage(
            papers=papers,
            total=int(data.get("total") or 0),
            has_more=True,
            next_offset=offset + limit,
        )

    async def match_pdf(self, query: str) -> dict[str, str]:
        """Return ``{pdfUrl, title}`` of the best title match with an open PDF.

        Raises:
            SearchError: With status 404 when no match carries a PDF
        """
        data = await self._get("/paper/search/match", {"query": query, "fields": MATCH_FIELDS})
        candidates = data.get("data") or data.get("papers") or []
        paper: Optional[dict[str, Any]] = next(
            (p for p in candidates if (p.get("openAccessPdf") or {}).get("url")),
            None,
        )
        if paper is None:
            raise SearchError("No open access PDF found for this query", status_code=404)
        return {"pdfUrl": paper["openAccessPdf"]["url"], "title": paper.get("title") or ""}

    @staticmethod
    def to_paper(item: dict[str, Any]) -> Paper:
        """Map one Semantic Scholar record to a Paper."""
        types = item.get("publicationTypes") or []
        return Paper(
            paper_id=item.get("paperId") or "",
            title=clean_title(item.get("title") or ""),
            url=item.get("url") or "",
            pdf_url=(item.get("openAccessPdf") or {}).get("url"),
            type=types[0] if types else "Paper",
            year=item.get("year"),
            authors=[
                Author(id=a.get("authorId") or "", name=a.get("name") or "")
                for a in item.get("authors") or []
            ],
        )
