"""OpenAlex API client for keyword search over works."""

from typing import Any, Optional

import httpx

from thesisbot.exceptions import SearchError
from thesisbot.models.paper import Author, Paper, SearchPage
from thesisbot.utils.text import clean_title, short_openalex_id


TIMEOUT = 10.0


class OpenAlexService:
    """Searches OpenAlex works and maps them to :class:`Paper`."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = "https://api.openalex.org",
        contact_email: Optional[str] = None,
    ):
        """Initialize OpenAlex service.

        Args:
            client: Shared async HTTP client
            base_url: OpenAlex API root
            contact_email: Email for polite pool access (recommended by OpenAlex)
        """
        self._client = client
        self.base_url = base_url.rstrip("/")
        self.contact_email = contact_email

    async def search(self, query: str, limit: int = 3, offset: int = 0) -> SearchPage:
        """Search works by free text.

        OpenAlex paginates by page number, so *offset* is rounded down to
        the page containing it.

        Raises:
            SearchError: On transport failure, non-2xx status or a malformed body
        """
        per_page = max(1, limit)
        page = offset // per_page + 1
        params: dict[str, Any] = {"search": query, "per-page": per_page, "page": page}
        if self.contact_email:
            params["mailto"] = self.contact_email

        try:
            response = await self._client.get(f"{self.base_url}/works", params=params, timeout=TIMEOUT)
        except httpx.TimeoutException as e:
            raise SearchError("OpenAlex request timed out") from e
        except httpx.HTTPError as e:
            raise SearchError(f"OpenAlex request failed: {e}") from e

        if response.status_code != 200:
            raise SearchError(
                f"OpenAlex returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SearchError("OpenAlex returned invalid JSON") from e
        if not isinstance(data, dict):
            raise SearchError("OpenAlex returned an unexpected response")

        papers = [self.to_paper(work) for work in data.get("results") or []]
        count = int((data.get("meta") or {}).get("count") or 0)
        return SearchPage(
            papers=papers,
            total=count,
            has_more=page * per_page < count,
            next_offset=page * per_page,
        )

    @staticmethod
    def to_paper(work: dict[str, Any]) -> Paper:
        """Map one OpenAlex work record to a Paper."""
        # 1. Authors: flatten authorships[].author
        authors = []
        for authorship in work.get("authorships") or []:
            author = authorship.get("author") or {}
            name = author.get("display_name") or ""
            if name:
                authors.append(Author(id=short_openalex_id(author.get("id") or ""), name=name))

        # 2. PDF: best open-access location first, then primary location
        pdf_url = None
        for key in ("best_oa_location", "primary_location"):
            location = work.get(key) or {}
            if location.get("pdf_url"):
                pdf_url = location["pdf_url"]
                break

        # 3. Landing page
        primary = work.get("primary_location") or {}
        url = primary.get("landing_page_url") or work.get("doi") or work.get("id") or ""

        return Paper(
            paper_id=short_openalex_id(work.get("id") or ""),
            title=clean_title(work.get("display_name") or work.get("title") or ""),
            url=url,
            pdf_url=pdf_url,
            type=work.get("type") or "Paper",
            year=work.get("publication_year"),
            authors=authors,
        )
