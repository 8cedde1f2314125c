"""Concept fan-out search and thesis search orchestration."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Protocol, Union

import httpx

from thesisbot.config import Settings
from thesisbot.exceptions import ThesisBotError
from thesisbot.models.paper import Paper, SearchPage, SearchResultGroup
from thesisbot.services.concept_service import ConceptExtractor
from thesisbot.services.openalex_service import OpenAlexService
from thesisbot.services.semantic_scholar_service import SemanticScholarService

logger = logging.getLogger(__name__)


class SearchProvider(Protocol):
    """Anything that can run a paged literature search."""

    async def search(self, query: str, limit: int = 3, offset: int = 0) -> SearchPage:
        ...


def build_provider(settings: Settings, client: httpx.AsyncClient) -> Union[SemanticScholarService, OpenAlexService]:
    """Instantiate the search provider named in *settings*."""
    if settings.search_provider == "openalex":
        return OpenAlexService(client, settings.openalex_url, settings.contact_email)
    return SemanticScholarService(client, settings.semantic_scholar_url)


def _dedupe(papers: list[Paper]) -> list[Paper]:
    """Drop repeated paper ids, keeping the first occurrence."""
    seen: set[str] = set()
    unique = []
    for paper in papers:
        if paper.paper_id in seen:
            continue
        seen.add(paper.paper_id)
        unique.append(paper)
    return unique


class PaperSearch:
    """Runs one search per concept concurrently and groups the results."""

    def __init__(self, provider: SearchProvider, limit: int = 3):
        self.provider = provider
        self.limit = limit

    async def search_concept(self, concept: str) -> SearchResultGroup:
        page = await self.provider.search(concept, limit=self.limit)
        papers = _dedupe(page.papers)
        if not papers:
            return SearchResultGroup(concept=concept, papers=[], total=0)
        return SearchResultGroup(concept=concept, papers=papers, total=page.total or len(papers))

    async def search_concepts(self, concepts: list[str]) -> list[SearchResultGroup]:
        """Search every concept at once; one group per concept, input order.

        A failing concept does not discard its siblings: it comes back as
        an empty group with ``error`` set.
        """
        settled = await asyncio.gather(
            *(self.search_concept(c) for c in concepts),
            return_exceptions=True,
        )

        groups: list[SearchResultGroup] = []
        for concept, result in zip(concepts, settled):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                message = result.message if isinstance(result, ThesisBotError) else str(result)
                logger.error('Search error for concept "%s": %s', concept, message)
                groups.append(SearchResultGroup(concept=concept, papers=[], total=0, error=message))
            else:
                groups.append(result)
        return groups


@dataclass
class ThesisSearch:
    """Concepts extracted from a thesis and the papers found for each."""

    thesis: str
    concepts: list[str]
    groups: list[SearchResultGroup]

    @property
    def total_papers(self) -> int:
        return sum(len(g.papers) for g in self.groups)

    def find_papers(self, paper_ids: set[str]) -> list[Paper]:
        """Papers whose id is in *paper_ids*, in group order."""
        return [p for g in self.groups for p in g.papers if p.paper_id in paper_ids]

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "success",
            "thesis": self.thesis,
            "concepts": self.concepts,
            "groups": [g.to_dict() for g in self.groups],
            "totalResults": self.total_papers,
        }


class ThesisSearchService:
    """Thesis → concepts → per-concept paper groups."""

    def __init__(self, extractor: ConceptExtractor, search: PaperSearch):
        self.extractor = extractor
        self.search = search

    async def run(self, thesis: str) -> ThesisSearch:
        """Extract concepts from *thesis* and search each of them.

        Raises:
            ConceptExtractionError: When the thesis cannot be decomposed
        """
        concepts = await self.extractor.extract(thesis)
        logger.info("Thesis split into %d concepts", len(concepts))
        groups = await self.search.search_concepts(concepts)
        return ThesisSearch(thesis=thesis, concepts=concepts, groups=groups)
