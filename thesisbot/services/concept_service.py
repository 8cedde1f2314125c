"""Thesis → concept extraction via the backend's semantic-parts endpoint."""

import json
import logging

from thesisbot.exceptions import ConceptExtractionError, ThesisBotError
from thesisbot.services.analysis_service import AnalysisClient
from thesisbot.utils.text import strip_json_fence

logger = logging.getLogger(__name__)


class ConceptExtractor:
    """Decomposes a thesis statement into independent search concepts."""

    def __init__(self, analysis: AnalysisClient):
        self.analysis = analysis

    async def extract(self, thesis: str) -> list[str]:
        """Return the main concepts of *thesis*, in backend order.

        The backend replies ``{"response": "```json\\n{...}\\n```"}`` where the
        fenced blob is ``{"main_concepts": [...]}``.  No retry is attempted
        and the concept list is not validated: an empty list means no
        concepts were found.

        Raises:
            ConceptExtractionError: On any failure (network, status,
                envelope or JSON)
        """
        if not thesis or not thesis.strip():
            raise ConceptExtractionError("Thesis is empty")

        try:
            body = await self.analysis.semantic_parts(thesis)
        except ThesisBotError as e:
            logger.error("Semantic parts request failed: %s", e.message)
            raise ConceptExtractionError("Failed to get semantic parts") from e

        raw = body.get("response") if isinstance(body, dict) else None
        if not isinstance(raw, str):
            raise ConceptExtractionError("Semantic parts response has no 'response' field")

        try:
            parsed = json.loads(strip_json_fence(raw))
        except json.JSONDecodeError as e:
            logger.error("Unparseable semantic parts response: %r", raw[:200])
            raise ConceptExtractionError("Semantic parts response is not valid JSON") from e

        if not isinstance(parsed, dict) or "main_concepts" not in parsed:
            raise ConceptExtractionError("Semantic parts response has no 'main_concepts'")

        concepts = parsed["main_concepts"]
        if not isinstance(concepts, list):
            raise ConceptExtractionError("'main_concepts' is not a list")
        return concepts
