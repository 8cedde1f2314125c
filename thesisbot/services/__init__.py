"""Service layer."""

from thesisbot.services.analysis_service import AnalysisClient
from thesisbot.services.citation_service import CitationExporter
from thesisbot.services.concept_service import ConceptExtractor
from thesisbot.services.pdf_service import PdfProxy, UploadService
from thesisbot.services.search_service import PaperSearch, ThesisSearchService

__all__ = [
    "AnalysisClient",
    "CitationExporter",
    "ConceptExtractor",
    "PaperSearch",
    "PdfProxy",
    "ThesisSearchService",
    "UploadService",
]
