"""thesisbot - thesis-driven paper search and analysis service.

Splits a thesis into concepts, searches literature APIs for each,
keeps selected papers in collections and forwards their PDFs to an
external document-analysis backend.
"""

__version__ = "1.0.0"

from thesisbot.config import Settings
from thesisbot.models.paper import Paper

__all__ = ["Paper", "Settings", "__version__"]
