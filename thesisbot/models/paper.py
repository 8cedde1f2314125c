"""Paper, search-result and upload-outcome data models."""

from dataclasses import dataclass, field
from typing import Any, Literal, Optional


@dataclass
class Author:
    """A single paper author as reported by the search API."""

    id: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Author":
        return cls(id=str(data.get("id") or ""), name=str(data.get("name") or ""))


@dataclass
class Paper:
    """Represents a research paper returned by a literature search."""

    paper_id: str
    title: str
    url: str = ""
    pdf_url: Optional[str] = None
    type: str = "Paper"
    year: Optional[int] = None
    authors: list[Author] = field(default_factory=list)

    # UI-only flag, never persisted
    selected: bool = False

    @property
    def eligible(self) -> bool:
        """True when the paper carries a direct PDF URL and can be uploaded."""
        return bool(self.pdf_url and self.pdf_url.strip())

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the camelCase wire form (``selected`` excluded)."""
        return {
            "paperId": self.paper_id,
            "title": self.title,
            "url": self.url,
            "pdfUrl": self.pdf_url,
            "type": self.type,
            "year": self.year,
            "authors": [a.to_dict() for a in self.authors],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Paper":
        """Build a Paper from its wire form.

        Accepts ``paperId`` or ``id`` for the identifier since both shapes
        circulate between the search proxy and stored collections.
        """
        year = data.get("year")
        try:
            year = int(year) if year not in (None, "") else None
        except (TypeError, ValueError):
            year = None
        return cls(
            paper_id=str(data.get("paperId") or data.get("id") or ""),
            title=str(data.get("title") or ""),
            url=str(data.get("url") or ""),
            pdf_url=data.get("pdfUrl") or None,
            type=str(data.get("type") or "Paper"),
            year=year,
            authors=[Author.from_dict(a) for a in data.get("authors") or [] if isinstance(a, dict)],
            selected=bool(data.get("selected", False)),
        )


@dataclass
class SearchPage:
    """One page of results from a literature search provider."""

    papers: list[Paper]
    total: int = 0
    has_more: bool = False
    next_offset: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "papers": [p.to_dict() for p in self.papers],
            "hasMore": self.has_more,
            "total": self.total,
            "nextOffset": self.next_offset,
        }


@dataclass
class SearchResultGroup:
    """Papers found for one concept of a thesis."""

    concept: str
    papers: list[Paper] = field(default_factory=list)
    total: int = 0
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "concept": self.concept,
            "papers": [p.to_dict() for p in self.papers],
            "total": self.total,
            "error": self.error,
        }


@dataclass
class UploadOutcome:
    """Result of uploading one paper's PDF to the analysis backend."""

    paper_id: str
    title: str
    status: Literal["success", "error"]
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> dict[str, Any]:
        return {
            "paperId": self.paper_id,
            "title": self.title,
            "status": self.status,
            "message": self.message,
        }


@dataclass
class BatchReport:
    """Aggregate of an upload batch, reported as separate success/error counts."""

    succeeded: int
    failed: int

    @property
    def summary(self) -> str:
        return f"{self.succeeded} succeeded, {self.failed} failed"

    @property
    def notifications(self) -> list[dict[str, str]]:
        """One notification per non-zero count, success first."""
        notes: list[dict[str, str]] = []
        if self.succeeded:
            noun = "paper" if self.succeeded == 1 else "papers"
            notes.append({"level": "success", "message": f"Uploaded {self.succeeded} {noun}"})
        if self.failed:
            noun = "paper" if self.failed == 1 else "papers"
            notes.append({"level": "error", "message": f"{self.failed} {noun} failed to upload"})
        return notes
