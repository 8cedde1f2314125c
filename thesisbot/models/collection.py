"""Collection and chat message data models."""

from dataclasses import dataclass, field
from typing import Any, Optional

from thesisbot.models.paper import Paper


@dataclass
class Collection:
    """A named grouping of papers around a research thesis."""

    id: str
    name: str
    thesis: Optional[str] = None
    papers_count: int = 0
    last_updated: int = 0  # epoch milliseconds
    papers: list[Paper] = field(default_factory=list)

    def to_dict(self, include_papers: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "thesis": self.thesis,
            "papersCount": self.papers_count,
            "lastUpdated": self.last_updated,
        }
        if include_papers:
            data["papers"] = [p.to_dict() for p in self.papers]
        return data


@dataclass
class Message:
    """A single chat message stored against a collection (and optionally a paper)."""

    id: str
    content: str
    timestamp: str
    is_user: bool
    paper_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "timestamp": self.timestamp,
            "isUser": self.is_user,
            "paperId": self.paper_id,
        }
