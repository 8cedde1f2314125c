"""Citation generation and markdown export."""

from pathlib import Path

from thesisbot.models.collection import Collection
from thesisbot.models.paper import Paper
from thesisbot.utils.text import split_name

STYLES = ("APA", "MLA", "Chicago")


def _year(paper: Paper) -> str:
    return str(paper.year) if paper.year else "n.d."


def _apa_author(name: str) -> str:
    given, last = split_name(name)
    initials = " ".join(f"{part[0]}." for part in given.split())
    return f"{last}, {initials}" if initials else last


def _last_first(name: str) -> str:
    given, last = split_name(name)
    return f"{last}, {given}" if given else last


def generate_citation(paper: Paper, style: str = "APA") -> str:
    """Format *paper* as a reference in *style* (APA, MLA or Chicago).

    An author "Jane Q Doe" renders as ``Doe, J. Q.`` in APA and
    ``Doe, Jane Q`` in MLA/Chicago; a missing year renders as ``n.d.``.
    """
    if style == "APA":
        authors = ", ".join(_apa_author(a.name) for a in paper.authors)
        return f"{authors} ({_year(paper)}). {paper.title}. Retrieved from {paper.url}"

    authors = ", and ".join(_last_first(a.name) for a in paper.authors)
    # "n.d." already ends with a period
    year = f"{paper.year}." if paper.year else "n.d."
    if style == "MLA":
        return f'{authors}. "{paper.title}." {year} {paper.url}'
    if style == "Chicago":
        return f'{authors}. "{paper.title}." {year} {paper.url}.'
    raise ValueError(f"Unknown citation style: {style}")


def generate_citations(papers: list[Paper], style: str = "APA") -> list[str]:
    return [generate_citation(p, style) for p in papers]


class CitationExporter:
    """Service for exporting a collection's citations to Markdown."""

    def __init__(self, export_dir: Path):
        """Initialize exporter.

        Args:
            export_dir: Directory to save exported markdown files
        """
        self.export_dir = export_dir
        self.export_dir.mkdir(parents=True, exist_ok=True)

    def export(self, collection: Collection, style: str = "APA") -> Path:
        """Write the collection's references to ``<collection-id>-<style>.md``.

        Args:
            collection: Collection whose papers are cited
            style: Citation style

        Returns:
            Path to the created markdown file
        """
        citations = generate_citations(collection.papers, style)

        lines = [f"# {collection.name}", ""]
        if collection.thesis:
            lines.extend([f"> {collection.thesis}", ""])
        lines.append(f"## References ({style})")
        lines.append("")
        for citation in citations:
            lines.append(f"- {citation}")
        lines.append("")

        filepath = self.export_dir / f"{collection.id}-{style.lower()}.md"
        # Overwrites any previous export of the same collection/style
        with open(filepath, "w", encoding="utf-8") as f:
            f.write("\n".join(lines))

        return filepath
