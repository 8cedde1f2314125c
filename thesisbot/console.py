"""Console UI for terminal output using Rich."""

from pathlib import Path

from rich.console import Console
from rich.table import Table

from thesisbot.models.collection import Collection
from thesisbot.models.paper import BatchReport, SearchResultGroup, UploadOutcome


class ConsoleUI:
    """Rich-based console UI for search results and notifications."""

    def __init__(self):
        """Initialize console."""
        self.console = Console()

    def info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(message)

    def success(self, message: str) -> None:
        """Print a success message in green."""
        self.console.print(f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Print a warning message in yellow."""
        self.console.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Print an error message in red."""
        self.console.print(f"[red]Error:[/red] {message}")

    def concepts(self, concepts: list[str]) -> None:
        """Print the concepts extracted from a thesis."""
        if not concepts:
            self.console.print("No concepts found.")
            return
        self.console.print("[bold]Concepts:[/bold]")
        for i, concept in enumerate(concepts, 1):
            self.console.print(f"  {i}. {concept}")

    def display_groups(self, groups: list[SearchResultGroup]) -> None:
        """Display one table per concept group."""
        for group in groups:
            table = Table(title=f"{group.concept} ({len(group.papers)} of {group.total})")
            table.add_column("ID", overflow="fold")
            table.add_column("Year", width=6)
            table.add_column("Title", overflow="fold")
            table.add_column("Authors", overflow="fold")
            table.add_column("PDF", width=4)

            for paper in group.papers:
                table.add_row(
                    paper.paper_id,
                    str(paper.year) if paper.year else "-",
                    paper.title,
                    ", ".join(a.name for a in paper.authors[:3]) or "-",
                    "yes" if paper.eligible else "-",
                )

            self.console.print(table)
            if group.error:
                self.error(f'Search for "{group.concept}" failed: {group.error}')
            elif not group.papers:
                self.console.print("No papers found.")

    def display_collections(self, collections: list[Collection]) -> None:
        """Display collections in a formatted table."""
        table = Table(title="Collections")
        table.add_column("ID", overflow="fold")
        table.add_column("Name", overflow="fold")
        table.add_column("Papers", justify="right")
        table.add_column("Thesis", overflow="fold")

        for c in collections:
            table.add_row(c.id, c.name, str(c.papers_count), c.thesis or "-")

        self.console.print(table)
        if not collections:
            self.console.print("No collections yet.")

    def upload_report(self, outcomes: list[UploadOutcome], report: BatchReport) -> None:
        """Print per-paper failures, then success and error counts separately."""
        for outcome in outcomes:
            if not outcome.ok:
                self.console.print(f"[red]✗[/red] {outcome.title}: {outcome.message}")
        if report.succeeded:
            self.success(f"Uploaded: {report.succeeded}")
        if report.failed:
            self.error(f"Failed: {report.failed}")
        if not outcomes:
            self.warning("No papers with a PDF URL to upload.")

    def exported(self, count: int, filepath: Path) -> None:
        """Print export summary."""
        self.console.print(f"[green]Exported[/green] {count} citations → {filepath}")
