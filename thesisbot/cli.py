"""Command-line interface handlers."""

import argparse
import asyncio
from typing import Optional

import httpx
from rich.progress import Progress, SpinnerColumn, TextColumn

from thesisbot.config import Settings
from thesisbot.console import ConsoleUI
from thesisbot.database.repository import CollectionRepository
from thesisbot.exceptions import ThesisBotError
from thesisbot.services.analysis_service import AnalysisClient
from thesisbot.services.citation_service import STYLES, CitationExporter
from thesisbot.services.concept_service import ConceptExtractor
from thesisbot.services.pdf_service import PdfProxy, UploadService, summarize_outcomes
from thesisbot.services.search_service import PaperSearch, ThesisSearchService, build_provider


class ThesisBotCLI:
    """CLI application for thesisbot."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize CLI with settings.

        Args:
            settings: Application settings (loads from disk if not provided)
        """
        self.settings = settings or Settings.load()
        self.ui = ConsoleUI()
        self.repo = CollectionRepository(self.settings.db_path)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.settings.request_timeout)

    def cmd_concepts(self, thesis: str) -> None:
        """Print the concepts the backend extracts from a thesis."""

        async def run() -> list[str]:
            async with self._client() as client:
                return await ConceptExtractor(AnalysisClient(self.settings, client)).extract(thesis)

        try:
            self.ui.concepts(asyncio.run(run()))
        except ThesisBotError as e:
            self.ui.error(e.message)

    def cmd_search(self, thesis: str, collection_id: Optional[str] = None) -> None:
        """Run a thesis search; optionally save every found paper to a collection."""

        async def run():
            async with self._client() as client:
                service = ThesisSearchService(
                    ConceptExtractor(AnalysisClient(self.settings, client)),
                    PaperSearch(build_provider(self.settings, client), limit=self.settings.search_limit),
                )
                return await service.run(thesis)

        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            console=self.ui.console,
            transient=True,
        ) as progress:
            progress.add_task("Searching papers...", total=None)
            try:
                result = asyncio.run(run())
            except ThesisBotError as e:
                self.ui.error(f"Search failed: {e.message}")
                return

        self.ui.concepts(result.concepts)
        self.ui.display_groups(result.groups)

        if collection_id:
            papers = [p for g in result.groups for p in g.papers]
            try:
                added = self.repo.add_papers(collection_id, papers)
            except ThesisBotError as e:
                self.ui.error(e.message)
                return
            self.ui.success(f"Added {added} papers to collection {collection_id}")

    def cmd_collections(self, action: str, name: Optional[str] = None,
                        thesis: Optional[str] = None, collection_id: Optional[str] = None) -> None:
        """List, create or delete collections."""
        if action == "create":
            if not name:
                self.ui.error("--name is required")
                return
            collection = self.repo.create_collection(name, thesis)
            self.ui.success(f"Created collection {collection.id}")
        elif action == "delete":
            if not collection_id or not self.repo.delete_collection(collection_id):
                self.ui.error(f"Collection not found: {collection_id}")
                return
            self.ui.success(f"Deleted collection {collection_id}")
        else:
            self.ui.display_collections(self.repo.list_collections())

    def cmd_upload(self, collection_id: str) -> None:
        """Upload every paper of a collection that has a PDF to the backend."""
        collection = self.repo.get_collection(collection_id)
        if collection is None:
            self.ui.error(f"Collection not found: {collection_id}")
            return

        async def run():
            async with self._client() as client:
                uploader = UploadService(
                    PdfProxy(client, self.settings.pdf_user_agent, self.settings.request_timeout),
                    AnalysisClient(self.settings, client),
                )
                return await uploader.upload_batch(collection.papers)

        outcomes = asyncio.run(run())
        self.ui.upload_report(outcomes, summarize_outcomes(outcomes))

    def cmd_cite(self, collection_id: str, style: str = "APA") -> None:
        """Export a collection's citations to markdown."""
        collection = self.repo.get_collection(collection_id)
        if collection is None:
            self.ui.error(f"Collection not found: {collection_id}")
            return
        filepath = CitationExporter(self.settings.export_dir).export(collection, style)
        self.ui.exported(len(collection.papers), filepath)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="thesisbot",
        description="Thesis → concepts → papers → analysis backend",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # concepts command
    concepts_parser = subparsers.add_parser("concepts", help="Extract concepts from a thesis")
    concepts_parser.add_argument("thesis", help="Thesis statement")

    # search command
    search_parser = subparsers.add_parser("search", help="Search papers for each concept of a thesis")
    search_parser.add_argument("thesis", help="Thesis statement")
    search_parser.add_argument(
        "--save-to",
        dest="collection_id",
        default=None,
        help="Collection ID to add all found papers to",
    )

    # collections command
    coll_parser = subparsers.add_parser("collections", help="Manage collections")
    coll_parser.add_argument(
        "action",
        nargs="?",
        default="list",
        choices=["list", "create", "delete"],
        help="Action (default: list)",
    )
    coll_parser.add_argument("--name", default=None, help="Name for a new collection")
    coll_parser.add_argument("--thesis", default=None, help="Thesis for a new collection")
    coll_parser.add_argument("--id", dest="collection_id", default=None, help="Collection ID to delete")

    # upload command
    upload_parser = subparsers.add_parser("upload", help="Upload a collection's PDFs to the backend")
    upload_parser.add_argument("collection_id", help="Collection ID")

    # cite command
    cite_parser = subparsers.add_parser("cite", help="Export a collection's citations to markdown")
    cite_parser.add_argument("collection_id", help="Collection ID")
    cite_parser.add_argument(
        "--style",
        default="APA",
        choices=list(STYLES),
        help="Citation style (default: APA)",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    cli = ThesisBotCLI()

    if args.command == "concepts":
        cli.cmd_concepts(args.thesis)
    elif args.command == "search":
        cli.cmd_search(args.thesis, args.collection_id)
    elif args.command == "collections":
        cli.cmd_collections(args.action, args.name, args.thesis, args.collection_id)
    elif args.command == "upload":
        cli.cmd_upload(args.collection_id)
    elif args.command == "cite":
        cli.cmd_cite(args.collection_id, args.style)
