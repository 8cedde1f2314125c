"""Collection repository for database operations."""

import json
import sqlite3
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from thesisbot.exceptions import CollectionNotFoundError
from thesisbot.models.collection import Collection, Message
from thesisbot.models.paper import Author, Paper


def _now_ms() -> int:
    return int(time.time() * 1000)


class CollectionRepository:
    """Repository for collections, their papers and chat messages (SQLite)."""

    def __init__(self, db_path: Path):
        """Initialize repository with database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._init_db()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS collections (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    thesis TEXT,
                    papers_count INTEGER NOT NULL DEFAULT 0,
                    last_updated INTEGER NOT NULL
                );
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS papers (
                    collection_id TEXT NOT NULL REFERENCES collections(id) ON DELETE CASCADE,
                    paper_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    title TEXT NOT NULL,
                    url TEXT,
                    pdf_url TEXT,
                    type TEXT,
                    year INTEGER,
                    authors TEXT NOT NULL DEFAULT '[]',
                    UNIQUE(collection_id, paper_id)
                );
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS messages (
                    id TEXT PRIMARY KEY,
                    collection_id TEXT NOT NULL REFERENCES collections(id) ON DELETE CASCADE,
                    paper_id TEXT NOT NULL DEFAULT '',
                    content TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    is_user INTEGER NOT NULL
                );
            """)
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_papers_collection ON papers(collection_id);")
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_messages_collection ON messages(collection_id, paper_id);"
            )
            conn.commit()

    # ── Row mapping ───────────────────────────────────────────────────

    @staticmethod
    def _row_to_paper(row: sqlite3.Row) -> Paper:
        authors = [Author.from_dict(a) for a in json.loads(row["authors"] or "[]")]
        return Paper(
            paper_id=row["paper_id"],
            title=row["title"],
            url=row["url"] or "",
            pdf_url=row["pdf_url"],
            type=row["type"] or "Paper",
            year=row["year"],
            authors=authors,
        )

    @staticmethod
    def _row_to_collection(row: sqlite3.Row, papers: Optional[list[Paper]] = None) -> Collection:
        return Collection(
            id=row["id"],
            name=row["name"],
            thesis=row["thesis"],
            papers_count=row["papers_count"],
            last_updated=row["last_updated"],
            papers=papers or [],
        )

    # ── Collections ───────────────────────────────────────────────────

    def list_collections(self) -> list[Collection]:
        """Return all collections (without papers), most recently updated first."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM collections ORDER BY last_updated DESC"
            ).fetchall()
        return [self._row_to_collection(row) for row in rows]

    def get_collection(self, collection_id: str) -> Optional[Collection]:
        """Return a collection with its papers, or None if it does not exist."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM collections WHERE id = ?", (collection_id,)
            ).fetchone()
            if row is None:
                return None
            paper_rows = conn.execute(
                "SELECT * FROM papers WHERE collection_id = ? ORDER BY position ASC",
                (collection_id,),
            ).fetchall()
        return self._row_to_collection(row, [self._row_to_paper(r) for r in paper_rows])

    def create_collection(self, name: str, thesis: Optional[str] = None) -> Collection:
        """Create an empty collection and return it."""
        collection = Collection(
            id=uuid.uuid4().hex[:20],
            name=name,
            thesis=thesis or None,
            papers_count=0,
            last_updated=_now_ms(),
        )
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO collections (id, name, thesis, papers_count, last_updated)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    collection.id,
                    collection.name,
                    collection.thesis,
                    collection.papers_count,
                    collection.last_updated,
                ),
            )
            conn.commit()
        return collection

    def delete_collection(self, collection_id: str) -> bool:
        """Delete a collection with its papers and messages.

        Returns:
            True if a collection was deleted
        """
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM collections WHERE id = ?", (collection_id,))
            conn.commit()
            return cursor.rowcount > 0

    # ── Papers ────────────────────────────────────────────────────────

    def add_papers(self, collection_id: str, papers: list[Paper]) -> int:
        """Append papers to a collection, skipping ids already present.

        Args:
            collection_id: Target collection
            papers: Papers to add (the transient ``selected`` flag is dropped)

        Returns:
            Number of papers actually added

        Raises:
            CollectionNotFoundError: If the collection does not exist
        """
        with self._connection() as conn:
            cursor = conn.cursor()
            if cursor.execute(
                "SELECT 1 FROM collections WHERE id = ?", (collection_id,)
            ).fetchone() is None:
                raise CollectionNotFoundError(collection_id)

            position = cursor.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 AS next FROM papers WHERE collection_id = ?",
                (collection_id,),
            ).fetchone()["next"]

            added = 0
            for paper in papers:
                cursor.execute(
                    """
                    INSERT OR IGNORE INTO papers
                    (collection_id, paper_id, position, title, url, pdf_url, type, year, authors)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        collection_id,
                        paper.paper_id,
                        position,
                        paper.title,
                        paper.url,
                        paper.pdf_url,
                        paper.type,
                        paper.year,
                        json.dumps([a.to_dict() for a in paper.authors]),
                    ),
                )
                if cursor.rowcount > 0:
                    added += 1
                    position += 1

            cursor.execute(
                """
                UPDATE collections
                SET papers_count = (SELECT COUNT(*) FROM papers WHERE collection_id = ?),
                    last_updated = ?
                WHERE id = ?
                """,
                (collection_id, _now_ms(), collection_id),
            )
            conn.commit()
            return added

    def get_papers(self, collection_id: str) -> list[Paper]:
        """Return a collection's papers in insertion order.

        Raises:
            CollectionNotFoundError: If the collection does not exist
        """
        collection = self.get_collection(collection_id)
        if collection is None:
            raise CollectionNotFoundError(collection_id)
        return collection.papers

    def get_paper(self, collection_id: str, paper_id: str) -> Optional[Paper]:
        """Return one paper of a collection, or None."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM papers WHERE collection_id = ? AND paper_id = ?",
                (collection_id, paper_id),
            ).fetchone()
        return self._row_to_paper(row) if row else None

    # ── Messages ──────────────────────────────────────────────────────

    def get_messages(self, collection_id: str, paper_id: Optional[str] = None) -> list[Message]:
        """Return chat messages of a collection in insertion order.

        Args:
            collection_id: Collection to read
            paper_id: If set, only messages about this paper; otherwise
                only collection-level messages
        """
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM messages
                WHERE collection_id = ? AND paper_id = ?
                ORDER BY rowid ASC
                """,
                (collection_id, paper_id or ""),
            ).fetchall()
        return [
            Message(
                id=row["id"],
                content=row["content"],
                timestamp=row["timestamp"],
                is_user=bool(row["is_user"]),
                paper_id=row["paper_id"],
            )
            for row in rows
        ]

    def add_messages(self, collection_id: str, messages: list[Message]) -> None:
        """Store chat messages against a collection.

        Raises:
            CollectionNotFoundError: If the collection does not exist
        """
        with self._connection() as conn:
            cursor = conn.cursor()
            if cursor.execute(
                "SELECT 1 FROM collections WHERE id = ?", (collection_id,)
            ).fetchone() is None:
                raise CollectionNotFoundError(collection_id)
            cursor.executemany(
                """
                INSERT OR REPLACE INTO messages (id, collection_id, paper_id, content, timestamp, is_user)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (m.id, collection_id, m.paper_id or "", m.content, m.timestamp, int(m.is_user))
                    for m in messages
                ],
            )
            cursor.execute(
                "UPDATE collections SET last_updated = ? WHERE id = ?",
                (_now_ms(), collection_id),
            )
            conn.commit()
