"""NoteDB: searchable snapshot of the note collection.

An in-memory DuckDB table mirroring the index, for full-text search
integrations that want a read-only copy of every note (id, title, body,
tags, timestamps).  Subscribe it to a :class:`NoteIndex` and it follows
every load, add, update and removal.

Hook calls arrive on whichever thread mutates the index, including the
debounce timer thread.  Every use of the connection goes through one lock,
so reads from the caller's thread never overlap those writes.

Usage::

    db = NoteDB()
    index.subscribe(db)
    index.load_notes()

    hits = db.search("zettel")                 # list of note ids, newest first
    df = db.query("SELECT id, title FROM notes WHERE list_contains(tags, 'ideas')")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING

import duckdb
import polars as pl

from zettelvault.note import Note

if TYPE_CHECKING:
    from zettelvault.index import NoteIndex

logger = logging.getLogger(__name__)


class NoteDB:
    """In-memory DuckDB database over note metadata and text."""

    def __init__(self, notes: Iterable[Note] = ()) -> None:
        self.conn: duckdb.DuckDBPyConnection = duckdb.connect(":memory:")
        self._lock = threading.RLock()
        self._create_schema()
        self.index_notes(notes)

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def _create_schema(self) -> None:
        self._execute("""
            CREATE OR REPLACE TABLE notes (
                id           VARCHAR PRIMARY KEY,
                title        VARCHAR,
                body         TEXT,
                tags         VARCHAR[],
                created_at   TIMESTAMPTZ,
                updated_at   TIMESTAMPTZ,
                filename     VARCHAR,
                text_content TEXT
            )
        """)

    @staticmethod
    def _row(note: Note) -> tuple:
        return (
            note.id,
            note.display_title,
            note.body,
            list(note.tags),
            note.created_at,
            note.updated_at,
            note.filename,
            f"{note.title} {note.body} {' '.join(note.tags)}",
        )

    def _execute(self, sql: str, params: list | None = None) -> duckdb.DuckDBPyConnection:
        with self._lock:
            return self.conn.execute(sql, params or [])

    def refresh(self, notes: Iterable[Note]) -> None:
        """Replace the whole table with *notes*."""
        with self._lock:
            self.remove_all()
            self.index_notes(notes)

    def index_note(self, note: Note) -> None:
        self.index_notes([note])

    def index_notes(self, notes: Iterable[Note]) -> None:
        rows = [self._row(note) for note in notes]
        if rows:
            with self._lock:
                self.conn.executemany("INSERT OR REPLACE INTO notes VALUES (?,?,?,?,?,?,?,?)", rows)

    def remove_note(self, note: Note) -> None:
        self._execute("DELETE FROM notes WHERE id = ?", [note.id])

    def remove_all(self) -> None:
        self._execute("DELETE FROM notes")

    # ------------------------------------------------------------------
    # Index observer hooks
    # ------------------------------------------------------------------

    def on_load(self, index: "NoteIndex") -> None:
        self.refresh(index.snapshot())
        logger.debug("Search snapshot refreshed with %d notes", self.count())

    def on_note_indexed(self, note: Note) -> None:
        self.index_note(note)

    def on_note_removed(self, note: Note) -> None:
        self.remove_note(note)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(self, sql: str, params: list | None = None) -> pl.DataFrame:
        """Run a raw SQL query and return a Polars DataFrame."""
        with self._lock:
            return self.conn.execute(sql, params or []).pl()

    def search(self, text: str) -> list[str]:
        """Ids of notes whose title, body or tags contain *text*, newest first."""
        with self._lock:
            rows = self.conn.execute(
                """
                SELECT id FROM notes
                WHERE contains(lower(text_content), lower(?))
                ORDER BY updated_at DESC, id
                """,
                [text],
            ).fetchall()
        return [r[0] for r in rows]

    def count(self) -> int:
        with self._lock:
            return self.conn.execute("SELECT COUNT(*) FROM notes").fetchone()[0]

    def tag_counts(self, ids: Iterable[str] | None = None) -> pl.DataFrame:
        """Tag and ``note_count`` columns in tag order, like ``NoteIndex.tag_counts``.

        Pass *ids* (for example :meth:`search` hits) to count only those notes.
        """
        where, params = "", []
        if ids is not None:
            ids = list(ids)
            where, params = ("WHERE list_contains(?, id)", [ids]) if ids else ("WHERE false", [])
        with self._lock:
            return self.conn.execute(
                f"""
                SELECT tag, COUNT(*) AS note_count
                FROM (SELECT unnest(tags) AS tag FROM notes {where})
                GROUP BY tag
                ORDER BY tag
                """,
                params,
            ).pl()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        with self._lock:
            self.conn.close()

    def __enter__(self) -> "NoteDB":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
