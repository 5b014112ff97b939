"""MindDB — table views over the outlines and notes of a repository.

Uses DuckDB (in-memory) as a query engine over outline and note metadata and
returns :mod:`polars` DataFrames.

Usage::

    db = MindDB(repository)

    # Free-form SQL
    df = db.query("SELECT title FROM outlines WHERE 'python' = ANY(tags)")

    # Pre-built views
    outlines = db.outlines_view(filter_tag="python", order_by="importance DESC")
    tasks    = db.notes_view(note_type="Task")
    tags     = db.tag_counts()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import duckdb
import polars as pl

if TYPE_CHECKING:
    from mindmark.repository import MindRepository


class MindDB:
    """In-memory DuckDB database over repository outlines and notes."""

    def __init__(self, repository: "MindRepository") -> None:
        self.conn: duckdb.DuckDBPyConnection = duckdb.connect(":memory:")
        self.refresh(repository)

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def refresh(self, repository: "MindRepository") -> None:
        """(Re-)populate the database from *repository* (call after a rebuild)."""
        self._repository = repository
        self._create_schema()
        self._load()

    def _create_schema(self) -> None:
        self.conn.execute("""
            CREATE OR REPLACE TABLE outlines (
                key         VARCHAR PRIMARY KEY,
                title       VARCHAR,
                type        VARCHAR,
                tags        VARCHAR[],
                created     TIMESTAMP,
                modified    TIMESTAMP,
                read        TIMESTAMP,
                revision    INTEGER,
                reads       INTEGER,
                importance  INTEGER,
                urgency     INTEGER,
                progress    INTEGER,
                bytesize    BIGINT,
                note_count  INTEGER
            )
        """)
        self.conn.execute("""
            CREATE OR REPLACE TABLE notes (
                outline_key VARCHAR,
                position    INTEGER,
                title       VARCHAR,
                type        VARCHAR,
                depth       INTEGER,
                tags        VARCHAR[],
                created     TIMESTAMP,
                modified    TIMESTAMP,
                revision    INTEGER,
                reads       INTEGER,
                progress    INTEGER
            )
        """)

    def _load(self) -> None:
        outlines = self._repository.outlines.values()
        outline_rows = [
            (
                o.key,
                o.title,
                o.type.name,
                [t.name for t in o.tags],
                o.created,
                o.modified,
                o.read,
                o.revision,
                o.reads,
                o.importance,
                o.urgency,
                o.progress,
                o.bytesize,
                len(o.notes),
            )
            for o in outlines
        ]
        note_rows = [
            (
                o.key,
                position,
                n.title,
                n.type.name,
                n.depth,
                [t.name for t in n.tags],
                n.created,
                n.modified,
                n.revision,
                n.reads,
                n.progress,
            )
            for o in outlines
            for position, n in enumerate(o.notes)
        ]
        if outline_rows:
            self.conn.executemany("INSERT INTO outlines VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?)", outline_rows)
        if note_rows:
            self.conn.executemany("INSERT INTO notes VALUES (?,?,?,?,?,?,?,?,?,?,?)", note_rows)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(self, sql: str) -> pl.DataFrame:
        """Run a raw SQL query and return a Polars DataFrame."""
        return self.conn.execute(sql).pl()

    # ------------------------------------------------------------------
    # Pre-built views
    # ------------------------------------------------------------------

    def outlines_view(
        self,
        *,
        filter_tag: str | None = None,
        columns: list[str] | None = None,
        order_by: str = "title",
    ) -> pl.DataFrame:
        """Return outlines as a Polars DataFrame, optionally filtered by tag.

        Parameters
        ----------
        filter_tag:
            Only include outlines that have this tag.
        columns:
            Which columns to include.  Defaults to
            ``title, type, importance, urgency, progress, note_count``.
        order_by:
            ORDER BY expression.
        """
        cols = ", ".join(columns) if columns else "title, type, importance, urgency, progress, note_count"
        where = ""
        params: list[str] = []
        if filter_tag:
            where = "WHERE list_contains(tags, ?)"
            params.append(filter_tag)
        safe_order = order_by.replace(";", "").replace("'", "")
        return self.conn.execute(f"SELECT {cols} FROM outlines {where} ORDER BY {safe_order}", params).pl()

    def notes_view(
        self,
        *,
        outline_key: str | None = None,
        note_type: str | None = None,
    ) -> pl.DataFrame:
        """Return notes in document order, optionally for one outline or type."""
        where_clauses: list[str] = []
        params: list[str] = []
        if outline_key:
            where_clauses.append("outline_key = ?")
            params.append(outline_key)
        if note_type:
            where_clauses.append("type = ?")
            params.append(note_type)
        where = f"WHERE {' AND '.join(where_clauses)}" if where_clauses else ""
        sql = (
            "SELECT outline_key, position, title, type, depth, tags, progress "
            f"FROM notes {where} ORDER BY outline_key, position"
        )
        return self.conn.execute(sql, params).pl()

    def tag_counts(self) -> pl.DataFrame:
        """Return a tag → count table over outlines and notes, by frequency."""
        return self.conn.execute(
            """
            SELECT tag, COUNT(*) AS total
            FROM (
                SELECT unnest(tags) AS tag FROM outlines
                UNION ALL
                SELECT unnest(tags) AS tag FROM notes
            )
            GROUP BY tag
            ORDER BY total DESC, tag
            """
        ).pl()

    def type_counts(self) -> pl.DataFrame:
        """Return a note type → count table sorted by frequency."""
        return self.conn.execute(
            "SELECT type, COUNT(*) AS total FROM notes GROUP BY type ORDER BY total DESC, type"
        ).pl()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "MindDB":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
