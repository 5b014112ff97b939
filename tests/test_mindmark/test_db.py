"""Unit tests for mindmark.db.MindDB."""

import textwrap
from pathlib import Path

import duckdb
import polars as pl
import pytest

from mindmark.db import MindDB
from mindmark.ontology import Ontology
from mindmark.repository import MindRepository

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _write(directory: Path, name: str, content: str) -> None:
    (directory / f"{name}.md").write_text(textwrap.dedent(content), encoding="utf-8")


@pytest.fixture()
def db(tmp_path: Path) -> MindDB:
    _write(tmp_path, "alpha", """\
        # Alpha <!-- Metadata: tags: python,tutorial; type: Outline; importance: 5/5; urgency: 1/5; -->
        ## Install <!-- Metadata: tags: python; type: Task; progress: 100%; -->
        ## Why <!-- Metadata: type: Question; -->
        ### Because <!-- Metadata: type: Answer; -->
    """)
    _write(tmp_path, "beta", """\
        # Beta <!-- Metadata: tags: python; type: Grow; importance: 2/5; -->
        ## Later <!-- Metadata: type: Task; progress: 10%; -->
    """)
    _write(tmp_path, "gamma", """\
        # Gamma <!-- Metadata: tags: data; type: Outline; -->
    """)
    repo = MindRepository(tmp_path, Ontology())
    repo.build()
    return MindDB(repo)


# ---------------------------------------------------------------------------
# query()
# ---------------------------------------------------------------------------


class TestMindDBQuery:
    def test_basic_select(self, db: MindDB):
        df = db.query("SELECT title FROM outlines ORDER BY title")
        assert isinstance(df, pl.DataFrame)
        assert df["title"].to_list() == ["Alpha", "Beta", "Gamma"]

    def test_note_count(self, db: MindDB):
        df = db.query("SELECT title, note_count FROM outlines ORDER BY title")
        assert df["note_count"].to_list() == [3, 1, 0]

    def test_invalid_sql_raises(self, db: MindDB):
        with pytest.raises(duckdb.Error):
            db.query("SELECT * FROM no_such_table")


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


class TestMindDBViews:
    def test_outlines_view_default_columns(self, db: MindDB):
        df = db.outlines_view()
        assert df.columns == ["title", "type", "importance", "urgency", "progress", "note_count"]
        assert df.height == 3

    def test_outlines_view_filter_tag(self, db: MindDB):
        df = db.outlines_view(filter_tag="python")
        assert df["title"].to_list() == ["Alpha", "Beta"]

    def test_outlines_view_order_by(self, db: MindDB):
        df = db.outlines_view(order_by="importance DESC")
        assert df["title"].to_list()[0] == "Alpha"

    def test_notes_view_keeps_document_order(self, db: MindDB):
        key = db.query("SELECT key FROM outlines WHERE title = 'Alpha'")["key"][0]
        df = db.notes_view(outline_key=key)
        assert df["title"].to_list() == ["Install", "Why", "Because"]
        assert df["depth"].to_list() == [0, 0, 1]

    def test_notes_view_by_type(self, db: MindDB):
        df = db.notes_view(note_type="Task")
        assert sorted(df["title"].to_list()) == ["Install", "Later"]

    def test_tag_counts(self, db: MindDB):
        rows = db.tag_counts().to_dicts()
        assert rows[0] == {"tag": "python", "total": 3}
        assert {"tag": "data", "total": 1} in rows

    def test_type_counts(self, db: MindDB):
        rows = db.type_counts().to_dicts()
        assert rows[0] == {"type": "Task", "total": 2}


class TestMindDBLifecycle:
    def test_context_manager_closes(self, tmp_path: Path):
        repo = MindRepository(tmp_path, Ontology())
        repo.build()
        with MindDB(repo) as db:
            assert db.query("SELECT COUNT(*) AS n FROM outlines")["n"][0] == 0
        with pytest.raises(duckdb.Error):
            db.query("SELECT 1")
