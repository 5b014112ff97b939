"""Unit tests for mindmark.model and mindmark.timestamps."""

import gc
from datetime import datetime

from mindmark.model import Note, NoteType, Outline, OutlineType, Tag
from mindmark.timestamps import datetime_to_pretty, datetime_to_string, string_to_datetime


class TestOutline:
    def test_add_note_sets_back_reference(self):
        outline = Outline(type=OutlineType("Outline"))
        note = Note(type=NoteType("Note"))
        outline.add_note(note)
        assert outline.notes == [note]
        assert note.outline is outline

    def test_back_reference_does_not_own(self):
        outline = Outline(type=OutlineType("Outline"))
        note = Note(type=NoteType("Note"))
        outline.add_note(note)
        del outline
        gc.collect()
        assert note.outline is None

    def test_add_tag_ignores_duplicates(self):
        outline = Outline(type=OutlineType("Outline"))
        tag = Tag("x")
        outline.add_tag(tag)
        outline.add_tag(tag)
        assert outline.tags == [tag]

    def test_complete_properties_keeps_existing(self):
        created = datetime(2018, 1, 1)
        mtime = datetime(2020, 1, 1)
        outline = Outline(type=OutlineType("Outline"), created=created)
        outline.complete_properties(mtime)
        assert outline.created == created
        assert outline.modified == mtime
        assert outline.read == mtime


class TestTimestamps:
    def test_format_and_parse(self):
        value = datetime(2018, 1, 2, 3, 4, 5)
        assert datetime_to_string(value) == "2018-01-02 03:04:05"
        assert string_to_datetime("2018-01-02 03:04:05") == value

    def test_unset(self):
        assert datetime_to_string(None) == ""
        assert string_to_datetime("") is None
        assert string_to_datetime("not a date") is None

    def test_pretty(self):
        now = datetime(2024, 6, 15, 12, 0, 0)
        assert datetime_to_pretty(datetime(2024, 6, 15, 9, 30), now) == "09:30"
        assert datetime_to_pretty(datetime(2024, 2, 3, 9, 30), now) == "Feb 03"
        assert datetime_to_pretty(datetime(2019, 2, 3), now) == "2019-02-03"
        assert datetime_to_pretty(None, now) == ""
