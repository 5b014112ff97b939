"""Core Outline / Note dataclasses and the interned taxonomy values."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Tag:
    """Interned tag; only :class:`~mindmark.ontology.Ontology` creates these."""

    name: str


@dataclass(frozen=True)
class OutlineType:
    name: str
    color: str | None = None


@dataclass(frozen=True)
class NoteType:
    name: str
    color: str | None = None


def _add_tag(tags: list[Tag], tag: Tag) -> None:
    if not any(t is tag for t in tags):
        tags.append(tag)


@dataclass(eq=False)
class Note:
    """A single section of an outline."""

    type: NoteType
    title: str = ""
    depth: int = 0
    created: datetime | None = None
    modified: datetime | None = None
    read: datetime | None = None
    revision: int = 0
    reads: int = 0
    progress: int = 0
    tags: list[Tag] = field(default_factory=list)
    description: list[str] = field(default_factory=list)
    _outline: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self._outline is not None and not isinstance(self._outline, weakref.ref):
            self._outline = weakref.ref(self._outline)

    @property
    def outline(self) -> "Outline | None":
        """Owning outline, or ``None`` for a standalone note."""
        return self._outline() if self._outline is not None else None

    @outline.setter
    def outline(self, outline: "Outline | None") -> None:
        self._outline = weakref.ref(outline) if outline is not None else None

    def add_tag(self, tag: Tag) -> None:
        _add_tag(self.tags, tag)

    def add_description_line(self, line: str) -> None:
        self.description.append(line)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "type": self.type.name,
            "depth": self.depth,
            "created": self.created,
            "modified": self.modified,
            "read": self.read,
            "revision": self.revision,
            "reads": self.reads,
            "progress": self.progress,
            "tags": [t.name for t in self.tags],
            "description": "\n".join(self.description),
        }


@dataclass(eq=False)
class Outline:
    """A whole markdown document: header fields plus a flat list of notes."""

    type: OutlineType
    title: str = ""
    created: datetime | None = None
    modified: datetime | None = None
    read: datetime | None = None
    revision: int = 0
    reads: int = 0
    importance: int = 0
    urgency: int = 0
    progress: int = 0
    tags: list[Tag] = field(default_factory=list)
    description: list[str] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)
    #: Canonical file path; set by the file-level loader only
    key: str = ""
    bytesize: int = 0
    modified_pretty: str = ""

    def add_note(self, note: Note) -> None:
        note.outline = self
        self.notes.append(note)

    def add_tag(self, tag: Tag) -> None:
        _add_tag(self.tags, tag)

    def add_description_line(self, line: str) -> None:
        self.description.append(line)

    def complete_properties(self, file_modified: datetime) -> None:
        """Fill timestamps the document did not carry from the file mtime."""
        if self.created is None:
            self.created = file_modified
        if self.modified is None:
            self.modified = file_modified
        if self.read is None:
            self.read = self.modified

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "type": self.type.name,
            "created": self.created,
            "modified": self.modified,
            "read": self.read,
            "revision": self.revision,
            "reads": self.reads,
            "importance": self.importance,
            "urgency": self.urgency,
            "progress": self.progress,
            "tags": [t.name for t in self.tags],
            "bytesize": self.bytesize,
            "notes": len(self.notes),
        }
