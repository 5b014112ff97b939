"""Taxonomy registry: outline types, note types and interned tags.

The registry is loaded once per process and shared by every parse.  Types
come either from the built-in taxonomy or from a YAML file::

    default_outline_type: Outline
    default_note_type: Note
    outline_types: [Outline, Grow, Project]
    note_types:
      - Note
      - {name: Task, color: "#00aa00"}

:func:`load_ontology` resolves the file from its argument or the
``MINDMARK_ONTOLOGY`` environment variable.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, Generic, TypeVar

import yaml

from mindmark.model import NoteType, OutlineType, Tag

logger = logging.getLogger(__name__)

ONTOLOGY_ENV = "MINDMARK_ONTOLOGY"

DEFAULT_OUTLINE_TYPES = ["Outline", "Grow", "Project", "Knowledge"]
DEFAULT_NOTE_TYPES = [
    "Note",
    "Action",
    "Task",
    "Idea",
    "Question",
    "Answer",
    "Problem",
    "Solution",
    "Conclusion",
    "Fact",
    "Goal",
    "Plan",
    "Reference",
    "Example",
    "Definition",
]

T = TypeVar("T", OutlineType, NoteType)


class OntologyError(ValueError):
    """Raised for an unusable taxonomy configuration."""


class TypeRegistry(Generic[T]):
    """Name → type lookup; ``get`` returns ``None`` on a miss."""

    def __init__(self, types: list[T]) -> None:
        self._types: dict[str, T] = {t.name: t for t in types}

    def get(self, name: str | None) -> T | None:
        if name is None:
            return None
        return self._types.get(name)

    def names(self) -> list[str]:
        return list(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)


class Ontology:
    """Shared store of interned types and tags."""

    def __init__(
        self,
        outline_types: list[OutlineType] | None = None,
        note_types: list[NoteType] | None = None,
        *,
        default_outline_type: str | None = None,
        default_note_type: str | None = None,
    ) -> None:
        outline_types = outline_types or [OutlineType(n) for n in DEFAULT_OUTLINE_TYPES]
        note_types = note_types or [NoteType(n) for n in DEFAULT_NOTE_TYPES]
        self.outline_types: TypeRegistry[OutlineType] = TypeRegistry(outline_types)
        self.note_types: TypeRegistry[NoteType] = TypeRegistry(note_types)

        default_outline = self.outline_types.get(default_outline_type or outline_types[0].name)
        default_note = self.note_types.get(default_note_type or note_types[0].name)
        if default_outline is None:
            raise OntologyError(f"Unknown default outline type '{default_outline_type}'")
        if default_note is None:
            raise OntologyError(f"Unknown default note type '{default_note_type}'")
        self.default_outline_type: OutlineType = default_outline
        self.default_note_type: NoteType = default_note

        self._tags: dict[str, Tag] = {}
        self._tags_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def find_or_create_tag(self, name: str) -> Tag:
        """Return the canonical :class:`Tag` for *name*, creating it on first use."""
        with self._tags_lock:
            tag = self._tags.get(name)
            if tag is None:
                tag = Tag(name)
                self._tags[name] = tag
                logger.debug("Interned new tag %r", name)
            return tag

    def find_tag(self, name: str) -> Tag | None:
        return self._tags.get(name)

    @property
    def tags(self) -> list[Tag]:
        return list(self._tags.values())

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ontology":
        if not isinstance(data, dict):
            raise OntologyError("Ontology configuration must be a mapping")
        return cls(
            [OutlineType(**_type_fields(t)) for t in data.get("outline_types") or []],
            [NoteType(**_type_fields(t)) for t in data.get("note_types") or []],
            default_outline_type=data.get("default_outline_type"),
            default_note_type=data.get("default_note_type"),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "Ontology":
        text = Path(path).read_text(encoding="utf-8")
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise OntologyError(f"Invalid ontology file {path}: {exc}") from exc
        return cls.from_dict(data)


def _type_fields(entry: Any) -> dict[str, Any]:
    if isinstance(entry, str):
        return {"name": entry}
    if isinstance(entry, dict) and isinstance(entry.get("name"), str):
        return {"name": entry["name"], "color": entry.get("color")}
    raise OntologyError(f"Invalid type entry: {entry!r}")


def load_ontology(path: Path | str | None = None) -> Ontology:
    """Load the taxonomy from *path*, ``$MINDMARK_ONTOLOGY`` or the built-ins."""
    source = path or os.environ.get(ONTOLOGY_ENV)
    if not source:
        return Ontology()
    logger.info("Loading ontology from %s", source)
    return Ontology.from_yaml(Path(source))
