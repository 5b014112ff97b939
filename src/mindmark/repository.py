"""MindRepository: in-memory index of every outline in a directory."""

from __future__ import annotations

import logging
from pathlib import Path

from mindmark.model import Note, Outline
from mindmark.ontology import Ontology, load_ontology
from mindmark.representation import MarkdownOutlineRepresentation

logger = logging.getLogger(__name__)


class MindRepository:
    """Scans a directory of markdown outlines and builds a tag index."""

    def __init__(self, repo_dir: Path, ontology: Ontology | None = None) -> None:
        self.repo_dir = Path(repo_dir)
        self.ontology = ontology or load_ontology()
        self.representation = MarkdownOutlineRepresentation(self.ontology)
        self.outlines: dict[str, Outline] = {}
        self.tags: dict[str, list[str]] = {}

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def build(self) -> None:
        """(Re-)scan the repository and rebuild the indexes."""
        self.outlines = {}
        for path in sorted(self.repo_dir.glob("**/*.md")):
            try:
                outline = self.representation.outline_from_file(path)
            except (OSError, UnicodeDecodeError) as exc:
                # Skip unreadable files so the rest of the repository loads
                logger.warning("Failed to load outline %s: %s", path.name, exc)
                continue
            self.outlines[outline.key] = outline
        self._build_tags()
        logger.info("Loaded %d outlines from %s", len(self.outlines), self.repo_dir)

    def _build_tags(self) -> None:
        self.tags = {}
        for key, outline in self.outlines.items():
            tags = list(outline.tags)
            for note in outline.notes:
                tags.extend(note.tags)
            for tag in tags:
                keys = self.tags.setdefault(tag.name, [])
                if key not in keys:
                    keys.append(key)

    def save(self, outline: Outline) -> None:
        """Write *outline* back to its storage key."""
        if not outline.key:
            raise ValueError(f"Outline '{outline.title}' has no storage key")
        path = Path(outline.key)
        text = self.representation.to(outline)
        path.write_text(text, encoding="utf-8")
        outline.bytesize = len(text.encode("utf-8"))
        self.outlines[outline.key] = outline
        self._build_tags()

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def search(self, query: str) -> list[Outline]:
        """Case-insensitive search across outline/note titles and descriptions."""
        q = query.lower()
        return [o for o in self.outlines.values() if _matches(o, q) or any(_matches(n, q) for n in o.notes)]

    def outlines_with_tag(self, tag: str) -> list[Outline]:
        keys = self.tags.get(tag, [])
        return [self.outlines[k] for k in keys if k in self.outlines]

    def notes_with_tag(self, tag: str) -> list[tuple[Outline, Note]]:
        """Return ``(outline, note)`` pairs for every note carrying *tag*."""
        return [
            (outline, note)
            for outline in self.outlines_with_tag(tag)
            for note in outline.notes
            if any(t.name == tag for t in note.tags)
        ]


def _matches(entity: Outline | Note, q: str) -> bool:
    return q in entity.title.lower() or any(q in line.lower() for line in entity.description)
