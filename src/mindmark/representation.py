"""Markdown ⇄ Outline/Note representation.

:class:`MarkdownOutlineRepresentation` turns a Section AST into an
:class:`~mindmark.model.Outline` with its notes, and renders outlines and
notes back to canonical markdown.  Rendered documents re-parse to the same
field values, and rendering a re-parsed document reproduces it byte for byte.

Usage::

    representation = MarkdownOutlineRepresentation(load_ontology())
    outline = representation.outline_from_file(Path("notebook.md"))
    text = representation.to(outline)
"""

from __future__ import annotations

import logging
from pathlib import Path

from mindmark.markdown import UNTITLED, Markdown, SectionMetadata, SectionNode
from mindmark.model import Note, Outline, Tag
from mindmark.ontology import Ontology
from mindmark.timestamps import datetime_to_pretty, datetime_to_string

logger = logging.getLogger(__name__)


def tags_to_string(tags: list[Tag]) -> str:
    """Join tag names with ``,`` (no spaces)."""
    return ",".join(t.name for t in tags)


class MarkdownOutlineRepresentation:
    """Builds outlines/notes from markdown and renders them back."""

    def __init__(self, ontology: Ontology) -> None:
        self.ontology = ontology

    # ------------------------------------------------------------------
    # Markdown → Outline
    # ------------------------------------------------------------------

    def outline(self, ast: list[SectionNode] | None) -> Outline:
        """Build an outline from a full Section AST, consuming it.

        Node 0 is the outline header; every further node becomes a note.
        ``None`` or an empty AST gives an empty outline of the default type.
        """
        outline = Outline(type=self.ontology.default_outline_type)
        if not ast:
            return outline

        node = ast[0]
        meta = node.metadata
        if node.text:
            outline.title = node.text
        outline.type = self.ontology.outline_types.get(meta.type) or self.ontology.default_outline_type
        if meta.type and outline.type.name != meta.type:
            logger.debug("Unknown outline type %r, using %r", meta.type, outline.type.name)
        outline.created = meta.created
        outline.modified = meta.modified
        outline.revision = meta.revision
        outline.read = meta.read
        outline.reads = meta.reads
        outline.importance = meta.importance
        outline.urgency = meta.urgency
        outline.progress = meta.progress
        self._add_tags(outline, meta)
        outline.description = node.move_body() or []

        if len(ast) > 1:
            self.note(ast, 1, outline)

        ast.clear()
        return outline

    def outline_from_file(self, path: Path | str) -> Outline:
        """Load an outline file and stamp its file-level properties."""
        md = Markdown(path)
        md.from_file()
        outline = self.outline(md.move_ast())

        outline.key = str(md.file_path)
        outline.bytesize = md.file_size
        if md.modified is not None:
            outline.complete_properties(md.modified)
        outline.modified_pretty = datetime_to_pretty(outline.modified)
        if not outline.title:
            outline.title = Path(outline.key).stem
        return outline

    def header(self, text: str) -> Outline:
        """Build an outline from markdown *text*."""
        md = Markdown()
        md.from_string(text)
        return self.outline(md.move_ast())

    # ------------------------------------------------------------------
    # Markdown → Note
    # ------------------------------------------------------------------

    def note(
        self,
        ast: list[SectionNode],
        start: int = 0,
        outline: Outline | None = None,
    ) -> Note | None:
        """Build one note per node of ``ast[start:]``.

        Notes are appended to *outline* when given.  Returns the last note
        built, or ``None`` when there was nothing to build.
        """
        note: Note | None = None
        for node in ast[start:]:
            meta = node.metadata
            note_type = self.ontology.note_types.get(meta.type) or self.ontology.default_note_type
            note = Note(type=note_type)
            if node.text:
                note.title = node.text
            note.depth = node.depth
            note.description = node.move_body() or []
            note.created = meta.created
            note.modified = meta.modified
            note.revision = meta.revision
            note.read = meta.read
            note.reads = meta.reads
            note.progress = meta.progress
            self._add_tags(note, meta)
            if outline is not None:
                outline.add_note(note)
        return note

    def note_from_text(self, text: str) -> Note | None:
        """Build a standalone note from a markdown fragment."""
        md = Markdown()
        md.from_string(text)
        ast = md.move_ast()
        if not ast:
            return None
        result = self.note(ast)
        ast.clear()
        return result

    def note_from_file(self, path: Path | str) -> Note | None:
        text = Path(path).read_text(encoding="utf-8-sig")
        return self.note_from_text(text)

    def _add_tags(self, entity: Outline | Note, meta: SectionMetadata) -> None:
        for name in meta.tags:
            entity.add_tag(self.ontology.find_or_create_tag(name))

    # ------------------------------------------------------------------
    # Outline / Note → Markdown
    # ------------------------------------------------------------------

    def to_header(self, outline: Outline | None) -> str:
        """Render the outline heading, metadata comment and description."""
        if outline is None:
            return ""
        parts = ["# ", outline.title or outline.key, " <!-- Metadata:"]
        parts.append(self._common_metadata(outline))
        parts.append(f" importance: {outline.importance}/5;")
        parts.append(f" urgency: {outline.urgency}/5;")
        parts.append(f" progress: {outline.progress}%; -->\n")
        parts.extend(f"{line}\n" for line in outline.description)
        return "".join(parts)

    def to(self, outline: Outline | None) -> str:
        """Render the whole outline: header followed by every note."""
        if outline is None:
            return ""
        return self.to_header(outline) + "".join(self.to_note(n) for n in outline.notes)

    def to_note(self, note: Note | None) -> str:
        if note is None:
            return ""
        parts = ["#" * (note.depth + 2), " ", note.title or UNTITLED, " <!-- Metadata:"]
        parts.append(self._common_metadata(note))
        parts.append(f" progress: {note.progress}%; -->\n")
        parts.extend(f"{line}\n" for line in note.description)
        return "".join(parts)

    @staticmethod
    def _common_metadata(entity: Outline | Note) -> str:
        """Fields shared by outline and note comments, tags through modified."""
        parts = []
        if entity.tags:
            parts.append(f" tags: {tags_to_string(entity.tags)};")
        parts.append(f" type: {entity.type.name};")
        parts.append(f" created: {datetime_to_string(entity.created)};")
        parts.append(f" reads: {entity.reads};")
        parts.append(f" read: {datetime_to_string(entity.read)};")
        parts.append(f" revision: {entity.revision};")
        parts.append(f" modified: {datetime_to_string(entity.modified)};")
        return "".join(parts)
