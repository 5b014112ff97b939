"""Markdown tokenizer: source text → Section AST.

A document is split at ATX headings (one or more ``#``) outside fenced code
blocks.  Each heading becomes a :class:`SectionNode`; the lines up to the next
heading are its body.  A heading may carry a metadata comment::

    ## Task A <!-- Metadata: tags: ideas,work; type: Task; created: 2018-01-01 10:00:00; reads: 3; read: ...; revision: 2; modified: ...; progress: 40%; -->

Unknown keys and malformed values in the comment are skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from mindmark.timestamps import string_to_datetime

logger = logging.getLogger(__name__)

# "## Title" / "##" (empty heading); any number of markers so deep notes survive
_HEADING_RE = re.compile(r"^(#+)(?:[ \t](.*))?$")
# "Title <!-- Metadata: ... -->"; only the single separator space is dropped
_METADATA_RE = re.compile(r"^(.*?) ?<!--[ \t]*Metadata:(.*?)-->[ \t]*$")
_FENCE_RE = re.compile(r"^[ \t]*(```|~~~)")

#: Rendered in place of an empty note title
UNTITLED = "?"


@dataclass
class SectionMetadata:
    type: str | None = None
    created: datetime | None = None
    modified: datetime | None = None
    read: datetime | None = None
    revision: int = 0
    reads: int = 0
    importance: int = 0
    urgency: int = 0
    progress: int = 0
    tags: list[str] = field(default_factory=list)


@dataclass
class SectionNode:
    """One heading and its body lines.

    ``depth`` is the nesting below the outline header: ``#`` and ``##`` are
    0, ``###`` is 1 and so on.
    """

    depth: int = 0
    text: str | None = None
    metadata: SectionMetadata = field(default_factory=SectionMetadata)
    body: list[str] | None = None

    def move_body(self) -> list[str] | None:
        """Hand the body over to the caller; the node keeps nothing."""
        body, self.body = self.body, None
        return body


def _parse_int(value: str, suffix: str = "") -> int:
    value = value.strip()
    if suffix and value.endswith(suffix):
        value = value[: -len(suffix)]
    return int(value.strip())


def parse_metadata(text: str) -> SectionMetadata:
    """Parse the inside of a ``<!-- Metadata: ... -->`` comment."""
    meta = SectionMetadata()
    for field_text in text.split(";"):
        key, sep, value = field_text.partition(":")
        key = key.strip().lower()
        if not sep or not key:
            continue
        value = value.strip()
        try:
            if key == "type":
                meta.type = value or None
            elif key == "tags":
                meta.tags = [t.strip() for t in value.split(",") if t.strip()]
            elif key in ("created", "modified", "read"):
                setattr(meta, key, string_to_datetime(value))
            elif key in ("revision", "reads"):
                setattr(meta, key, _parse_int(value))
            elif key in ("importance", "urgency"):
                setattr(meta, key, _parse_int(value.split("/")[0]))
            elif key == "progress":
                meta.progress = _parse_int(value, "%")
            else:
                logger.debug("Ignoring unknown metadata key %r", key)
        except ValueError:
            logger.debug("Ignoring malformed metadata value %s=%r", key, value)
    return meta


def _heading_node(marks: str, heading: str | None) -> SectionNode:
    """Build a node from a heading line.

    Titles followed by a metadata comment are kept verbatim; hand-written
    headings without one are stripped.  The ``?`` placeholder only stands
    for "untitled" on note headings (``##`` and deeper).
    """
    heading = heading or ""
    metadata = SectionMetadata()
    m = _METADATA_RE.match(heading)
    if m:
        title = m.group(1)
        metadata = parse_metadata(m.group(2))
    else:
        title = heading.strip()
    if title == UNTITLED and len(marks) > 1:
        title = ""
    return SectionNode(
        depth=max(len(marks) - 2, 0),
        text=title or None,
        metadata=metadata,
        body=[],
    )


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` / ``\\r\\n`` only; other separators stay inside lines."""
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def tokenize(text: str) -> list[SectionNode]:
    """Split *text* into a Section AST."""
    ast: list[SectionNode] = []
    preamble: list[str] = []
    fence: str | None = None
    for line in split_lines(text):
        fm = _FENCE_RE.match(line)
        if fm and fence is None:
            fence = fm.group(1)
        elif fm and fm.group(1) == fence:
            fence = None
        elif fence is None:
            m = _HEADING_RE.match(line)
            if m:
                ast.append(_heading_node(m.group(1), m.group(2)))
                continue
        if ast:
            ast[-1].body.append(line)
        else:
            preamble.append(line)

    if any(line.strip() for line in preamble):
        ast.insert(0, SectionNode(body=preamble))
    return ast


class Markdown:
    """Tokenizer for one document, read from a string or from a file."""

    def __init__(self, file_path: Path | str | None = None) -> None:
        self.file_path: Path | None = Path(file_path).resolve() if file_path else None
        self.file_size: int = 0
        self.modified: datetime | None = None
        self._ast: list[SectionNode] | None = None

    def from_string(self, text: str) -> None:
        self._ast = tokenize(text)

    def from_file(self) -> None:
        """Read and tokenize :attr:`file_path`; ``OSError`` propagates."""
        if self.file_path is None:
            raise ValueError("Markdown has no file path to read from")
        raw = self.file_path.read_bytes()
        self.file_size = len(raw)
        self.modified = datetime.fromtimestamp(self.file_path.stat().st_mtime).replace(microsecond=0)
        self.from_string(raw.decode("utf-8-sig"))

    def move_ast(self) -> list[SectionNode] | None:
        """Transfer the AST to the caller; a second call returns ``None``."""
        ast, self._ast = self._ast, None
        return ast
