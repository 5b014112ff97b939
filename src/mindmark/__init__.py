"""mindmark: MindForger-style markdown outlines."""

from mindmark.db import MindDB
from mindmark.markdown import Markdown, SectionMetadata, SectionNode, tokenize
from mindmark.model import Note, NoteType, Outline, OutlineType, Tag
from mindmark.ontology import Ontology, OntologyError, load_ontology
from mindmark.repository import MindRepository
from mindmark.representation import MarkdownOutlineRepresentation, tags_to_string

__all__ = [
    "Markdown",
    "MarkdownOutlineRepresentation",
    "MindDB",
    "MindRepository",
    "Note",
    "NoteType",
    "Ontology",
    "OntologyError",
    "Outline",
    "OutlineType",
    "SectionMetadata",
    "SectionNode",
    "Tag",
    "load_ontology",
    "tags_to_string",
    "tokenize",
]
