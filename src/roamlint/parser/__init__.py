"""Link extraction and note metadata parsing."""

from .links import extract_link_triples, extract_links
from .notes import NoteMeta, parse_note_meta, read_note_text

__all__ = [
    "extract_links",
    "extract_link_triples",
    "NoteMeta",
    "parse_note_meta",
    "read_note_text",
]
