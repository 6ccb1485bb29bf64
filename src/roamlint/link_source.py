"""Where link triples come from: the note being edited, or the whole KB."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

from .config import FILE_LINK_TYPE, ROAM_LINK_TYPE
from .errors import UnreadableNoteError
from .models import LinkTriple
from .note_index import iter_note_files
from .parser import extract_link_triples, read_note_text

log = logging.getLogger(__name__)


class LinkSource(Protocol):
    def extract_current_links(self) -> list[LinkTriple]:
        """Links of the note in the current editing context."""
        ...

    def query_all_links(self) -> list[LinkTriple]:
        """All links recorded for the knowledge base."""
        ...


def note_key(path: Path | str) -> str:
    """Stable key of a file-backed note: its absolute path."""
    return os.path.abspath(os.path.expanduser(str(path)))


class KBLinkSource:
    """Link triples read from note files on disk.

    The current note's text can be supplied directly so unsaved edits are
    checked; the full index only ever reflects what is saved.
    """

    def __init__(
        self,
        kb_root: Path | None = None,
        current_note: Path | None = None,
        current_text: str | None = None,
        file_type: str = FILE_LINK_TYPE,
        roam_type: str = ROAM_LINK_TYPE,
    ) -> None:
        self.kb_root = Path(note_key(kb_root)) if kb_root is not None else None
        self.current_note = Path(note_key(current_note)) if current_note is not None else None
        self.current_text = current_text
        self.file_type = file_type
        self.roam_type = roam_type

    def _triples(self, note: Path, text: str) -> list[LinkTriple]:
        return extract_link_triples(str(note), text, self.file_type, self.roam_type)

    def extract_current_links(self) -> list[LinkTriple]:
        if self.current_note is None:
            log.warning("No current note to check")
            return []

        text = self.current_text
        if text is None:
            if not self.current_note.is_file():
                log.warning("Current note %s does not exist", self.current_note)
                return []
            text = read_note_text(self.current_note)

        return self._triples(self.current_note, text)

    def query_all_links(self) -> list[LinkTriple]:
        """Walk the knowledge base and collect every link.

        A missing root yields no links; notes that cannot be read are skipped.

        Raises:
            IndexUnavailableError: If the root exists but cannot be listed.
        """
        if self.kb_root is None or not self.kb_root.is_dir():
            log.warning("Knowledge base root %s not found; no links to check", self.kb_root)
            return []

        triples: list[LinkTriple] = []
        notes = 0
        for note_file in iter_note_files(self.kb_root):
            try:
                text = read_note_text(note_file)
            except UnreadableNoteError as e:
                log.warning("Skipping %s: %s", note_file, e.message)
                continue
            notes += 1
            triples.extend(self._triples(note_file, text))

        log.debug("Collected %d links from %d notes", len(triples), notes)
        return triples
