"""Title-to-note index for resolving ``roam`` links.

Enables resolution of [[roam:Title]], [[Title]] and [[Alias]] links, plus
path-style [[path/to/note]] and bare file-name links, against the notes of a
knowledge base.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Protocol

from .config import NOTE_SUFFIXES
from .errors import IndexUnavailableError, ParseError, UnreadableNoteError
from .parser import NoteMeta, parse_note_meta

log = logging.getLogger(__name__)


class NoteIndex(Protocol):
    """Lookups the validators and the report need from a note database."""

    def resolve_title(self, title: str) -> str | None:
        """Return the canonical title a link names, or None."""
        ...

    def file_for_title(self, title: str) -> str | None:
        """Return the backing file of a canonical title, or None."""
        ...

    def title_for_key(self, key: str) -> str:
        """Return the display title of a source note key."""
        ...


def _is_hidden(name: str) -> bool:
    return name.startswith(".") or name.startswith("_")


def iter_note_files(kb_root: Path) -> Iterator[Path]:
    """Yield note files under kb_root in a stable order.

    Files and directories starting with ``.`` or ``_`` are skipped.

    Raises:
        IndexUnavailableError: If kb_root itself cannot be listed.
    """
    root = str(kb_root)

    def on_error(error: OSError) -> None:
        if os.path.normpath(error.filename or "") == os.path.normpath(root):
            raise IndexUnavailableError(
                f"Cannot read knowledge base at {kb_root}: {error.strerror or error}",
                {"path": root},
            ) from error
        log.warning("Skipping unreadable directory %s: %s", error.filename, error.strerror)

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames[:] = sorted(d for d in dirnames if not _is_hidden(d))
        for filename in sorted(filenames):
            if _is_hidden(filename):
                continue
            if os.path.splitext(filename)[1].lower() in NOTE_SUFFIXES:
                yield Path(dirpath) / filename


def _strip_note_suffix(name: str) -> str:
    lowered = name.lower()
    for suffix in NOTE_SUFFIXES:
        if lowered.endswith(suffix):
            return name[: -len(suffix)]
    return name


class KBNoteIndex:
    """In-memory note index over one knowledge base."""

    def __init__(self, notes: Iterable[NoteMeta], kb_root: Path | None = None) -> None:
        self.kb_root = kb_root
        # lowercase title/alias -> note
        self._by_name: dict[str, NoteMeta] = {}
        # lowercase canonical title -> note
        self._by_title: dict[str, NoteMeta] = {}
        # str(path) -> note
        self._by_key: dict[str, NoteMeta] = {}
        # lowercase relative path without suffix -> note
        self._by_rel_path: dict[str, NoteMeta] = {}

        for note in notes:
            self.add(note)

    @classmethod
    def build(cls, kb_root: Path) -> KBNoteIndex:
        """Scan every note under kb_root.

        A missing root yields an empty index. Notes that cannot be read or
        parsed are skipped.
        """
        kb_root = Path(os.path.abspath(os.path.expanduser(kb_root)))
        if not kb_root.is_dir():
            log.warning("Knowledge base root %s does not exist; note index is empty", kb_root)
            return cls([], kb_root)

        notes: list[NoteMeta] = []
        for note_file in iter_note_files(kb_root):
            try:
                notes.append(parse_note_meta(note_file))
            except (ParseError, UnreadableNoteError) as e:
                log.warning("Skipping %s during note index build: %s", note_file, e.message)

        log.debug("Indexed %d notes under %s", len(notes), kb_root)
        return cls(notes, kb_root)

    def add(self, note: NoteMeta) -> None:
        title_key = note.title.lower().strip()
        if title_key in self._by_title:
            log.debug("Duplicate title %r: keeping %s", note.title, self._by_title[title_key].path)
        else:
            self._by_title[title_key] = note

        for name in (note.title, *note.aliases):
            name_key = name.lower().strip()
            if name_key and name_key not in self._by_name:
                self._by_name[name_key] = note

        self._by_key[str(note.path)] = note

        if self.kb_root is not None:
            try:
                rel_path = note.path.relative_to(self.kb_root)
            except ValueError:
                return
            rel_key = _strip_note_suffix(rel_path.as_posix()).lower()
            self._by_rel_path.setdefault(rel_key, note)

    def __len__(self) -> int:
        return len(self._by_key)

    def _lookup(self, name: str) -> NoteMeta | None:
        """Resolve a link target to a note.

        Attempts resolution in order:
        1. Title/alias lookup (case-insensitive)
        2. Path relative to the KB root, with or without suffix
        3. File name match anywhere in the KB
        """
        normalized = name.strip().replace("\\", "/")
        if not normalized:
            return None

        note = self._by_name.get(normalized.lower())
        if note is not None:
            return note

        path_key = _strip_note_suffix(normalized.strip("/")).lower()
        note = self._by_rel_path.get(path_key)
        if note is not None:
            return note

        if "/" not in path_key:
            for rel_key, candidate in self._by_rel_path.items():
                if rel_key.endswith(f"/{path_key}"):
                    return candidate

        return None

    def resolve_title(self, title: str) -> str | None:
        note = self._lookup(title)
        return note.title if note else None

    def file_for_title(self, title: str) -> str | None:
        """Backing file of the note a name resolves to.

        Path and file-name links pick their own note even when another note
        shares its title.
        """
        note = self._lookup(title) or self._by_title.get(title.lower().strip())
        return str(note.path) if note else None

    def title_for_key(self, key: str) -> str:
        note = self._by_key.get(key)
        if note is not None:
            return note.title
        return Path(key).stem or key
