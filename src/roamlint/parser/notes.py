"""Title and alias extraction for org and markdown notes."""

from __future__ import annotations

import re
import shlex
from pathlib import Path
from typing import NamedTuple

import frontmatter
import yaml

from ..errors import ParseError, UnreadableNoteError

ORG_TITLE_PATTERN = re.compile(r"^#\+title:\s*(.*?)\s*$", re.IGNORECASE | re.MULTILINE)
ORG_ALIASES_PATTERN = re.compile(r"^\s*:ROAM_ALIASES:\s*(.*?)\s*$", re.IGNORECASE | re.MULTILINE)
MARKDOWN_HEADING_PATTERN = re.compile(r"^# (.+)$", re.MULTILINE)


class NoteMeta(NamedTuple):
    """Identity of a note as seen by title lookups."""

    path: Path
    title: str
    aliases: tuple[str, ...] = ()


def read_note_text(path: Path) -> str:
    """Read a note as text.

    Raises:
        UnreadableNoteError: If the file cannot be read.
    """
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise UnreadableNoteError(path, e) from e


def _split_aliases(value: str) -> tuple[str, ...]:
    # :ROAM_ALIASES: "Long Alias" short
    try:
        parts = shlex.split(value)
    except ValueError:
        parts = value.split()
    return tuple(part for part in parts if part)


def _org_meta(path: Path, text: str) -> NoteMeta:
    title_match = ORG_TITLE_PATTERN.search(text)
    title = title_match.group(1) if title_match and title_match.group(1) else path.stem

    aliases: list[str] = []
    for match in ORG_ALIASES_PATTERN.finditer(text):
        aliases.extend(_split_aliases(match.group(1)))

    return NoteMeta(path=path, title=title, aliases=tuple(aliases))


def _markdown_meta(path: Path, text: str) -> NoteMeta:
    try:
        post = frontmatter.loads(text)
    except (yaml.YAMLError, ValueError, TypeError) as e:
        raise ParseError(path, f"Failed to parse frontmatter: {e}") from e

    title = post.metadata.get("title")
    if not title:
        heading = MARKDOWN_HEADING_PATTERN.search(post.content)
        title = heading.group(1).strip() if heading else path.stem

    aliases = post.metadata.get("aliases", [])
    if isinstance(aliases, str):
        aliases = [aliases]
    if not isinstance(aliases, list):
        aliases = []

    return NoteMeta(
        path=path,
        title=str(title).strip(),
        aliases=tuple(str(alias).strip() for alias in aliases if alias),
    )


def parse_note_meta(path: Path, text: str | None = None) -> NoteMeta:
    """Read a note's title and aliases.

    Org notes use ``#+title:`` and ``:ROAM_ALIASES:``; markdown notes use YAML
    frontmatter ``title``/``aliases``, then the first ``# `` heading. The
    file name without suffix is the title of last resort.

    Args:
        path: Note file.
        text: Note content, when already read.

    Raises:
        ParseError: If markdown frontmatter is malformed.
        UnreadableNoteError: If the file cannot be read.
    """
    if text is None:
        text = read_note_text(path)

    if path.suffix.lower() == ".md":
        return _markdown_meta(path, text)
    return _org_meta(path, text)
