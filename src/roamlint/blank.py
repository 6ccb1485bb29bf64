"""Detection of notes that exist but hold no real content.

A note is conceptually blank when everything in it is a leading run of
header lines (``#+title: ...``, ``# Heading``) followed by whitespace. Such a
note is as useless as a link target as a missing one.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

import frontmatter
import yaml

from .config import DEFAULT_HEADER_PREFIXES
from .errors import UnreadableNoteError

log = logging.getLogger(__name__)

PROPERTY_DRAWER_END = re.compile(rb"^[ \t]*:END:[ \t]*$", re.MULTILINE | re.IGNORECASE)


def _strip_frontmatter(raw: bytes) -> bytes:
    """Drop a leading YAML frontmatter block, keeping the body bytes."""
    if not raw.startswith(b"---"):
        return raw

    text = raw.decode("utf-8", errors="replace")
    if not frontmatter.checks(text):
        return raw

    try:
        _, content = frontmatter.parse(text)
    except (yaml.YAMLError, ValueError, TypeError) as e:
        log.debug("Unparseable frontmatter counted as content: %s", e)
        return raw

    return content.lstrip().encode("utf-8")


def _strip_property_drawer(raw: bytes) -> bytes:
    """Drop a leading org ``:PROPERTIES:`` ... ``:END:`` drawer."""
    body = raw.lstrip()
    if body[:12].upper() != b":PROPERTIES:":
        return raw

    match = PROPERTY_DRAWER_END.search(body)
    if match is None:
        # Unterminated drawer is content
        return raw
    return body[match.end():].lstrip()


def is_blank_content(
    raw: bytes,
    header_prefixes: Sequence[str] = DEFAULT_HEADER_PREFIXES,
    skip_metadata: bool = True,
) -> bool:
    """Return True if raw note bytes are only header lines and whitespace.

    Header lines are only skipped as a leading run; a header-looking line
    after the first content line is content.
    """
    if skip_metadata:
        raw = _strip_property_drawer(_strip_frontmatter(raw))

    prefixes = tuple(prefix.encode("utf-8") for prefix in header_prefixes)
    lines = raw.splitlines(keepends=True)

    for index, line in enumerate(lines):
        if not line.startswith(prefixes):
            return not b"".join(lines[index:]).strip()

    # Every line is a header, or there are no lines at all
    return True


def is_conceptually_blank(
    path: Path | str,
    header_prefixes: Sequence[str] = DEFAULT_HEADER_PREFIXES,
    skip_metadata: bool = True,
) -> bool:
    """Decide whether the file at path is conceptually blank.

    Args:
        path: File to inspect.
        header_prefixes: Line prefixes that mark header lines.
        skip_metadata: Treat a leading YAML frontmatter block or org property
            drawer as header.

    Returns:
        True for missing files and files with no content past their headers.
        Directories are never blank.

    Raises:
        UnreadableNoteError: If the file exists but cannot be read.
    """
    path = Path(path).expanduser()

    if not path.exists():
        return True

    if path.is_dir():
        return False

    try:
        raw = path.read_bytes()
    except OSError as e:
        raise UnreadableNoteError(path, e) from e

    return is_blank_content(raw, header_prefixes, skip_metadata)
