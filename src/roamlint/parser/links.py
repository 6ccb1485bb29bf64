"""Typed link extraction from org and markdown note text."""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import unquote

from ..config import FILE_LINK_TYPE, ROAM_LINK_TYPE
from ..models import LinkTriple

# [[link]] and [[link][description]] (org), [[link|alias]] (wiki style)
BRACKET_LINK_PATTERN = re.compile(r"\[\[([^\[\]]+)\](?:\[[^\[\]]*\])?\]")

# [text](target) and [text](target "title")
MARKDOWN_LINK_PATTERN = re.compile(r"\[[^\[\]]*\]\(\s*<?([^()\s<>]+)>?(?:\s+\"[^\"]*\")?\s*\)")

# Lowercase scheme prefix: file:, roam:, id:, https:
SCHEME_PATTERN = re.compile(r"^([a-z][a-z0-9+.-]*):(.*)$", re.DOTALL)

# Fenced code (``` / ~~~) and org source/example blocks hold no live links
FENCED_BLOCK_PATTERN = re.compile(r"^(```|~~~).*?^\1[^\n]*$", re.MULTILINE | re.DOTALL)
ORG_BLOCK_PATTERN = re.compile(
    r"^[ \t]*#\+begin_(src|example)\b.*?^[ \t]*#\+end_\1\b[^\n]*$",
    re.MULTILINE | re.DOTALL | re.IGNORECASE,
)

# org-mode spellings of a file link
FILE_TYPE_ALIASES = {"file+sys", "file+emacs"}


def _blank_out(match: re.Match[str]) -> str:
    # Keep line structure so positions stay meaningful
    return "\n" * match.group(0).count("\n")


def _strip_code_blocks(content: str) -> str:
    content = FENCED_BLOCK_PATTERN.sub(_blank_out, content)
    return ORG_BLOCK_PATTERN.sub(_blank_out, content)


def _split_bracket_link(raw: str, file_type: str, roam_type: str) -> tuple[str, str] | None:
    """Split the inside of [[...]] into (type, target)."""
    raw = raw.strip()
    match = SCHEME_PATTERN.match(raw)

    if match is None:
        # Bare wikilink: [[Title]] or [[Title|alias]]
        target = raw.split("|", 1)[0].strip()
        return (roam_type, target) if target else None

    scheme, payload = match.group(1), match.group(2).strip()
    if scheme in FILE_TYPE_ALIASES:
        scheme = file_type

    if scheme == file_type:
        # [[file:notes/a.org::*Heading]] -> notes/a.org
        payload = payload.split("::", 1)[0]

    return (scheme, payload) if payload else None


def _split_markdown_link(raw: str, file_type: str) -> tuple[str, str] | None:
    match = SCHEME_PATTERN.match(raw.lower())
    if match is not None and len(match.group(1)) > 1:
        scheme = match.group(1)
        return (scheme, raw[len(scheme) + 1:])

    # Relative or absolute path, possibly with a #fragment
    target = unquote(raw.split("#", 1)[0])
    return (file_type, target) if target else None


def extract_links(
    content: str,
    file_type: str = FILE_LINK_TYPE,
    roam_type: str = ROAM_LINK_TYPE,
) -> list[tuple[str, str]]:
    """Extract typed links from note content.

    Args:
        content: Org or markdown text.
        file_type: Tag given to links that point at files.
        roam_type: Tag given to bare [[Title]] links.

    Returns:
        List of (type, target) pairs in document order. Repeated links are
        kept; every occurrence is a separate link.
    """
    content = _strip_code_blocks(content)
    found: list[tuple[int, tuple[str, str]]] = []

    for match in BRACKET_LINK_PATTERN.finditer(content):
        link = _split_bracket_link(match.group(1), file_type, roam_type)
        if link:
            found.append((match.start(), link))

    for match in MARKDOWN_LINK_PATTERN.finditer(content):
        link = _split_markdown_link(match.group(1), file_type)
        if link:
            found.append((match.start(), link))

    found.sort(key=lambda item: item[0])
    return [link for _, link in found]


def extract_link_triples(
    source: str | Path,
    content: str,
    file_type: str = FILE_LINK_TYPE,
    roam_type: str = ROAM_LINK_TYPE,
) -> list[LinkTriple]:
    """Extract links from content as triples attributed to source."""
    source_key = str(source)
    return [
        LinkTriple(source=source_key, target=target, type=link_type)
        for link_type, target in extract_links(content, file_type, roam_type)
    ]
