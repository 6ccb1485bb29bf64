"""Rewriting of relative file link targets into absolute paths.

Reported targets must stay navigable outside the note they came from, so a
link like ``[[file:./sub/b.org]]`` in ``/kb/a.org`` is reported as
``/kb/sub/b.org``.
"""

import os

from .config import FILE_LINK_TYPE

RELATIVE_MARKER = "."


def _is_absolute(target: str) -> bool:
    return os.path.isabs(target) or target.startswith("~")


def resolve_against_source(source: str, target: str) -> str:
    """Join target onto the directory of source and normalize the result."""
    base_dir = os.path.dirname(os.path.abspath(os.path.expanduser(source)))
    return os.path.normpath(os.path.join(base_dir, target))


def normalize_target(
    source: str,
    target: str,
    type: str,
    file_type: str = FILE_LINK_TYPE,
    *,
    all_relative: bool = False,
) -> str:
    """Return the target as it should appear in a broken-link record.

    Only file links whose target starts with ``.`` are rewritten, against the
    directory of the source note. With ``all_relative`` set, every non-absolute
    file target is rewritten. Absolute targets and other link types come back
    unchanged.
    """
    if type != file_type or not target or _is_absolute(target):
        return target

    if target.startswith(RELATIVE_MARKER) or all_relative:
        return resolve_against_source(source, target)

    return target
