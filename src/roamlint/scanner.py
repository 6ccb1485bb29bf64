"""Scan orchestration: link triples in, broken-link records out.

One scan is a single synchronous pass. It takes a snapshot of the validator
registry, builds its own verdict cache, and discards both on return.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from .cache import CacheKey, LinkValidityCache
from .config import FILE_LINK_TYPE, LinkCheckSettings
from .errors import UnreadableNoteError
from .link_source import LinkSource
from .models import INVALID, VALID, BrokenLinkRecord, LinkTriple, ScanMode, ScanResult, Verdict
from .paths import normalize_target
from .validators import ValidatorRegistry

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanOptions:
    """Knobs that change how targets are normalized and validated."""

    file_type: str = FILE_LINK_TYPE
    # "base": validators see raw targets; "source": validators see file
    # targets already resolved against the linking note's directory
    resolve_relative_to: Literal["base", "source"] = "base"

    @classmethod
    def from_settings(cls, settings: LinkCheckSettings) -> ScanOptions:
        return cls(file_type=settings.file_type, resolve_relative_to=settings.resolve_relative_to)


def _validate(registry: ValidatorRegistry, target: str, link_type: str) -> Verdict:
    """Run the validator for one pair, containing any failure as a verdict."""
    try:
        valid = registry.is_valid(target, link_type)
    except UnreadableNoteError as e:
        log.warning("Treating %s:%s as broken: %s", link_type, target, e.message)
        return Verdict(valid=False, reason="unreadable")
    except OSError as e:
        log.warning("Treating %s:%s as broken: %s", link_type, target, e)
        return Verdict(valid=False, reason="unreadable")
    except Exception:
        log.exception("Validator for %r failed on %r", link_type, target)
        return Verdict(valid=False, reason="error")

    return VALID if valid else INVALID


def check_links(
    triples: Iterable[LinkTriple],
    registry: ValidatorRegistry,
    options: ScanOptions | None = None,
    mode: ScanMode = "all",
) -> ScanResult:
    """Classify every triple and collect the broken ones.

    Args:
        triples: Links to check, in the order records should come out.
        registry: Validators by type; snapshotted before the first check.
        options: Normalization settings.
        mode: Recorded on the result.

    Returns:
        ScanResult whose records follow input order. A broken target linked
        from several notes yields one record per occurrence.
    """
    options = options or ScanOptions()
    registry = registry.snapshot()
    cache = LinkValidityCache()
    result = ScanResult(mode=mode)
    all_relative = options.resolve_relative_to == "source"

    for triple in triples:
        result.links_checked += 1
        normalized = normalize_target(
            triple.source, triple.target, triple.type, options.file_type, all_relative=all_relative
        )
        checked_target = normalized if all_relative else triple.target
        key = CacheKey(triple.type, checked_target)

        verdict = cache.lookup(key)
        if verdict is None:
            verdict = _validate(registry, checked_target, triple.type)
            cache.store(key, verdict)
            result.validations += 1
            log.debug("%s:%s -> %s", triple.type, checked_target, "valid" if verdict.valid else verdict.reason)

        if not verdict.valid:
            result.records.append(
                BrokenLinkRecord(
                    source=triple.source,
                    target=normalized,
                    type=triple.type,
                    reason=verdict.reason or "broken",
                )
            )

    result.cache_hits = cache.hits
    log.info(
        "Checked %d links (%d distinct), %d broken",
        result.links_checked,
        len(cache),
        result.broken_count,
    )
    return result


def scan(
    mode: ScanMode,
    link_source: LinkSource,
    registry: ValidatorRegistry,
    options: ScanOptions | None = None,
) -> ScanResult:
    """Scan the current note or the whole link index for broken links.

    Raises:
        ValueError: If mode is not "all" or "current".
        IndexUnavailableError: If the link index cannot be read at all.
    """
    if mode == "current":
        triples = link_source.extract_current_links()
    elif mode == "all":
        triples = link_source.query_all_links()
    else:
        raise ValueError(f"Unknown scan mode: {mode!r}")

    return check_links(triples, registry, options, mode=mode)
