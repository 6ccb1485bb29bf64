"""Rendering of broken-link records, grouped by the note they come from."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from .config import DEFAULT_OUTPUT_NAME
from .models import BrokenLinkRecord, ScanResult

TitleLookup = Callable[[str], str]


def group_by_source(records: Iterable[BrokenLinkRecord]) -> list[tuple[str, list[BrokenLinkRecord]]]:
    """Group records by source, sources sorted case-insensitively.

    Records keep their scan order inside each group.
    """
    groups: dict[str, list[BrokenLinkRecord]] = {}
    for record in records:
        groups.setdefault(record.source, []).append(record)
    return sorted(groups.items(), key=lambda item: (item[0].lower(), item[0]))


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def render_report(
    records: Sequence[BrokenLinkRecord],
    title_for_key: TitleLookup | None = None,
    output_name: str = DEFAULT_OUTPUT_NAME,
) -> str:
    """Render records as a plain-text report.

    Each note gets a header line ``Title (source)`` followed by one
    ``type:target`` line per broken link; notes are separated by a blank
    line. An empty record list still renders a report.
    """
    groups = group_by_source(records)

    lines = [output_name, "=" * max(len(output_name), 20)]
    if not groups:
        lines.append("No broken links found.")
        return "\n".join(lines)

    lines.append(f"{_plural(len(records), 'broken link')} in {_plural(len(groups), 'note')}")

    for source, group in groups:
        title = title_for_key(source) if title_for_key else source
        lines.append("")
        lines.append(f"{title} ({source})" if title != source else source)
        for record in group:
            suffix = f"  [{record.reason}]" if record.reason != "broken" else ""
            lines.append(f"  {record.label()}{suffix}")

    return "\n".join(lines)


def report_payload(
    result: ScanResult,
    title_for_key: TitleLookup | None = None,
    output_name: str = DEFAULT_OUTPUT_NAME,
) -> dict:
    """JSON-ready form of a scan result, grouped like the text report."""
    groups = group_by_source(result.records)
    return {
        "output": output_name,
        "mode": result.mode,
        "summary": {
            "links_checked": result.links_checked,
            "validations": result.validations,
            "cache_hits": result.cache_hits,
            "broken_links_count": result.broken_count,
            "notes_with_broken_links": len(groups),
        },
        "notes": [
            {
                "source": source,
                "title": title_for_key(source) if title_for_key else source,
                "broken_links": [
                    {"type": r.type, "target": r.target, "reason": r.reason} for r in group
                ],
            }
            for source, group in groups
        ],
    }
