#!/usr/bin/env python3
"""
roamlint: find broken links in a knowledge base of org and markdown notes

Usage:
    roamlint scan                      # Check every note under the KB root
    roamlint check notes/today.org     # Check one note
    roamlint check a.org --stdin       # Check unsaved text of a note
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, NoReturn

import click

from . import __version__ as ROAMLINT_VERSION
from .errors import ErrorCode, NoteNotFoundError, RoamlintError, format_error_json

# ─────────────────────────────────────────────────────────────────────────────
# Output Helpers
# ─────────────────────────────────────────────────────────────────────────────


def output(data, as_json: bool = False):
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(data)


def _handle_error(ctx: click.Context, error: Exception, exit_code: int = 1) -> NoReturn:
    """Report an error as text or JSON, then exit.

    Args:
        ctx: Click context (obj["json_errors"] selects JSON).
        error: The exception that occurred.
        exit_code: Process exit status.
    """
    json_errors = ctx.obj.get("json_errors", False) if ctx.obj else False

    if isinstance(error, RoamlintError):
        if json_errors:
            click.echo(error.to_json(), err=True)
        else:
            click.echo(f"Error: {error.message}", err=True)
            suggestion = error.details.get("suggestion")
            if suggestion:
                click.echo(f"Hint: {suggestion}", err=True)
    elif json_errors:
        click.echo(format_error_json(ErrorCode.INTERNAL, str(error)), err=True)
    else:
        click.echo(f"Error: {error}", err=True)

    sys.exit(exit_code)


def _parse_validator_overrides(ctx, param, values: tuple[str, ...]) -> dict[str, str] | None:
    """Click callback turning repeated TYPE=VALIDATOR options into a mapping."""
    if not values:
        return None

    overrides: dict[str, str] = {}
    for value in values:
        link_type, sep, spec = value.partition("=")
        if not sep or not link_type.strip() or not spec.strip():
            raise click.BadParameter(f"expected TYPE=VALIDATOR, got {value!r}", ctx=ctx, param=param)
        overrides[link_type.strip()] = spec.strip()
    return overrides


def scan_options(func: Callable) -> Callable:
    """Options shared by the scan and check commands."""
    options = [
        click.option("--json", "as_json", is_flag=True, help="Output as JSON"),
        click.option(
            "--validator",
            "validators",
            multiple=True,
            callback=_parse_validator_overrides,
            metavar="TYPE=VALIDATOR",
            help=(
                "Replace the validator mapping (repeatable). VALIDATOR is file, roam, "
                "always-valid, always-invalid or package.module:function"
            ),
        ),
        click.option(
            "--header-prefix",
            "header_prefixes",
            multiple=True,
            help="Line prefix marking header lines of a note (repeatable, default '#')",
        ),
        click.option(
            "--relative-to",
            "resolve_relative_to",
            type=click.Choice(["base", "source"]),
            default=None,
            help="Resolve relative file links against the KB root (base) or the linking note (source)",
        ),
        click.option("--output-name", default=None, help="Heading of the rendered report"),
        click.option(
            "--fail-on-broken",
            is_flag=True,
            help="Exit with status 2 when broken links are found",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _run_scan(
    ctx: click.Context,
    mode: str,
    *,
    note: Path | None = None,
    text: str | None = None,
    as_json: bool,
    validators: dict[str, str] | None,
    header_prefixes: tuple[str, ...],
    resolve_relative_to: str | None,
    output_name: str | None,
    fail_on_broken: bool,
) -> None:
    from .config import get_kb_root, load_settings
    from .link_source import KBLinkSource
    from .note_index import KBNoteIndex
    from .report import render_report, report_payload
    from .scanner import ScanOptions, scan
    from .validators import build_registry

    try:
        settings = load_settings(
            kb_root=ctx.obj.get("kb_root"),
            validators=validators,
            header_prefixes=list(header_prefixes) or None,
            resolve_relative_to=resolve_relative_to,
            output_name=output_name,
        )
        if settings.kb_root is None and note is not None:
            # A lone note is checked against its own directory
            settings = settings.model_copy(update={"kb_root": note.parent})
        kb_root = get_kb_root(settings)

        note_index = KBNoteIndex.build(kb_root)
        registry = build_registry(settings, note_index)
        link_source = KBLinkSource(
            kb_root,
            current_note=note,
            current_text=text,
            file_type=settings.file_type,
            roam_type=settings.roam_type,
        )
        result = scan(mode, link_source, registry, ScanOptions.from_settings(settings))
    except RoamlintError as e:
        _handle_error(ctx, e)

    if as_json:
        output(report_payload(result, note_index.title_for_key, settings.output_name), as_json=True)
    else:
        output(render_report(result.records, note_index.title_for_key, settings.output_name))

    if fail_on_broken and result.records:
        ctx.exit(2)


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI Group
# ─────────────────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=ROAMLINT_VERSION, prog_name="roamlint")
@click.option(
    "--kb-root",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="ROAMLINT_KB_ROOT",
    help="Knowledge base root (default: kb_path from .roamlint.yaml)",
)
@click.option(
    "--json-errors",
    "json_errors",
    is_flag=True,
    help="Output errors as JSON (for programmatic use)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    envvar="ROAMLINT_QUIET",
    help="Suppress warnings, show only errors and the report",
)
@click.pass_context
def cli(ctx: click.Context, kb_root: Path | None, json_errors: bool, quiet: bool):
    """roamlint: report broken links between notes.

    A link is broken when its target file or note is missing, or exists but
    holds nothing beyond its header lines.

    \b
    Examples:
      roamlint scan                        # Whole knowledge base
      roamlint check notes/a.org           # One note
      roamlint scan --validator file=file --validator roam=always-valid
      roamlint --json-errors scan --json   # Machine-readable output
    """
    from ._logging import configure_logging

    configure_logging(quiet=quiet)

    ctx.ensure_object(dict)
    ctx.obj["json_errors"] = json_errors
    ctx.obj["kb_root"] = kb_root


@cli.command("scan")
@scan_options
@click.pass_context
def scan_command(ctx: click.Context, **options: Any):
    """Check every link recorded in the knowledge base.

    Only saved notes are seen.

    \b
    Examples:
      roamlint scan
      roamlint scan --json
      roamlint scan --fail-on-broken
    """
    _run_scan(ctx, "all", **options)


@cli.command("check")
@click.argument("note", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--stdin", "from_stdin", is_flag=True, help="Read the note's current text from stdin")
@scan_options
@click.pass_context
def check_command(ctx: click.Context, note: Path, from_stdin: bool, **options: Any):
    """Check the links of a single note.

    With --stdin the note's unsaved text is read from standard input and
    relative links still resolve against NOTE's directory.

    \b
    Examples:
      roamlint check notes/a.org
      cat draft.org | roamlint check notes/a.org --stdin
    """
    text = click.get_text_stream("stdin").read() if from_stdin else None

    if text is None and not note.is_file():
        _handle_error(ctx, NoteNotFoundError(f"Note not found: {note}", {"path": str(note)}))

    _run_scan(ctx, "current", note=note, text=text, **options)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
