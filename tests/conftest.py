"""Shared test fixtures for the roamlint test suite.

Design:
- kb: isolated knowledge base in a temp directory, ROAMLINT_KB_ROOT pointing at it
- runner / cli_invoke: CliRunner with the KB root in its environment
- write_note: helper creating org notes with a title header
"""

import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from roamlint.cli import cli
from roamlint.validators import ValidatorRegistry


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the developer's environment and config files out of tests."""
    monkeypatch.delenv("ROAMLINT_KB_ROOT", raising=False)
    monkeypatch.delenv("ROAMLINT_QUIET", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _propagate_logs():
    """configure_logging() turns propagation off; caplog needs it on."""
    yield
    logger = logging.getLogger("roamlint")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def kb(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty knowledge base root, exported as ROAMLINT_KB_ROOT.

    Usage:
        def test_something(kb):
            write_note(kb / "a.org", "A", "Body")
    """
    kb_root = tmp_path / "kb"
    kb_root.mkdir()
    monkeypatch.setenv("ROAMLINT_KB_ROOT", str(kb_root))
    return kb_root


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture
def cli_invoke(runner: CliRunner, kb: Path):
    """Helper for invoking the CLI against the test KB.

    Usage:
        def test_scan(cli_invoke):
            result = cli_invoke(["scan"])
            assert result.exit_code == 0
    """
    def _invoke(args: list[str], input: str | None = None):
        return runner.invoke(
            cli,
            args,
            input=input,
            env={"ROAMLINT_KB_ROOT": str(kb), "ROAMLINT_LOG_LEVEL": "WARNING"},
        )
    return _invoke


class RecordingValidator:
    """Validator returning a fixed verdict and remembering what it was asked."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.calls: list[str] = []

    def is_valid(self, target: str) -> bool:
        self.calls.append(target)
        return self.result


@pytest.fixture
def recording_registry() -> tuple[ValidatorRegistry, RecordingValidator, RecordingValidator]:
    """Registry with recording validators: file -> valid, roam -> invalid."""
    file_validator = RecordingValidator(True)
    roam_validator = RecordingValidator(False)
    registry = ValidatorRegistry({"file": file_validator, "roam": roam_validator})
    return registry, file_validator, roam_validator


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def write_note(path: Path, title: str, body: str = "", aliases: list[str] | None = None) -> Path:
    """Create an org note with a title header.

    Usage in tests:
        from conftest import write_note
        note = write_note(kb / "a.org", "Note A", "Links to [[roam:Note B]]")
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    header = f"#+title: {title}\n"
    if aliases:
        quoted = " ".join(f'"{alias}"' for alias in aliases)
        header = f":PROPERTIES:\n:ROAM_ALIASES: {quoted}\n:END:\n" + header
    path.write_text(header + body, encoding="utf-8")
    return path
