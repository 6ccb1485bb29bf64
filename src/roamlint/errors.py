"""Exception hierarchy and machine-readable error codes."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes emitted with --json-errors."""

    CONFIGURATION = "CONFIGURATION_ERROR"
    INDEX_UNAVAILABLE = "INDEX_UNAVAILABLE"
    NOTE_NOT_FOUND = "NOTE_NOT_FOUND"
    UNREADABLE_NOTE = "UNREADABLE_NOTE"
    VALIDATOR_LOAD = "VALIDATOR_LOAD_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    INTERNAL = "INTERNAL_ERROR"


def format_error_json(code: ErrorCode | str, message: str, details: dict | None = None) -> str:
    """Format an error as a single JSON object."""
    payload: dict[str, Any] = {
        "error": code.value if isinstance(code, ErrorCode) else code,
        "message": message,
    }
    if details:
        payload["details"] = details
    return json.dumps(payload, default=str)


class RoamlintError(Exception):
    """Base class for errors the CLI knows how to report."""

    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_json(self) -> str:
        return format_error_json(self.code, self.message, self.details)


class ConfigurationError(RoamlintError):
    """Raised when required configuration is missing or invalid."""

    code = ErrorCode.CONFIGURATION


class IndexUnavailableError(RoamlintError):
    """Raised when the link index cannot be read at all.

    This is the only failure that aborts a whole scan.
    """

    code = ErrorCode.INDEX_UNAVAILABLE


class NoteNotFoundError(RoamlintError):
    """Raised when the note to check does not exist."""

    code = ErrorCode.NOTE_NOT_FOUND


class ValidatorLoadError(ConfigurationError):
    """Raised when a validator import string cannot be resolved."""

    code = ErrorCode.VALIDATOR_LOAD


class ParseError(RoamlintError):
    """Raised when a note's metadata cannot be parsed."""

    code = ErrorCode.PARSE_ERROR

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}", {"path": str(path)})


class UnreadableNoteError(RoamlintError):
    """Raised when a note exists but its content cannot be read."""

    code = ErrorCode.UNREADABLE_NOTE

    def __init__(self, path: Path | str, cause: OSError) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(
            f"Cannot read {path}: {cause.strerror or cause}",
            {"path": str(path), "errno": cause.errno},
        )
