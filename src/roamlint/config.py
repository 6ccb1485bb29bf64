"""Configuration management for roamlint.

Constants live here rather than scattered through the codebase. Settings are
read from a ``.roamlint.yaml`` file discovered by walking up from the working
directory, then overridden by environment variables and CLI flags.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigurationError

log = logging.getLogger(__name__)


# =============================================================================
# Link Types
# =============================================================================

# Tag of links that point at files on disk: [[file:notes/a.org]]
FILE_LINK_TYPE = "file"

# Tag of links that point at notes by title: [[roam:Some Note]] or [[Some Note]]
ROAM_LINK_TYPE = "roam"


# =============================================================================
# Knowledge Base Layout
# =============================================================================

CONFIG_FILENAME = ".roamlint.yaml"

# Files treated as notes when building the link index
NOTE_SUFFIXES = (".org", ".md")

# Walking up for .roamlint.yaml stops after this many parent directories
MAX_CONFIG_SEARCH_DEPTH = 10


# =============================================================================
# Emptiness Classification
# =============================================================================

# Lines starting with any of these prefixes at the top of a note are header
# lines (#+title:, #+filetags:, "# Heading") and do not count as content.
DEFAULT_HEADER_PREFIXES = ("#",)


# =============================================================================
# Report
# =============================================================================

# Heading of the rendered report; names where the report is shown
DEFAULT_OUTPUT_NAME = "*roamlint broken links*"


class LinkCheckSettings(BaseModel):
    """Resolved settings for one invocation."""

    kb_root: Path | None = None
    header_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_HEADER_PREFIXES), min_length=1
    )
    skip_metadata: bool = True
    output_name: str = DEFAULT_OUTPUT_NAME
    # Replaces the default validator mapping wholesale when non-empty.
    # Values are builtin names ("file", "roam", "always-valid", "always-invalid")
    # or import strings ("package.module:function").
    validators: dict[str, str] = Field(default_factory=dict)
    # "source": validate file targets resolved against the linking note's directory.
    # "base": validate raw targets, bare relative paths resolve against kb_root.
    resolve_relative_to: Literal["base", "source"] = "source"
    file_type: str = FILE_LINK_TYPE
    roam_type: str = ROAM_LINK_TYPE

    @field_validator("header_prefixes")
    @classmethod
    def _no_empty_prefix(cls, value: list[str]) -> list[str]:
        if any(not prefix for prefix in value):
            raise ValueError("header prefixes must be non-empty strings")
        return value


def _discover_config_file(start_dir: Path | None = None, max_depth: int = MAX_CONFIG_SEARCH_DEPTH) -> Path | None:
    """Walk up from start_dir looking for .roamlint.yaml.

    Args:
        start_dir: Directory to start from (defaults to cwd)
        max_depth: Maximum directories to traverse up

    Returns:
        Path to the config file if found, None otherwise.
    """
    current = Path(start_dir or os.getcwd()).resolve()

    for _ in range(max_depth):
        config_file = current / CONFIG_FILENAME
        if config_file.is_file():
            return config_file

        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    return None


def _read_config_file(config_file: Path) -> dict[str, Any]:
    try:
        content = config_file.read_text(encoding="utf-8")
        data = yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_file}: expected a mapping at the top level")

    kb_path = data.pop("kb_path", None)
    if kb_path is not None and "kb_root" not in data:
        data["kb_root"] = (config_file.parent / str(kb_path)).resolve()

    return data


def load_settings(start_dir: Path | None = None, **overrides: Any) -> LinkCheckSettings:
    """Build settings from config file, environment and explicit overrides.

    Precedence, lowest first:
    1. .roamlint.yaml found by walking up from start_dir
    2. ROAMLINT_KB_ROOT environment variable
    3. Keyword overrides whose value is not None (CLI flags)

    Raises:
        ConfigurationError: If the config file or a value in it is invalid.
    """
    data: dict[str, Any] = {}

    config_file = _discover_config_file(start_dir)
    if config_file:
        log.debug("Using config file %s", config_file)
        data.update(_read_config_file(config_file))

    env_root = os.environ.get("ROAMLINT_KB_ROOT")
    if env_root:
        data["kb_root"] = Path(env_root)

    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return LinkCheckSettings.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"  - {loc}: {error['msg']}")
        raise ConfigurationError("Invalid configuration:\n" + "\n".join(errors)) from e


def get_kb_root(settings: LinkCheckSettings) -> Path:
    """Get the knowledge base root directory.

    Raises:
        ConfigurationError: If no root is configured.
    """
    if settings.kb_root is not None:
        return settings.kb_root

    raise ConfigurationError(
        "No knowledge base root configured. Options:\n"
        f"  1. Add 'kb_path: <dir>' to a {CONFIG_FILENAME} file\n"
        "  2. Set ROAMLINT_KB_ROOT to the notes directory\n"
        "  3. Pass --kb-root on the command line",
        {"suggestion": "roamlint --kb-root ~/notes scan"},
    )
