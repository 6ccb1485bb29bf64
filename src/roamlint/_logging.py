"""Stderr logging for the roamlint package logger.

Modules log through ``logging.getLogger(__name__)``; per-link verdicts are
DEBUG, scan summaries INFO, skipped or unreadable notes WARNING. Set
ROAMLINT_LOG_LEVEL to change the threshold.
"""

import logging
import os
import sys

PACKAGE_LOGGER = "roamlint"
LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _level_from_env() -> int:
    name = os.environ.get("ROAMLINT_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(quiet: bool = False) -> logging.Logger:
    """Attach a stderr handler to the package logger once.

    Quiet mode raises the threshold to ERROR so only the report reaches the
    terminal. The threshold is re-applied on every call; the handler is not
    duplicated.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    level = logging.ERROR if quiet else _level_from_env()

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        # Report output goes to stdout; keep records off the root logger
        logger.propagate = False

    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
    return logger
