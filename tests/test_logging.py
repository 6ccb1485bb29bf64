"""Tests for package logger setup."""

import logging

from roamlint._logging import PACKAGE_LOGGER, configure_logging


class TestConfigureLogging:
    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("ROAMLINT_LOG_LEVEL", "debug")
        logger = configure_logging()

        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("ROAMLINT_LOG_LEVEL", "chatty")
        assert configure_logging().level == logging.INFO

    def test_quiet_raises_threshold_to_error(self, monkeypatch):
        monkeypatch.setenv("ROAMLINT_LOG_LEVEL", "DEBUG")
        logger = configure_logging(quiet=True)

        assert logger.level == logging.ERROR
        assert all(handler.level == logging.ERROR for handler in logger.handlers)

    def test_repeated_calls_keep_one_handler(self):
        configure_logging()
        configure_logging(quiet=True)

        logger = logging.getLogger(PACKAGE_LOGGER)
        assert len(logger.handlers) == 1
        assert logger.level == logging.ERROR
