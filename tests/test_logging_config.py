"""Tests for the logging setup helper."""

import logging

import pytest

from imagespace.logging_config import setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("imagespace")
    saved = (logger.level, list(logger.handlers))
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]


class TestSetupLogging:
    def test_console_handler(self, package_logger):
        setup_logging(logging.DEBUG)
        assert package_logger.level == logging.DEBUG
        (handler,) = package_logger.handlers
        assert isinstance(handler, logging.StreamHandler)
        assert handler.level == logging.DEBUG

    def test_repeat_call_does_not_duplicate(self, package_logger):
        setup_logging()
        setup_logging(logging.WARNING)
        assert len(package_logger.handlers) == 1
        assert package_logger.level == logging.WARNING

    def test_file_handler(self, package_logger, tmp_path):
        log_file = tmp_path / "run.log"
        setup_logging(logging.INFO, log_file=log_file)
        assert len(package_logger.handlers) == 2
        logging.getLogger("imagespace.engine").info("hello from the engine")
        for handler in package_logger.handlers:
            handler.flush()
        text = log_file.read_text(encoding="utf-8")
        assert "Logging initialized." in text
        assert "imagespace.engine - INFO - hello from the engine" in text
