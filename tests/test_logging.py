"""Tests for logging setup."""

import logging
import sys
from pathlib import Path

import pytest

from cdoc.utils.logging import LOGGER_NAME, setup_logging


@pytest.fixture(autouse=True)
def _reset_logger():
    """Remove handlers added by each test."""
    yield
    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in package_logger.handlers:
        handler.close()
    package_logger.handlers.clear()


class TestSetupLogging:
    """Tests for the setup_logging function."""

    def test_returns_logger(self) -> None:
        logger = setup_logging()
        assert isinstance(logger, logging.Logger)
        assert logger.name == "cdoc"

    def test_default_level_is_warning(self) -> None:
        logger = setup_logging()
        assert logger.level == logging.WARNING

    def test_custom_level(self) -> None:
        logger = setup_logging(level="DEBUG")
        assert logger.level == logging.DEBUG

    def test_unknown_level_falls_back(self) -> None:
        logger = setup_logging(level="LOUD")
        assert logger.level == logging.WARNING

    def test_console_handler_writes_to_stderr(self) -> None:
        logger = setup_logging()
        handlers = [h for h in logger.handlers if type(h) is logging.StreamHandler]
        assert len(handlers) == 1
        assert handlers[0].stream is sys.stderr

    def test_console_level_raises_threshold(self) -> None:
        logger = setup_logging(level="INFO", console_level="ERROR")
        assert logger.level == logging.INFO
        assert logger.handlers[0].level == logging.ERROR

    def test_console_level_never_lowers_threshold(self) -> None:
        logger = setup_logging(level="ERROR", console_level="DEBUG")
        assert logger.handlers[0].level == logging.ERROR

    def test_no_file_handler_by_default(self) -> None:
        logger = setup_logging()
        handler_types = [type(h) for h in logger.handlers]
        assert logging.FileHandler not in handler_types

    def test_clears_existing_handlers(self) -> None:
        logger = setup_logging()
        initial_count = len(logger.handlers)
        logger = setup_logging()
        assert len(logger.handlers) == initial_count

    def test_file_handler_writes(self, tmp_path: Path) -> None:
        log_file = tmp_path / "test.log"
        logger = setup_logging(level="INFO", log_file=str(log_file))
        logging.getLogger("cdoc.pipeline.processor").info("test message")
        for handler in logger.handlers:
            handler.flush()
        assert "test message" in log_file.read_text(encoding="utf-8")
