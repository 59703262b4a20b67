"""Tests for logging setup."""

import logging
from pathlib import Path

import pytest

from core.log import setup_logging


@pytest.fixture
def clean_core_logger():
    logger = logging.getLogger("core")
    saved = list(logger.handlers)
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved


def test_repeated_setup_adds_no_duplicate_handlers(clean_core_logger, tmp_path: Path) -> None:
    """Calling setup twice must not print every line twice."""
    log_file = tmp_path / "logs" / "car.log"
    setup_logging("INFO", log_file)
    setup_logging("DEBUG", log_file)

    handlers = clean_core_logger.handlers
    assert len(handlers) == 2
    assert sum(isinstance(h, logging.FileHandler) for h in handlers) == 1
    assert clean_core_logger.level == logging.DEBUG
    assert log_file.parent.exists()


def test_console_only(clean_core_logger) -> None:
    setup_logging("warning")
    assert len(clean_core_logger.handlers) == 1
    assert clean_core_logger.handlers[0].level == logging.WARNING
