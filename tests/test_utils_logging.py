"""Tests for frameforge.utils.logging module."""

import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from frameforge.utils.logging import (
    LOGGER_NAME,
    ProgressLogger,
    Timer,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logger():
    """Remove handlers installed by a test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


# =============================================================================
# setup_logging
# =============================================================================


class TestSetupLogging:
    """Tests for setup_logging function."""

    @pytest.mark.parametrize(
        "verbosity,level",
        [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (-3, logging.WARNING), (9, logging.DEBUG)],
    )
    def test_levels(self, verbosity, level):
        """Verbosity maps to a log level, clamped to the known range."""
        logger = setup_logging(verbosity=verbosity, use_rich=False)
        assert logger.name == LOGGER_NAME
        assert logger.level == level
        assert logger.handlers[0].level == level

    def test_rich_handler(self):
        """Rich output by default."""
        logger = setup_logging()
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)

    def test_plain_handler(self):
        """Plain stream output without rich."""
        logger = setup_logging(use_rich=False)
        assert not isinstance(logger.handlers[0], RichHandler)

    def test_replaces_handlers(self):
        """Repeated setup doesn't stack handlers."""
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_log_file(self, tmp_path: Path):
        """The log file receives debug messages at any verbosity."""
        log_file = tmp_path / "frameforge.log"
        logger = setup_logging(verbosity=0, log_file=log_file, use_rich=False)
        assert len(logger.handlers) == 2

        get_logger(f"{LOGGER_NAME}.core.scanner").debug("scanning tx1")
        for handler in logger.handlers:
            handler.flush()

        assert "scanning tx1" in log_file.read_text()

    def test_get_logger(self):
        """Module loggers are children of the package logger."""
        assert get_logger("frameforge.cli").parent.name == LOGGER_NAME


# =============================================================================
# ProgressLogger and Timer
# =============================================================================


class TestProgressLogger:
    """Tests for ProgressLogger class."""

    def test_interval(self, caplog):
        """Progress is logged every interval and at the end."""
        logger = logging.getLogger("frameforge.test.progress")
        progress = ProgressLogger(logger, total=5, interval=2, description="Translating")

        with caplog.at_level(logging.INFO, logger="frameforge.test.progress"):
            for _ in range(5):
                progress.update()
            progress.finish()

        messages = [record.getMessage() for record in caplog.records]
        assert messages == [
            "Translating: 2/5 (40.0%)",
            "Translating: 4/5 (80.0%)",
            "Translating: 5/5 (100.0%)",
            "Translating: Complete (5 items)",
        ]

    def test_zero_interval(self):
        """Intervals below one are raised to one."""
        progress = ProgressLogger(logging.getLogger("frameforge.test"), total=3, interval=0)
        assert progress.interval == 1


class TestTimer:
    """Tests for Timer class."""

    def test_elapsed(self, caplog):
        """Elapsed time is recorded and logged at debug level."""
        logger = logging.getLogger("frameforge.test.timer")
        with caplog.at_level(logging.DEBUG, logger="frameforge.test.timer"):
            with Timer("Six-frame translation", logger) as timer:
                pass

        assert timer.elapsed >= 0
        assert "Six-frame translation completed in" in caplog.text
