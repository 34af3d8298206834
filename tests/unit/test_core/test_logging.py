"""Unit tests for logging configuration."""

import logging
from pathlib import Path

from loguru import logger

from voter_radius.core.logging import InterceptHandler, setup_logging


class TestLogging:
    """Tests for Loguru logging setup."""

    def test_setup_logging_does_not_raise(self) -> None:
        """setup_logging with valid log level does not raise."""
        setup_logging("DEBUG")
        setup_logging("INFO")
        setup_logging("WARNING")

    def test_setup_logging_case_insensitive(self) -> None:
        """setup_logging accepts case-insensitive log levels."""
        setup_logging("info")
        setup_logging("debug")

    def test_file_sink_written(self, tmp_path: Path) -> None:
        """A log directory enables the rotating file sink."""
        setup_logging("INFO", log_dir=str(tmp_path))
        logger.info("warm run finished")
        logger.complete()
        log_file = tmp_path / "voter-radius.log"
        assert log_file.exists()
        assert "warm run finished" in log_file.read_text()
        setup_logging("INFO")

    def test_stdlib_records_intercepted(self) -> None:
        """Standard-library loggers are routed through the intercept handler."""
        setup_logging("INFO")
        assert any(isinstance(h, InterceptHandler) for h in logging.getLogger().handlers)
