"""Unit tests for logging configuration."""

from pathlib import Path

from loguru import logger

from geobatch.core.logging import job_logger, setup_logging


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

    def test_file_sink(self, tmp_path: Path) -> None:
        """A log_dir enables the rotating file sink."""
        log_dir = tmp_path / "logs"
        setup_logging("INFO", log_dir=str(log_dir))
        logger.info("file sink check")
        logger.complete()
        assert "file sink check" in (log_dir / "geobatch.log").read_text(encoding="utf-8")
        setup_logging("INFO")

    def test_error_sink_only_receives_errors(self, tmp_path: Path) -> None:
        """geobatch.errors.log gets ERROR records and skips INFO."""
        setup_logging("INFO", log_dir=str(tmp_path))
        logger.info("routine line")
        logger.error("broken line")
        logger.complete()
        errors = (tmp_path / "geobatch.errors.log").read_text(encoding="utf-8")
        assert "broken line" in errors
        assert "routine line" not in errors
        setup_logging("INFO")


class TestJobLogger:
    """Tests for job-bound loggers."""

    def test_lines_carry_job_id(self, tmp_path: Path) -> None:
        setup_logging("INFO", log_dir=str(tmp_path))
        job_logger("job_1_abc").info("tagged line")
        logger.info("plain line")
        logger.complete()
        text = (tmp_path / "geobatch.log").read_text(encoding="utf-8")
        assert "[job_1_abc] tagged line" in text
        assert "| plain line" in text
        setup_logging("INFO")
