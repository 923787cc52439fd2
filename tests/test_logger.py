"""
Tests for logger functionality.
"""

import pytest
from jobboard.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["queries_executed"] == 0

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        # Should not raise exceptions
        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_log_with_context(self, tmp_path):
        """Context is appended to the message as JSON."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Job updated", job_id=5, fields=["title"])

        log_content = next(tmp_path.glob("*.log")).read_text()
        assert 'Job updated | Context: {"job_id": 5, "fields": ["title"]}' in log_content

    def test_metrics_tracking(self, tmp_path):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.record_query(3)
        logger.record_query(0)
        assert logger.metrics["queries_executed"] == 2
        assert logger.metrics["rows_returned"] == 3

        logger.record_operation("create")
        logger.record_operation("get")
        logger.record_operation_failure("get", "NotFoundError")

        metrics = logger.get_metrics()

        assert metrics["errors_by_type"]["NotFoundError"] == 1
        assert metrics["operations"]["create"]["calls"] == 1
        assert metrics["operations"]["create"]["failure_rate"] == 0.0
        assert metrics["operations"]["get"]["failures"] == 1
        assert metrics["operations"]["get"]["failure_rate"] == 1.0

    def test_failure_rate_calculation(self, tmp_path):
        """Failure rate should be calculated correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        # 3 calls, 1 failure = 33.3% failure rate
        for _ in range(3):
            logger.record_operation("update")
        logger.record_operation_failure("update", "ValidationError")

        metrics = logger.get_metrics()
        failure_rate = metrics["operations"]["update"]["failure_rate"]

        assert failure_rate == pytest.approx(0.333, rel=0.01)

    def test_metrics_summary(self, tmp_path):
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )
        logger.record_operation("remove")
        logger.record_operation_failure("remove", "NotFoundError")

        logger.log_metrics_summary()

        log_content = next(tmp_path.glob("*.log")).read_text()
        assert "remove: 1/1 failed (100.0%)" in log_content
        assert "NotFoundError: 1" in log_content

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Test message")

        # Check that a log file was created
        log_files = list(tmp_path.glob("*.log"))
        assert len(log_files) == 1

        # Check that message was written
        log_content = log_files[0].read_text()
        assert "Test message" in log_content

    def test_file_logging_disabled(self, tmp_path):
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_file=False,
            enable_console=False,
        )

        logger.info("Not written")

        assert list(tmp_path.glob("*.log")) == []


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()  # Start fresh

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_query(1)

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        # Should be different instance with fresh metrics
        assert logger2.metrics["queries_executed"] == 0

    def test_log_dir_from_environment(self, tmp_path, monkeypatch):
        """File logging follows JOBBOARD_LOG_DIR when no directory is passed."""
        log_dir = tmp_path / "logs"
        monkeypatch.setenv("JOBBOARD_LOG_DIR", str(log_dir))
        reset_logger()

        logger = get_logger(enable_console=False)
        logger.info("From env")

        assert len(list(log_dir.glob("jobboard_*.log"))) == 1
        reset_logger()

    def test_no_log_dir_means_console_only(self, monkeypatch):
        monkeypatch.delenv("JOBBOARD_LOG_DIR", raising=False)
        reset_logger()

        logger = get_logger()

        assert all(type(h).__name__ == "StreamHandler" for h in logger.logger.handlers)
        reset_logger()
