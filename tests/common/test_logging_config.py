"""
Tests for logging configuration.
"""

import json
import logging

import pytest

from contactgraph.common.logging_config import (
    ROOT_LOGGER_NAME,
    JSONFormatter,
    LoggingTimer,
    PerformanceFilter,
    configure_external_library_logging,
    get_logger,
    setup_logging
)


class TestSetupLogging:
    """Test setup_logging."""

    def test_returns_library_root_logger(self):
        """Test the configured logger is the library root."""
        logger = setup_logging(level="DEBUG", force_setup=True)
        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_invalid_level(self):
        """Test an unknown level raises ValueError."""
        with pytest.raises(ValueError, match="Invalid logging level"):
            setup_logging(level="LOUD", force_setup=True)

    def test_no_file_handler_by_default(self, monkeypatch):
        """Test only a console handler is installed without a log file."""
        monkeypatch.delenv("CONTACTGRAPH_LOG_FILE", raising=False)
        monkeypatch.delenv("CONTACTGRAPH_LOG_DIR", raising=False)
        logger = setup_logging(level="INFO", force_setup=True)
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_log_file(self, tmp_path):
        """Test messages reach the requested log file."""
        log_file = tmp_path / "logs" / "run.log"
        logger = setup_logging(level="INFO", log_file=str(log_file), console=False, force_setup=True)
        get_logger("contactgraph.tests").info("hello from the tests")
        for handler in logger.handlers:
            handler.flush()
        assert "hello from the tests" in log_file.read_text()

    def test_environment_level(self, monkeypatch):
        """Test CONTACTGRAPH_LOG_LEVEL is used when no level is given."""
        monkeypatch.setenv("CONTACTGRAPH_LOG_LEVEL", "WARNING")
        logger = setup_logging(force_setup=True)
        assert logger.level == logging.WARNING

    def test_existing_configuration_kept(self):
        """Test a second call without force_setup does not add handlers."""
        logger = setup_logging(level="INFO", force_setup=True)
        count = len(logger.handlers)
        setup_logging(level="DEBUG")
        assert len(logger.handlers) == count


class TestFormattersAndFilters:
    """Test JSONFormatter and PerformanceFilter."""

    def _record(self, message, **extra):
        record = logging.LogRecord("contactgraph.test", logging.INFO, __file__, 1, message, None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter_includes_extra(self):
        """Test extra fields appear in the JSON object."""
        payload = json.loads(JSONFormatter().format(self._record("done", contacts=12)))
        assert payload["message"] == "done"
        assert payload["contacts"] == 12
        assert payload["level"] == "INFO"

    def test_performance_filter(self):
        """Test only timing messages pass the filter."""
        performance_filter = PerformanceFilter()
        assert performance_filter.filter(self._record("Performance: load completed in 0.1s"))
        assert not performance_filter.filter(self._record("Loaded 10 contacts"))


class TestLoggingTimer:
    """Test LoggingTimer."""

    def test_logs_elapsed_time(self, caplog):
        """Test the timer logs a performance record with its details."""
        caplog.set_level(logging.INFO, logger=ROOT_LOGGER_NAME)
        with LoggingTimer("simulate", {"nodes": 3}):
            pass

        records = [r for r in caplog.records if r.name == f"{ROOT_LOGGER_NAME}.performance"]
        assert len(records) == 1
        assert "simulate completed" in records[0].getMessage()
        assert records[0].nodes == 3
        assert records[0].elapsed >= 0.0


def test_configure_external_library_logging():
    """Test third-party loggers are set to the requested level."""
    configure_external_library_logging({"matplotlib": "ERROR"})
    assert logging.getLogger("matplotlib").level == logging.ERROR
