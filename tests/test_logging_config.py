"""Tests for structured logging and rotation context binding."""

import json
import logging
import sys
import time

import pytest

from src.logging_config.config import DEFAULT_LOGGING_CONFIG, LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import RotationContext, get_context_dict
from src.logging_config.performance import PerformanceTimer, log_performance
from src.logging_config.setup import (
    ConsoleFormatter,
    StructuredFormatter,
    config_from_settings,
    configure_logging,
    redact,
)
from src.settings import Settings


def _record(msg="test", level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="test", level=level, pathname="test.py",
        lineno=1, msg=msg, args=(), exc_info=exc_info,
    )


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLoggingConfig:
    """Tests for logging configuration dataclasses."""

    def test_default_config_values(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.JSON
        assert config.include_caller is True
        assert config.slow_threshold_ms == 5000.0
        assert config.service_name == "secret-rotation"

    def test_from_settings(self):
        config = config_from_settings(Settings(log_level="debug", log_format="console"))
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.CONSOLE

    def test_from_settings_ignores_unknown_values(self):
        config = config_from_settings(Settings(log_level="chatty", log_format="xml"))
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.JSON

    def test_from_settings_leaves_default_untouched(self):
        config_from_settings(Settings(log_level="ERROR"))
        assert DEFAULT_LOGGING_CONFIG.level == LogLevel.INFO


class TestRotationContext:
    """Tests for invocation context management."""

    def test_context_sets_fields(self):
        with RotationContext(secret_id="db/app", step="setSecret", token="t1"):
            assert get_context_dict() == {"secret_id": "db/app", "step": "setSecret", "token": "t1"}
        assert get_context_dict() == {}

    def test_context_dict_empty_outside(self):
        assert get_context_dict() == {}

    def test_extra_context_is_scoped(self):
        with RotationContext(secret_id="db/app", extra={"strategy": "postgres"}):
            assert get_context_dict()["strategy"] == "postgres"
        assert "strategy" not in get_context_dict()

    def test_nested_contexts_restore_outer(self):
        with RotationContext(secret_id="outer"):
            with RotationContext(secret_id="inner"):
                assert get_context_dict()["secret_id"] == "inner"
            assert get_context_dict()["secret_id"] == "outer"


class TestStructuredFormatter:
    """Tests for JSON structured log formatting."""

    def test_formats_as_json(self):
        parsed = json.loads(StructuredFormatter().format(_record("hello world")))
        assert parsed["message"] == "hello world"
        assert parsed["level"] == "INFO"
        assert parsed["service"] == "secret-rotation"
        assert "timestamp" in parsed

    def test_excludes_caller_when_disabled(self):
        parsed = json.loads(StructuredFormatter(include_caller=False).format(_record()))
        assert "line" not in parsed
        assert "function" not in parsed

    def test_includes_rotation_context(self):
        with RotationContext(secret_id="db/app", step="testSecret", token="t1"):
            parsed = json.loads(StructuredFormatter().format(_record()))
        assert parsed["secret_id"] == "db/app"
        assert parsed["step"] == "testSecret"
        assert parsed["token"] == "t1"

    def test_formats_exception(self):
        try:
            raise ValueError("test error")
        except ValueError:
            record = _record("failed", logging.ERROR, sys.exc_info())
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["exception"]["type"] == "ValueError"
        assert "test error" in parsed["exception"]["message"]

    def test_includes_extra_fields(self):
        record = _record()
        record.duration_ms = 42.5
        record.outcome = "completed"
        record.error_code = "SECRET_NOT_FOUND"
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["duration_ms"] == 42.5
        assert parsed["outcome"] == "completed"
        assert parsed["error_code"] == "SECRET_NOT_FOUND"

    def test_redacts_credentials(self):
        record = _record()
        record.extra_data = {"username": "app", "password": "hunter2"}
        with RotationContext(secret_id="db/app", extra={"key": "k1"}):
            output = StructuredFormatter().format(record)
        parsed = json.loads(output)
        assert "hunter2" not in output
        assert "k1" not in output
        assert parsed["extra_data"]["username"] == "app"
        assert parsed["key"] == "***redacted***"

    def test_redact_helper(self):
        assert redact({"password": "x", "host": "h"}, {"password"}) == {
            "password": "***redacted***", "host": "h",
        }


class TestConsoleFormatter:
    def test_formats_readable_output(self):
        output = ConsoleFormatter().format(_record("hello", logging.WARNING))
        assert "hello" in output
        assert "WARNING" in output

    def test_includes_context_info(self):
        with RotationContext(secret_id="db/app"):
            output = ConsoleFormatter().format(_record())
        assert "secret_id=db/app" in output


class TestConfigureLogging:
    """Tests for the configure_logging setup function."""

    def test_json_format(self, restore_root_logger):
        configure_logging(LoggingConfig(format=LogFormat.JSON))
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)

    def test_console_format(self, restore_root_logger):
        configure_logging(LoggingConfig(format=LogFormat.CONSOLE))
        assert isinstance(restore_root_logger.handlers[0].formatter, ConsoleFormatter)

    def test_sets_log_level(self, restore_root_logger):
        configure_logging(LoggingConfig(level=LogLevel.DEBUG))
        assert restore_root_logger.level == logging.DEBUG

    def test_quiets_client_libraries(self, restore_root_logger):
        configure_logging()
        for name in ("botocore", "httpx", "pymongo"):
            assert logging.getLogger(name).level >= logging.WARNING


class TestPerformanceLogging:
    """Tests for performance timing decorator and context manager."""

    def test_log_performance_returns_value(self):
        @log_performance(threshold_ms=10000)
        def fast_func():
            return 42

        assert fast_func() == 42

    def test_log_performance_preserves_name(self):
        @log_performance()
        def my_function():
            """My docstring."""

        assert my_function.__name__ == "my_function"
        assert my_function.__doc__ == "My docstring."

    def test_log_performance_with_exception(self):
        @log_performance(threshold_ms=10000)
        def failing_func():
            raise ValueError("test error")

        with pytest.raises(ValueError, match="test error"):
            failing_func()

    def test_slow_call_logged_as_warning(self, caplog):
        @log_performance(threshold_ms=0, logger_name="perf.test")
        def slow_func(password):
            return password

        with caplog.at_level(logging.DEBUG, logger="perf.test"):
            slow_func("hunter2")
        assert caplog.records[-1].levelno == logging.WARNING
        assert "hunter2" not in caplog.text

    def test_performance_timer_records_duration(self):
        with PerformanceTimer("createSecret") as timer:
            time.sleep(0.01)
        assert timer.duration_ms >= 10

    def test_performance_timer_with_exception(self, caplog):
        with caplog.at_level(logging.ERROR, logger="src.logging_config.performance"):
            with pytest.raises(ValueError):
                with PerformanceTimer("setSecret") as timer:
                    raise ValueError("oops")
        assert timer.duration_ms >= 0
        assert "setSecret failed" in caplog.text
