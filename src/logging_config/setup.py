"""Logging Setup.

One-call configuration for structured logging in the rotation service.
Supports JSON output for deployed functions and colored console for
local runs.
"""

import dataclasses
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from src.logging_config.config import (
    DEFAULT_LOGGING_CONFIG,
    REDACTED,
    LogFormat,
    LoggingConfig,
    LogLevel,
)
from src.logging_config.context import get_context_dict
from src.settings import Settings


def redact(values: Mapping[str, Any], fields: Iterable[str]) -> dict:
    """Copy a mapping with credential-bearing keys masked."""
    masked = set(fields)
    return {k: (REDACTED if k in masked else v) for k, v in values.items()}


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter.

    Produces one JSON object per log line with consistent fields:
    timestamp, level, logger, message, plus the bound rotation context.
    """

    # Record attributes copied into the JSON entry when present
    EXTRA_FIELDS = ("duration_ms", "outcome", "strategy", "error_code", "extra_data")

    def __init__(
        self,
        service_name: str = "secret-rotation",
        include_caller: bool = True,
        redact_fields: Optional[Iterable[str]] = None,
    ):
        super().__init__()
        self.service_name = service_name
        self.include_caller = include_caller
        self.redact_fields = frozenset(
            DEFAULT_LOGGING_CONFIG.redact_fields if redact_fields is None else redact_fields
        )

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        if self.include_caller:
            log_entry["module"] = record.module
            log_entry["function"] = record.funcName
            log_entry["line"] = record.lineno

        log_entry.update(redact(get_context_dict(), self.redact_fields))

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                value = getattr(record, key)
                if isinstance(value, Mapping):
                    value = redact(value, self.redact_fields)
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for local runs."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.now(timezone.utc).strftime("%H:%M:%S.%f")[:-3]

        ctx = redact(get_context_dict(), DEFAULT_LOGGING_CONFIG.redact_fields)
        ctx_str = ""
        if ctx:
            ctx_str = " [" + ", ".join(f"{k}={v}" for k, v in ctx.items()) + "]"

        line = (
            f"{color}{timestamp} {record.levelname:8s}{self.RESET} "
            f"{record.name}: {record.getMessage()}{ctx_str}"
        )

        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)

        return line


def config_from_settings(settings: Settings, base: Optional[LoggingConfig] = None) -> LoggingConfig:
    """Apply ROTATION_LOG_LEVEL / ROTATION_LOG_FORMAT on top of a base config.

    Unrecognized values leave the base value in place.
    """
    config = base or DEFAULT_LOGGING_CONFIG

    level = (settings.log_level or "").upper()
    if level in LogLevel.__members__:
        config = dataclasses.replace(config, level=LogLevel(level))

    fmt = (settings.log_format or "").lower()
    if fmt in {f.value for f in LogFormat}:
        config = dataclasses.replace(config, format=LogFormat(fmt))

    return config


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """Configure structured logging for the rotation service.

    Call once per process, before the first invocation is handled.
    Replaces any handlers already attached to the root logger, which
    includes the bootstrap handler some function runtimes install.

    Args:
        config: Logging configuration. Uses defaults if not provided.
    """
    config = config or DEFAULT_LOGGING_CONFIG

    if config.format == LogFormat.JSON:
        formatter: logging.Formatter = StructuredFormatter(
            service_name=config.service_name,
            include_caller=config.include_caller,
            redact_fields=config.redact_fields,
        )
    else:
        formatter = ConsoleFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, config.level.value))

    for noisy in config.quiet_loggers:
        logging.getLogger(noisy).setLevel(logging.WARNING)
