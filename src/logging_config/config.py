"""Logging Configuration.

Settings for structured logging, log levels, output formats, and the
credential fields that must never reach a log line.
"""

from dataclasses import dataclass, field
from enum import Enum


class LogLevel(str, Enum):
    """Log level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output format."""
    JSON = "json"
    CONSOLE = "console"


REDACTED = "***redacted***"


@dataclass
class LoggingConfig:
    """Structured logging configuration for rotation invocations."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    include_caller: bool = True
    # Steps or backing-system calls slower than this log at WARNING
    slow_threshold_ms: float = 5000.0
    # Keys masked wherever bound context or extra_data carries them
    redact_fields: frozenset[str] = field(
        default_factory=lambda: frozenset({"password", "key", "secret_string", "SecretString"})
    )
    # Client libraries whose own loggers are held at WARNING
    quiet_loggers: tuple[str, ...] = ("botocore", "boto3", "urllib3", "httpx", "pymongo")
    service_name: str = "secret-rotation"


DEFAULT_LOGGING_CONFIG = LoggingConfig()
