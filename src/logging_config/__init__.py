"""Structured Logging & Rotation Tracing.

Provides structured JSON logging, rotation context propagation,
and performance timing for the rotation service.
"""

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import RotationContext, get_context_dict
from src.logging_config.performance import PerformanceTimer, log_performance
from src.logging_config.setup import config_from_settings, configure_logging, redact

__all__ = [
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "PerformanceTimer",
    "RotationContext",
    "config_from_settings",
    "configure_logging",
    "get_context_dict",
    "log_performance",
    "redact",
]
