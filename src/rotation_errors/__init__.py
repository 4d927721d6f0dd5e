"""Rotation Error Handling.

Provides the error taxonomy shared by the orchestrator, the secret
store adapters, and the credential strategies.
"""

from src.rotation_errors.config import (
    ERROR_CATEGORY_MAP,
    ErrorCategory,
    ErrorCode,
)
from src.rotation_errors.exceptions import (
    BackingSystemError,
    ConfigurationError,
    CredentialTestError,
    InvalidPayloadError,
    InvalidTriggerError,
    RotationError,
    SecretNotFoundError,
    SecretStoreError,
    StrategyResolutionError,
    UnknownStepError,
)

__all__ = [
    # Config
    "ERROR_CATEGORY_MAP",
    "ErrorCategory",
    "ErrorCode",
    # Exceptions
    "BackingSystemError",
    "ConfigurationError",
    "CredentialTestError",
    "InvalidPayloadError",
    "InvalidTriggerError",
    "RotationError",
    "SecretNotFoundError",
    "SecretStoreError",
    "StrategyResolutionError",
    "UnknownStepError",
]
