"""Custom Exception Hierarchy.

Typed exceptions for the rotation lifecycle. Every exception carries
the secret id and step it was raised for so a failure can be
diagnosed from the log line alone.
"""

from typing import Any, Dict, List, Optional

from src.rotation_errors.config import (
    ERROR_CATEGORY_MAP,
    NON_RETRYABLE_CATEGORIES,
    ErrorCategory,
    ErrorCode,
)


class RotationError(Exception):
    """Base exception for all rotation errors.

    All custom rotation exceptions inherit from this, allowing the
    invocation entry point to report the entire hierarchy uniformly.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        secret_id: Optional[str] = None,
        step: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = ERROR_CATEGORY_MAP.get(error_code, ErrorCategory.INTERNAL)
        self.secret_id = secret_id
        self.step = step
        self.details = details or []

    @property
    def retryable(self) -> bool:
        return self.category not in NON_RETRYABLE_CATEGORIES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.error_code.value,
            "category": self.category.value,
            "message": self.message,
            "secret_id": self.secret_id,
            "step": self.step,
            "retryable": self.retryable,
            "details": self.details,
        }


class ConfigurationError(RotationError):
    """Raised for fatal misconfiguration; never retried."""


class UnknownStepError(ConfigurationError):
    """Raised when the trigger names a step outside the four-step protocol."""

    def __init__(self, step: str, secret_id: Optional[str] = None):
        super().__init__(
            f"Unknown rotation step: {step!r}",
            ErrorCode.UNKNOWN_STEP,
            secret_id=secret_id,
            step=step,
        )


class InvalidTriggerError(ConfigurationError):
    """Raised when a rotation trigger is missing required fields."""

    def __init__(self, message: str = "Invalid rotation trigger", field: Optional[str] = None):
        details = [{"field": field, "issue": "missing"}] if field else None
        super().__init__(message, ErrorCode.INVALID_TRIGGER, details=details)


class StrategyResolutionError(ConfigurationError):
    """Raised when no strategy can be chosen for a secret.

    Covers a secret with no CURRENT version: the store's not-found error
    is kept as __cause__, but the failure is reported as configuration
    since re-running the same step cannot select a strategy either.
    """

    def __init__(self, message: str, secret_id: Optional[str] = None, step: Optional[str] = None):
        super().__init__(
            message, ErrorCode.STRATEGY_RESOLUTION_FAILED, secret_id=secret_id, step=step
        )


class InvalidPayloadError(ConfigurationError):
    """Raised when a payload lacks fields its credential kind requires."""

    def __init__(
        self,
        message: str,
        secret_id: Optional[str] = None,
        missing: Optional[List[str]] = None,
    ):
        details = [{"field": name, "issue": "missing"} for name in (missing or [])]
        super().__init__(message, ErrorCode.INVALID_PAYLOAD, secret_id=secret_id, details=details)


class SecretNotFoundError(RotationError):
    """Raised when no version matches the requested id, version and stage."""

    def __init__(
        self,
        secret_id: str,
        stage: Optional[str] = None,
        version_id: Optional[str] = None,
    ):
        parts = [f"secret {secret_id!r}"]
        if version_id:
            parts.append(f"version {version_id!r}")
        if stage:
            parts.append(f"stage {stage!r}")
        super().__init__(
            "No value found for " + ", ".join(parts),
            ErrorCode.SECRET_NOT_FOUND,
            secret_id=secret_id,
        )
        self.stage = stage
        self.version_id = version_id


class SecretStoreError(RotationError):
    """Raised when the secret store rejects or fails a request."""

    def __init__(self, message: str, secret_id: Optional[str] = None):
        super().__init__(message, ErrorCode.SECRET_STORE_ERROR, secret_id=secret_id)


class BackingSystemError(RotationError):
    """Raised when activating a credential against a backing system fails."""

    def __init__(self, message: str, secret_id: Optional[str] = None, step: Optional[str] = None):
        super().__init__(message, ErrorCode.BACKING_SYSTEM_ERROR, secret_id=secret_id, step=step)


class CredentialTestError(BackingSystemError):
    """Raised when the pending credential cannot authenticate."""

    def __init__(self, message: str, secret_id: Optional[str] = None):
        super().__init__(message, secret_id=secret_id, step="testSecret")
        self.error_code = ErrorCode.CREDENTIAL_TEST_FAILED
