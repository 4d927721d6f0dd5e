"""Rotation Error Configuration.

Defines error codes and failure categories for structured error
reporting across the rotation orchestrator, the secret store
adapters, and the credential strategies.
"""

from enum import Enum
from typing import Dict


class ErrorCode(Enum):
    """Standardized error codes for rotation failures."""

    # Configuration errors (fatal, never retried)
    UNKNOWN_STEP = "UNKNOWN_STEP"
    INVALID_TRIGGER = "INVALID_TRIGGER"
    STRATEGY_RESOLUTION_FAILED = "STRATEGY_RESOLUTION_FAILED"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"

    # Secret store errors
    SECRET_NOT_FOUND = "SECRET_NOT_FOUND"
    SECRET_STORE_ERROR = "SECRET_STORE_ERROR"

    # Backing system errors
    BACKING_SYSTEM_ERROR = "BACKING_SYSTEM_ERROR"
    CREDENTIAL_TEST_FAILED = "CREDENTIAL_TEST_FAILED"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorCategory(Enum):
    """Where a failure originated."""

    CONFIGURATION = "configuration"
    STORE = "store"
    BACKING_SYSTEM = "backing_system"
    INTERNAL = "internal"


ERROR_CATEGORY_MAP: Dict[ErrorCode, ErrorCategory] = {
    ErrorCode.UNKNOWN_STEP: ErrorCategory.CONFIGURATION,
    ErrorCode.INVALID_TRIGGER: ErrorCategory.CONFIGURATION,
    ErrorCode.STRATEGY_RESOLUTION_FAILED: ErrorCategory.CONFIGURATION,
    ErrorCode.INVALID_PAYLOAD: ErrorCategory.CONFIGURATION,
    ErrorCode.SECRET_NOT_FOUND: ErrorCategory.STORE,
    ErrorCode.SECRET_STORE_ERROR: ErrorCategory.STORE,
    ErrorCode.BACKING_SYSTEM_ERROR: ErrorCategory.BACKING_SYSTEM,
    ErrorCode.CREDENTIAL_TEST_FAILED: ErrorCategory.BACKING_SYSTEM,
    ErrorCode.INTERNAL_ERROR: ErrorCategory.INTERNAL,
}

# Categories the caller's scheduler must not retry with the same input
NON_RETRYABLE_CATEGORIES = frozenset({ErrorCategory.CONFIGURATION})
