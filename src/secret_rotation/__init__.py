"""Managed Secret Credential Rotation.

Drives a versioned secret through createSecret, setSecret, testSecret
and finishSecret, dispatching each step to the strategy for the
secret's credential kind.
"""

from .config import (
    RotationConfig,
    RotationStep,
    StepOutcome,
)
from .models import (
    RotationRequest,
    StepResult,
)
from .issuer import (
    ApiKeyCredential,
    ApiKeyIssuer,
    HttpApiKeyIssuer,
)
from .strategies import (
    ApiKeyStrategy,
    DocumentDBStrategy,
    GenericStrategy,
    MySQLStrategy,
    PostgresStrategy,
    RelationalStrategy,
    RotationStrategy,
)
from .selector import (
    StrategySelector,
    resolve_strategy_key,
)
from .orchestrator import RotationOrchestrator

__all__ = [
    # Config
    "RotationConfig",
    "RotationStep",
    "StepOutcome",
    # Models
    "RotationRequest",
    "StepResult",
    # Issuer
    "ApiKeyCredential",
    "ApiKeyIssuer",
    "HttpApiKeyIssuer",
    # Strategies
    "ApiKeyStrategy",
    "DocumentDBStrategy",
    "GenericStrategy",
    "MySQLStrategy",
    "PostgresStrategy",
    "RelationalStrategy",
    "RotationStrategy",
    # Selector
    "StrategySelector",
    "resolve_strategy_key",
    # Orchestrator
    "RotationOrchestrator",
]
