"""Function entry point invoked by the secret store's rotation schedule."""

import logging
from typing import Any, Dict, Mapping, Optional

from src.logging_config import config_from_settings, configure_logging
from src.secret_rotation.config import RotationConfig
from src.secret_rotation.models import RotationRequest
from src.secret_rotation.orchestrator import RotationOrchestrator
from src.secret_rotation.selector import StrategySelector
from src.secrets_vault import AwsSecretsManagerStore, SecretsVault, VaultConfig, VersionedSecretStore
from src.settings import Settings, get_settings

logger = logging.getLogger(__name__)

_logging_configured = False


def build_store(settings: Settings) -> VersionedSecretStore:
    """Create the secret store named by ROTATION_STORE_BACKEND."""
    backend = settings.store_backend.lower()
    if backend == "memory":
        return SecretsVault(VaultConfig.from_settings(settings))
    if backend == "aws":
        return AwsSecretsManagerStore(
            region=settings.aws_region,
            endpoint_url=settings.secretsmanager_endpoint_url,
        )
    raise ValueError(f"Unsupported store backend: {settings.store_backend!r}")


def build_orchestrator(
    settings: Optional[Settings] = None,
    store: Optional[VersionedSecretStore] = None,
) -> RotationOrchestrator:
    """Wire a store, selector and orchestrator for one invocation."""
    settings = settings or get_settings()
    store = store or build_store(settings)
    config = RotationConfig.from_settings(settings)
    return RotationOrchestrator(store, StrategySelector(store, config), config)


def lambda_handler(event: Mapping[str, Any], context: Any = None) -> Dict[str, Any]:
    """Process one rotation step.

    Failures propagate so the invoking scheduler can apply its own
    retry policy.
    """
    global _logging_configured
    settings = get_settings()
    if not _logging_configured:
        configure_logging(config_from_settings(settings))
        _logging_configured = True

    request = RotationRequest.from_event(event)
    result = build_orchestrator(settings).handle(request)
    return result.to_dict()
