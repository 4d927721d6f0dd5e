"""Strategy Selector.

Maps a secret's discriminator (and, for relational secrets, its engine
subtype) to the strategy that rotates it. Resolution order:

    AWS_API_KEY                       -> api_key
    RDS_CREDENTIALS + postgres engine -> postgres
    RDS_CREDENTIALS + anything else   -> mysql
    DOCUMENTDB_CREDENTIALS            -> documentdb
    anything else, or no kind         -> generic
"""

from typing import Any, Callable, Dict, Mapping, Optional

from src.rotation_errors import StrategyResolutionError
from src.secret_rotation.config import DEFAULT_ROTATION_CONFIG, RotationConfig
from src.secret_rotation.strategies import (
    ApiKeyStrategy,
    DocumentDBStrategy,
    GenericStrategy,
    MySQLStrategy,
    PostgresStrategy,
    RotationStrategy,
)
from src.secrets_vault import DISCRIMINATOR_FIELD, ENGINE_FIELD, SecretKind, VersionedSecretStore

StrategyFactory = Callable[[VersionedSecretStore, RotationConfig], RotationStrategy]

POSTGRES_ENGINES = frozenset({"postgres", "postgresql", "aurora-postgresql"})

DEFAULT_FACTORIES: Dict[str, StrategyFactory] = {
    "api_key": ApiKeyStrategy,
    "postgres": PostgresStrategy,
    "mysql": MySQLStrategy,
    "documentdb": DocumentDBStrategy,
    "generic": GenericStrategy,
}


def resolve_strategy_key(payload: Mapping[str, Any]) -> str:
    """Name the strategy for a CURRENT payload; first match wins."""
    kind = payload.get(DISCRIMINATOR_FIELD)
    if kind == SecretKind.API_KEY.value:
        return "api_key"
    if kind == SecretKind.RDS_CREDENTIALS.value:
        engine = str(payload.get(ENGINE_FIELD) or "").lower()
        return "postgres" if engine in POSTGRES_ENGINES else "mysql"
    if kind == SecretKind.DOCUMENTDB_CREDENTIALS.value:
        return "documentdb"
    return "generic"


class StrategySelector:
    """Builds the strategy for a secret, bound to the injected store.

    Factories can be replaced per key so deployments and tests supply
    their own backing-system collaborators.
    """

    def __init__(
        self,
        store: VersionedSecretStore,
        config: Optional[RotationConfig] = None,
        factories: Optional[Dict[str, StrategyFactory]] = None,
    ):
        self.store = store
        self.config = config or DEFAULT_ROTATION_CONFIG
        self._factories: Dict[str, StrategyFactory] = dict(DEFAULT_FACTORIES)
        if factories:
            self._factories.update(factories)

    def register(self, key: str, factory: StrategyFactory) -> None:
        """Register or replace the factory for a strategy key."""
        self._factories[key] = factory

    def select(self, payload: Mapping[str, Any], secret_id: Optional[str] = None) -> RotationStrategy:
        """Return the strategy for a CURRENT payload."""
        if not isinstance(payload, Mapping):
            raise StrategyResolutionError(
                "Secret payload is not a mapping", secret_id=secret_id
            )
        key = resolve_strategy_key(payload)
        factory = self._factories.get(key)
        if factory is None:
            raise StrategyResolutionError(
                f"No strategy registered for {key!r}", secret_id=secret_id
            )
        return factory(self.store, self.config)
