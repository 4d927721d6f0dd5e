"""Versioned secret storage with stage labels."""

from .config import (
    DISCRIMINATOR_FIELD,
    ENGINE_FIELD,
    SecretKind,
    StageLabel,
    VaultConfig,
)
from .store import (
    SecretVersion,
    VersionedSecretStore,
)
from .vault import SecretsVault
from .aws_store import AwsSecretsManagerStore

__all__ = [
    # Config
    "DISCRIMINATOR_FIELD",
    "ENGINE_FIELD",
    "SecretKind",
    "StageLabel",
    "VaultConfig",
    # Store
    "SecretVersion",
    "VersionedSecretStore",
    "SecretsVault",
    "AwsSecretsManagerStore",
]
