"""Secret store configuration: stage labels, credential kinds, vault settings."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.settings import Settings, get_settings


class StageLabel(str, Enum):
    """Labels marking the role of a secret version."""

    CURRENT = "AWSCURRENT"
    PENDING = "AWSPENDING"
    PREVIOUS = "AWSPREVIOUS"


class SecretKind(str, Enum):
    """Values of the discriminator field carried by every payload."""

    API_KEY = "AWS_API_KEY"
    RDS_CREDENTIALS = "RDS_CREDENTIALS"
    DOCUMENTDB_CREDENTIALS = "DOCUMENTDB_CREDENTIALS"


# Payload field naming the credential kind
DISCRIMINATOR_FIELD = "nightwatch_secret_type"
# Payload field naming the relational engine subtype
ENGINE_FIELD = "engine"


@dataclass
class VaultConfig:
    """Configuration for the in-memory secrets vault."""

    encryption_key: str = "rotation-vault-key"
    max_versions: int = 10

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "VaultConfig":
        s = settings or get_settings()
        return cls(encryption_key=s.vault_encryption_key, max_versions=s.vault_max_versions)
