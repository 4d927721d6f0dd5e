"""Centralized settings for the rotation service.

Uses pydantic-settings to load from environment variables (prefixed ROTATION_)
with defaults suitable for a rotation function running next to its store.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Rotation service settings loaded from environment variables."""

    # --- Secret store ---
    store_backend: str = "aws"  # "aws" or "memory"
    aws_region: str = "us-east-1"
    secretsmanager_endpoint_url: Optional[str] = None
    vault_encryption_key: str = "rotation-vault-key"
    vault_max_versions: int = 10

    # --- Credential generation ---
    password_length: int = 32
    password_exclude_characters: str = "/@\"'\\"
    api_key_bytes: int = 32

    # --- Backing systems ---
    db_connect_timeout: int = 5
    documentdb_tls: bool = True
    api_key_timeout: float = 10.0

    # --- Logging ---
    log_level: str = "INFO"
    log_format: str = "json"

    model_config = {
        "env_prefix": "ROTATION_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
