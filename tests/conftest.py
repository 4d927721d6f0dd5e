"""Pytest configuration and shared fixtures."""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.secret_rotation.issuer import ApiKeyCredential, ApiKeyIssuer  # noqa: E402
from src.secrets_vault import SecretsVault, VaultConfig  # noqa: E402


class FakeIssuer(ApiKeyIssuer):
    """In-memory API key issuer: owner -> {key_id: key}."""

    def __init__(self):
        self.keys = {}
        self.register_calls = 0
        self.revoked = []
        self.closed = 0

    def add(self, owner, key_id, key):
        self.keys.setdefault(owner, {})[key_id] = key

    def authenticate(self, credential: ApiKeyCredential) -> bool:
        return self.keys.get(credential.owner, {}).get(credential.key_id) == credential.key

    def list_keys(self, owner, admin):
        return list(self.keys.get(owner, {}))

    def register_key(self, credential, admin):
        owner_keys = self.keys.setdefault(credential.owner, {})
        if credential.key_id in owner_keys:
            raise RuntimeError(f"duplicate key {credential.key_id}")
        self.register_calls += 1
        owner_keys[credential.key_id] = credential.key

    def revoke_key(self, owner, key_id, admin):
        self.keys.get(owner, {}).pop(key_id, None)
        self.revoked.append(key_id)

    def close(self):
        self.closed += 1


@pytest.fixture
def vault():
    return SecretsVault(VaultConfig(encryption_key="test-key-123"))


@pytest.fixture
def issuer():
    return FakeIssuer()


@pytest.fixture
def api_key_payload():
    return {
        "nightwatch_secret_type": "AWS_API_KEY",
        "username": "svc-reporting",
        "key_id": "AKOLD",
        "key": "k1",
        "issuer_url": "https://keys.internal",
    }


@pytest.fixture
def postgres_payload():
    return {
        "nightwatch_secret_type": "RDS_CREDENTIALS",
        "engine": "postgres",
        "username": "app",
        "password": "old-password",
        "host": "db.internal",
        "port": 5432,
        "dbname": "orders",
    }


@pytest.fixture
def seed_secret(vault):
    """Create a secret whose CURRENT version holds the payload."""

    def _seed(secret_id, payload, version_id="v0"):
        return vault.create_secret(secret_id, json.dumps(payload), version_id)

    return _seed
