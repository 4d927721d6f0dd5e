"""In-memory versioned secrets vault with stage labels.

Values are encrypted at rest with Fernet. Intended for local runs and
tests; production rotation uses the AWS Secrets Manager adapter.
"""

import base64
import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Set

from cryptography.fernet import Fernet

from src.rotation_errors import SecretNotFoundError, SecretStoreError
from src.secrets_vault.config import StageLabel, VaultConfig
from src.secrets_vault.store import SecretVersion, VersionedSecretStore

logger = logging.getLogger(__name__)


@dataclass
class _StoredVersion:
    version_id: str
    encrypted_value: str
    stages: Set[str] = field(default_factory=set)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SecretsVault(VersionedSecretStore):
    """Encrypted in-memory store of versioned, stage-labelled secrets."""

    def __init__(self, config: Optional[VaultConfig] = None):
        self.config = config or VaultConfig()
        self._fernet = self._build_fernet(self.config.encryption_key)
        # secret_id -> versions in creation order
        self._store: Dict[str, List[_StoredVersion]] = {}

    @staticmethod
    def _build_fernet(key: str) -> Fernet:
        """Derive a Fernet key from the configured passphrase."""
        derived = hashlib.sha256(key.encode()).digest()
        return Fernet(base64.urlsafe_b64encode(derived))

    # ── Encryption ────────────────────────────────────────────────────

    def _encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode()).decode()

    def _decrypt(self, ciphertext: str) -> str:
        return self._fernet.decrypt(ciphertext.encode()).decode()

    # ── Lookup helpers ────────────────────────────────────────────────

    def _versions(self, secret_id: str) -> List[_StoredVersion]:
        versions = self._store.get(secret_id)
        if versions is None:
            raise SecretNotFoundError(secret_id)
        return versions

    def _find(self, secret_id: str, version_id: str) -> Optional[_StoredVersion]:
        for stored in self._versions(secret_id):
            if stored.version_id == version_id:
                return stored
        return None

    def _holder(self, secret_id: str, stage: StageLabel) -> Optional[_StoredVersion]:
        for stored in self._versions(secret_id):
            if stage.value in stored.stages:
                return stored
        return None

    def _to_record(self, secret_id: str, stored: _StoredVersion) -> SecretVersion:
        return SecretVersion(
            secret_id=secret_id,
            version_id=stored.version_id,
            secret_string=self._decrypt(stored.encrypted_value),
            stages=set(stored.stages),
            created_at=stored.created_at,
        )

    # ── Store operations ──────────────────────────────────────────────

    def create_secret(self, secret_id: str, secret_string: str, version_id: str) -> SecretVersion:
        """Create a secret whose first version holds CURRENT."""
        if secret_id in self._store:
            raise SecretStoreError(f"Secret {secret_id!r} already exists", secret_id=secret_id)
        self._store[secret_id] = []
        return self.put_secret_value(secret_id, version_id, secret_string, (StageLabel.CURRENT,))

    def get_secret_value(
        self,
        secret_id: str,
        stage: Optional[StageLabel] = StageLabel.CURRENT,
        version_id: Optional[str] = None,
    ) -> SecretVersion:
        if version_id is not None:
            stored = self._find(secret_id, version_id)
            if stored is None or (stage is not None and stage.value not in stored.stages):
                raise SecretNotFoundError(
                    secret_id, stage=stage.value if stage else None, version_id=version_id
                )
            return self._to_record(secret_id, stored)

        if stage is None:
            stage = StageLabel.CURRENT
        stored = self._holder(secret_id, stage)
        if stored is None:
            raise SecretNotFoundError(secret_id, stage=stage.value)
        return self._to_record(secret_id, stored)

    def put_secret_value(
        self,
        secret_id: str,
        version_id: str,
        secret_string: str,
        stages: Iterable[StageLabel] = (StageLabel.PENDING,),
    ) -> SecretVersion:
        versions = self._versions(secret_id)
        labels = {stage.value for stage in stages}

        existing = self._find(secret_id, version_id)
        if existing is not None:
            # Re-staging the same token is only allowed with the same value
            if self._decrypt(existing.encrypted_value) != secret_string:
                raise SecretStoreError(
                    f"Version {version_id!r} of {secret_id!r} already exists with a different value",
                    secret_id=secret_id,
                )
            stored = existing
        else:
            stored = _StoredVersion(version_id=version_id, encrypted_value=self._encrypt(secret_string))
            versions.append(stored)

        for other in versions:
            if other is not stored:
                other.stages -= labels
        stored.stages |= labels

        self._prune(secret_id)
        return self._to_record(secret_id, stored)

    def update_version_stage(
        self,
        secret_id: str,
        stage: StageLabel,
        move_to_version_id: Optional[str] = None,
        remove_from_version_id: Optional[str] = None,
    ) -> None:
        source = None
        if remove_from_version_id is not None:
            source = self._find(secret_id, remove_from_version_id)
            if source is None or stage.value not in source.stages:
                raise SecretStoreError(
                    f"Stage {stage.value} is not attached to version {remove_from_version_id!r}",
                    secret_id=secret_id,
                )

        target = None
        if move_to_version_id is not None:
            target = self._find(secret_id, move_to_version_id)
            if target is None:
                raise SecretNotFoundError(secret_id, version_id=move_to_version_id)
            holder = self._holder(secret_id, stage)
            if holder is not None and holder is not target and holder is not source:
                raise SecretStoreError(
                    f"Stage {stage.value} is attached to version {holder.version_id!r}; "
                    "name it as the version to remove the stage from",
                    secret_id=secret_id,
                )

        if source is not None:
            source.stages.discard(stage.value)
        if target is not None:
            target.stages.add(stage.value)

        if stage is StageLabel.CURRENT and source is not None and source is not target:
            for other in self._versions(secret_id):
                other.stages.discard(StageLabel.PREVIOUS.value)
            source.stages.add(StageLabel.PREVIOUS.value)

        logger.debug(
            "Moved %s on %s from %s to %s",
            stage.value, secret_id, remove_from_version_id, move_to_version_id,
        )

    def describe_versions(self, secret_id: str) -> Dict[str, List[str]]:
        return {
            stored.version_id: sorted(stored.stages)
            for stored in self._versions(secret_id)
            if stored.stages
        }

    def _prune(self, secret_id: str) -> None:
        """Drop the oldest unlabelled versions beyond the retention limit."""
        versions = self._store[secret_id]
        excess = len(versions) - self.config.max_versions
        if excess <= 0:
            return
        for stored in [v for v in versions if not v.stages][:excess]:
            versions.remove(stored)
