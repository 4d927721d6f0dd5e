"""Rotation strategy contract shared by every credential kind."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from src.rotation_errors import InvalidPayloadError, SecretNotFoundError
from src.secret_rotation.config import DEFAULT_ROTATION_CONFIG, RotationConfig
from src.secrets_vault import SecretVersion, StageLabel, VersionedSecretStore

logger = logging.getLogger(__name__)

Payload = Dict[str, Any]


class RotationStrategy(ABC):
    """Generate, activate, verify and promote credentials of one kind.

    Subclasses implement generate_payload, set_secret and test_secret.
    Staging the new payload and promoting it are shared.
    """

    name = "base"
    # Payload fields that must be non-empty for the kind
    required_fields: Tuple[str, ...] = ()

    def __init__(self, store: VersionedSecretStore, config: Optional[RotationConfig] = None):
        self.store = store
        self.config = config or DEFAULT_ROTATION_CONFIG

    def validate(self, secret_id: str, payload: Payload) -> None:
        """Raise InvalidPayloadError when required fields are missing."""
        missing = [name for name in self.required_fields if not payload.get(name)]
        if missing:
            raise InvalidPayloadError(
                f"{self.name} secret {secret_id!r} is missing: {', '.join(missing)}",
                secret_id=secret_id,
                missing=missing,
            )

    @abstractmethod
    def generate_payload(self, current: Payload) -> Payload:
        """Build the next credential record from the current one."""

    def create_secret(self, secret_id: str, token: str, current: Payload) -> Payload:
        """Stage a freshly generated payload under PENDING for this token.

        Never contacts the backing system.
        """
        self.validate(secret_id, current)
        new_payload = self.generate_payload(current)
        self.store.put_secret_value(
            secret_id, token, json.dumps(new_payload), (StageLabel.PENDING,)
        )
        logger.info("Staged pending %s credential for %s", self.name, secret_id)
        return new_payload

    @abstractmethod
    def set_secret(self, secret_id: str, token: str, pending: Payload, current: Payload) -> None:
        """Activate the pending credential in the backing system.

        Must be safe to run again after a partial or complete earlier run.
        """

    @abstractmethod
    def test_secret(self, secret_id: str, token: str, pending: Payload) -> None:
        """Prove the pending credential works; raise CredentialTestError if not."""

    def finish_secret(self, secret_id: str, token: str, current_version: SecretVersion) -> None:
        """Promote the pending version to CURRENT and clear its PENDING label."""
        if current_version.version_id == token:
            logger.info("Version %s already marked as %s", token, StageLabel.CURRENT.value)
            return

        self.store.update_version_stage(
            secret_id,
            StageLabel.CURRENT,
            move_to_version_id=token,
            remove_from_version_id=current_version.version_id,
        )
        self.store.update_version_stage(
            secret_id, StageLabel.PENDING, remove_from_version_id=token
        )
        logger.info(
            "Promoted version %s to %s (was %s)",
            token, StageLabel.CURRENT.value, current_version.version_id,
        )

    def previous_payload(self, secret_id: str) -> Optional[Payload]:
        """Payload of the PREVIOUS version, if the store still has one."""
        try:
            return self.store.get_secret_value(secret_id, StageLabel.PREVIOUS).payload
        except SecretNotFoundError:
            return None

    def require_same_user(self, secret_id: str, pending: Payload, current: Payload) -> None:
        if pending.get("username") != current.get("username"):
            raise InvalidPayloadError(
                f"Pending and current credentials of {secret_id!r} name different users",
                secret_id=secret_id,
            )
