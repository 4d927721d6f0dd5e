"""Versioned secret store interface and the version record it returns."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set

from src.rotation_errors import InvalidPayloadError
from src.secrets_vault.config import StageLabel


@dataclass
class SecretVersion:
    """One version of a secret with the stage labels attached to it."""

    secret_id: str
    version_id: str
    secret_string: str
    stages: Set[str] = field(default_factory=set)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def payload(self) -> Dict[str, Any]:
        """Parse the secret string into a credential mapping."""
        try:
            value = json.loads(self.secret_string or "{}")
        except json.JSONDecodeError as exc:
            raise InvalidPayloadError(
                f"Secret {self.secret_id!r} version {self.version_id!r} is not valid JSON",
                secret_id=self.secret_id,
            ) from exc
        if not isinstance(value, dict):
            raise InvalidPayloadError(
                f"Secret {self.secret_id!r} version {self.version_id!r} is not a JSON object",
                secret_id=self.secret_id,
            )
        return value

    def has_stage(self, stage: StageLabel) -> bool:
        return stage.value in self.stages

    def __str__(self) -> str:
        """Mask the value when converting to string."""
        return (
            f"SecretVersion(secret_id={self.secret_id}, version_id={self.version_id}, "
            f"stages={sorted(self.stages)}, secret_string=***masked***)"
        )

    def __repr__(self) -> str:
        return self.__str__()


class VersionedSecretStore(ABC):
    """Abstract versioned secret store with stage labels."""

    @abstractmethod
    def get_secret_value(
        self,
        secret_id: str,
        stage: Optional[StageLabel] = StageLabel.CURRENT,
        version_id: Optional[str] = None,
    ) -> SecretVersion:
        """
        Fetch a secret version.

        Args:
            secret_id: Secret identifier
            stage: Stage label the version must carry
            version_id: Optional version token to select

        Returns:
            The matching SecretVersion

        Raises:
            SecretNotFoundError: no version matches
        """

    @abstractmethod
    def put_secret_value(
        self,
        secret_id: str,
        version_id: str,
        secret_string: str,
        stages: Iterable[StageLabel] = (StageLabel.PENDING,),
    ) -> SecretVersion:
        """
        Stage a new version under the given labels.

        Each label is removed from whichever version carried it before.
        """

    @abstractmethod
    def update_version_stage(
        self,
        secret_id: str,
        stage: StageLabel,
        move_to_version_id: Optional[str] = None,
        remove_from_version_id: Optional[str] = None,
    ) -> None:
        """Move a stage label from one version to another, or detach it."""

    @abstractmethod
    def describe_versions(self, secret_id: str) -> Dict[str, List[str]]:
        """Map every labelled version id to its stage labels."""
