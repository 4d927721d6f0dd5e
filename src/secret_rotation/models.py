"""Rotation trigger and step result records."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from src.rotation_errors import InvalidTriggerError
from src.secret_rotation.config import StepOutcome


@dataclass(frozen=True)
class RotationRequest:
    """One (step, secret id, token) trigger delivered by the scheduler."""

    step: str
    secret_id: str
    token: str

    @classmethod
    def from_event(cls, event: Mapping[str, Any]) -> "RotationRequest":
        """Parse a Secrets Manager rotation event.

        The step name is kept verbatim; the orchestrator decides whether
        it is one it knows.
        """
        values = {}
        for key in ("Step", "SecretId", "ClientRequestToken"):
            value = event.get(key)
            if not value:
                raise InvalidTriggerError(f"Rotation trigger is missing {key}", field=key)
            values[key] = str(value)
        return cls(
            step=values["Step"],
            secret_id=values["SecretId"],
            token=values["ClientRequestToken"],
        )


@dataclass
class StepResult:
    """Result of processing one rotation step."""

    step: str
    secret_id: str
    token: str
    outcome: StepOutcome
    strategy: str = ""
    duration_seconds: float = 0.0
    finished_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def short_circuited(self) -> bool:
        return self.outcome is not StepOutcome.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "secret_id": self.secret_id,
            "token": self.token,
            "outcome": self.outcome.value,
            "strategy": self.strategy,
            "duration_seconds": self.duration_seconds,
            "finished_at": self.finished_at.isoformat(),
        }
