"""Secret Rotation Configuration.

Defines the rotation steps, step outcomes, and credential policy
used by the orchestrator and strategies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.settings import Settings, get_settings


class RotationStep(str, Enum):
    """The four steps of a rotation attempt, in protocol order."""

    CREATE_SECRET = "createSecret"
    SET_SECRET = "setSecret"
    TEST_SECRET = "testSecret"
    FINISH_SECRET = "finishSecret"


class StepOutcome(str, Enum):
    """How a step invocation concluded."""

    COMPLETED = "completed"
    ALREADY_PENDING = "already_pending"
    ALREADY_CURRENT = "already_current"


@dataclass
class RotationConfig:
    """Credential generation policy and backing-system client options."""

    password_length: int = 32
    password_exclude_characters: str = "/@\"'\\"
    api_key_bytes: int = 32
    db_connect_timeout: int = 5
    documentdb_tls: bool = True
    api_key_timeout: float = 10.0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RotationConfig":
        s = settings or get_settings()
        return cls(
            password_length=s.password_length,
            password_exclude_characters=s.password_exclude_characters,
            api_key_bytes=s.api_key_bytes,
            db_connect_timeout=s.db_connect_timeout,
            documentdb_tls=s.documentdb_tls,
            api_key_timeout=s.api_key_timeout,
        )


DEFAULT_ROTATION_CONFIG = RotationConfig()
