"""Fallback strategy for secret kinds without a backing-system integration."""

import logging
from typing import Any, Mapping

from src.rotation_errors import InvalidPayloadError
from src.secret_rotation.strategies.base import Payload, RotationStrategy
from src.secrets_vault import DISCRIMINATOR_FIELD

logger = logging.getLogger(__name__)


class GenericStrategy(RotationStrategy):
    """Carry the current value forward unchanged.

    Never invents credential material and never contacts anything but
    the secret store, so an unrecognized secret survives rotation intact.
    """

    name = "generic"

    def generate_payload(self, current: Payload) -> Payload:
        return dict(current)

    def _require_mapping(self, secret_id: str, pending: Any) -> None:
        if not isinstance(pending, Mapping):
            raise InvalidPayloadError(
                f"Pending value of {secret_id!r} is not a JSON object", secret_id=secret_id
            )

    def set_secret(self, secret_id: str, token: str, pending: Payload, current: Payload) -> None:
        self._require_mapping(secret_id, pending)
        logger.info(
            "No backing system for kind %r of %s; nothing to activate",
            current.get(DISCRIMINATOR_FIELD), secret_id,
        )

    def test_secret(self, secret_id: str, token: str, pending: Payload) -> None:
        self._require_mapping(secret_id, pending)
        logger.info(
            "No backing system for kind %r of %s; nothing to test",
            pending.get(DISCRIMINATOR_FIELD), secret_id,
        )
