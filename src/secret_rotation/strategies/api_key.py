"""API key strategy."""

import logging
from typing import Callable, Optional

from src.rotation_errors import BackingSystemError, CredentialTestError
from src.secret_rotation.config import RotationConfig
from src.secret_rotation.credentials import generate_api_key, generate_key_id
from src.secret_rotation.issuer import ApiKeyCredential, ApiKeyIssuer, HttpApiKeyIssuer
from src.secret_rotation.strategies.base import Payload, RotationStrategy
from src.secrets_vault import VersionedSecretStore

logger = logging.getLogger(__name__)

IssuerFactory = Callable[[Payload, RotationConfig], ApiKeyIssuer]


def http_issuer_factory(payload: Payload, config: RotationConfig) -> ApiKeyIssuer:
    return HttpApiKeyIssuer(payload["issuer_url"], timeout=config.api_key_timeout)


class ApiKeyStrategy(RotationStrategy):
    """Rotate an API key while keeping the current key valid.

    Key material is minted locally in createSecret and only handed to
    the issuer in setSecret. The owner keeps at most two live keys:
    the current one and the pending one.
    """

    name = "api_key"
    required_fields = ("username", "key_id", "key", "issuer_url")

    def __init__(
        self,
        store: VersionedSecretStore,
        config: Optional[RotationConfig] = None,
        issuer_factory: Optional[IssuerFactory] = None,
    ):
        super().__init__(store, config)
        self.issuer_factory = issuer_factory or http_issuer_factory

    def generate_payload(self, current: Payload) -> Payload:
        payload = dict(current)
        payload["key_id"] = generate_key_id()
        payload["key"] = generate_api_key(self.config)
        return payload

    def set_secret(self, secret_id: str, token: str, pending: Payload, current: Payload) -> None:
        self.validate(secret_id, pending)
        self.validate(secret_id, current)
        self.require_same_user(secret_id, pending, current)

        admin = ApiKeyCredential.from_payload(current)
        candidate = ApiKeyCredential.from_payload(pending)

        with self.issuer_factory(current, self.config) as issuer:
            if not issuer.authenticate(admin):
                raise BackingSystemError(
                    f"Issuer rejected the current key {admin.key_id} of {secret_id!r}",
                    secret_id=secret_id,
                    step="setSecret",
                )

            live = issuer.list_keys(admin.owner, admin)
            if candidate.key_id in live:
                logger.info("Pending key %s is already registered", candidate.key_id)
            else:
                issuer.register_key(candidate, admin)
                logger.info("Registered pending key %s for %s", candidate.key_id, admin.owner)

            for key_id in live:
                if key_id not in (admin.key_id, candidate.key_id):
                    issuer.revoke_key(admin.owner, key_id, admin)
                    logger.info("Revoked stale key %s for %s", key_id, admin.owner)

    def test_secret(self, secret_id: str, token: str, pending: Payload) -> None:
        self.validate(secret_id, pending)
        candidate = ApiKeyCredential.from_payload(pending)
        with self.issuer_factory(pending, self.config) as issuer:
            if not issuer.authenticate(candidate):
                raise CredentialTestError(
                    f"Issuer rejected pending key {candidate.key_id} of {secret_id!r}",
                    secret_id=secret_id,
                )
        logger.info("Pending key %s authenticated", candidate.key_id)
