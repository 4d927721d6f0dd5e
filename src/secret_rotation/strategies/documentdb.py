"""Document-store user strategy (DocumentDB / MongoDB-compatible)."""

import logging
from typing import Any, Callable, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from src.logging_config import log_performance
from src.rotation_errors import BackingSystemError, CredentialTestError
from src.secret_rotation.config import RotationConfig
from src.secret_rotation.credentials import generate_password
from src.secret_rotation.strategies.base import Payload, RotationStrategy
from src.secrets_vault import VersionedSecretStore

logger = logging.getLogger(__name__)


class DocumentDBStrategy(RotationStrategy):
    """Single-user password rotation for a document-store user."""

    name = "documentdb"
    required_fields = ("username", "password", "host")
    default_port = 27017

    def __init__(
        self,
        store: VersionedSecretStore,
        config: Optional[RotationConfig] = None,
        client_factory: Optional[Callable[..., Any]] = None,
    ):
        super().__init__(store, config)
        self.client_factory = client_factory or MongoClient

    @staticmethod
    def auth_database(payload: Payload) -> str:
        return payload.get("dbname") or "admin"

    @log_performance()
    def open_client(self, payload: Payload) -> Optional[MongoClient]:
        """Log in with a credential; None when the server refuses it.

        MongoClient connects lazily, so a ping forces authentication.
        """
        timeout_ms = self.config.db_connect_timeout * 1000
        client = self.client_factory(
            host=payload["host"],
            port=int(payload.get("port") or self.default_port),
            username=payload["username"],
            password=payload["password"],
            authSource=self.auth_database(payload),
            tls=bool(payload.get("ssl", self.config.documentdb_tls)),
            retryWrites=False,
            connectTimeoutMS=timeout_ms,
            serverSelectionTimeoutMS=timeout_ms,
        )
        try:
            client.admin.command("ping")
        except PyMongoError as exc:
            logger.info(
                "Login as %s on %s failed: %s",
                payload.get("username"), payload.get("host"), type(exc).__name__,
            )
            client.close()
            return None
        return client

    def generate_payload(self, current: Payload) -> Payload:
        payload = dict(current)
        payload["password"] = generate_password(self.config)
        return payload

    def set_secret(self, secret_id: str, token: str, pending: Payload, current: Payload) -> None:
        self.validate(secret_id, pending)
        self.require_same_user(secret_id, pending, current)

        client = self.open_client(pending)
        if client is not None:
            client.close()
            logger.info("Pending password for %s is already active", pending["username"])
            return

        client = self.open_client(current)
        if client is None:
            previous = self.previous_payload(secret_id)
            if previous is not None and previous.get("password"):
                client = self.open_client({**current, "password": previous["password"]})
        if client is None:
            raise BackingSystemError(
                f"Unable to log into documentdb as {current.get('username')!r} "
                "with the current or previous password",
                secret_id=secret_id,
                step="setSecret",
            )

        try:
            client[self.auth_database(pending)].command(
                "updateUser", pending["username"], pwd=pending["password"]
            )
        finally:
            client.close()
        logger.info("Activated pending password for %s on %s", pending["username"], pending["host"])

    def test_secret(self, secret_id: str, token: str, pending: Payload) -> None:
        self.validate(secret_id, pending)
        client = self.open_client(pending)
        if client is None:
            raise CredentialTestError(
                f"Unable to log into documentdb with the pending credential of {secret_id!r}",
                secret_id=secret_id,
            )
        client.close()
        logger.info("Pending credential for %s authenticated", pending["username"])
