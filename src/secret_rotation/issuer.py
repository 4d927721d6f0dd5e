"""API key issuer collaborator used by the API-key strategy."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiKeyCredential:
    """An API key and the principal that owns it."""

    owner: str
    key_id: str
    key: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ApiKeyCredential":
        return cls(owner=payload["username"], key_id=payload["key_id"], key=payload["key"])

    def __repr__(self) -> str:
        return f"ApiKeyCredential(owner={self.owner}, key_id={self.key_id}, key=***masked***)"


class ApiKeyIssuer(ABC):
    """Service that accepts, lists, revokes and authenticates API keys."""

    @abstractmethod
    def authenticate(self, credential: ApiKeyCredential) -> bool:
        """Whether the issuer accepts the key."""

    @abstractmethod
    def list_keys(self, owner: str, admin: ApiKeyCredential) -> List[str]:
        """Key ids currently active for the owner."""

    @abstractmethod
    def register_key(self, credential: ApiKeyCredential, admin: ApiKeyCredential) -> None:
        """Activate a key; registering an already active key is a no-op."""

    @abstractmethod
    def revoke_key(self, owner: str, key_id: str, admin: ApiKeyCredential) -> None:
        """Revoke a key; revoking an unknown key is a no-op."""

    def close(self) -> None:
        """Release transport resources."""

    def __enter__(self) -> "ApiKeyIssuer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class HttpApiKeyIssuer(ApiKeyIssuer):
    """
    API key issuer reached over HTTP.

    Endpoints:
        GET    /v1/whoami                       authenticate
        GET    /v1/owners/{owner}/keys          list active keys
        PUT    /v1/owners/{owner}/keys/{id}     register a key (idempotent)
        DELETE /v1/owners/{owner}/keys/{id}     revoke a key
    """

    def __init__(self, base_url: str, timeout: float = 10.0, client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    @staticmethod
    def _headers(credential: ApiKeyCredential) -> dict:
        return {
            "Authorization": f"Bearer {credential.key}",
            "X-Api-Key-Id": credential.key_id,
        }

    def authenticate(self, credential: ApiKeyCredential) -> bool:
        resp = self._client.get("/v1/whoami", headers=self._headers(credential))
        if resp.status_code in (401, 403):
            return False
        resp.raise_for_status()
        return True

    def list_keys(self, owner: str, admin: ApiKeyCredential) -> List[str]:
        resp = self._client.get(f"/v1/owners/{owner}/keys", headers=self._headers(admin))
        resp.raise_for_status()
        return [entry["key_id"] for entry in resp.json().get("keys", [])]

    def register_key(self, credential: ApiKeyCredential, admin: ApiKeyCredential) -> None:
        resp = self._client.put(
            f"/v1/owners/{credential.owner}/keys/{credential.key_id}",
            headers=self._headers(admin),
            json={"key": credential.key},
        )
        resp.raise_for_status()

    def revoke_key(self, owner: str, key_id: str, admin: ApiKeyCredential) -> None:
        resp = self._client.delete(f"/v1/owners/{owner}/keys/{key_id}", headers=self._headers(admin))
        if resp.status_code == 404:
            logger.info("Key %s of %s was already revoked", key_id, owner)
            return
        resp.raise_for_status()

    def close(self) -> None:
        self._client.close()
