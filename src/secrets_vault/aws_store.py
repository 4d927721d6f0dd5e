"""AWS Secrets Manager adapter for the versioned secret store."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import boto3
from botocore.exceptions import ClientError

from src.rotation_errors import SecretNotFoundError
from src.secrets_vault.config import StageLabel
from src.secrets_vault.store import SecretVersion, VersionedSecretStore

logger = logging.getLogger(__name__)


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


class AwsSecretsManagerStore(VersionedSecretStore):
    """
    Versioned secret store backed by AWS Secrets Manager.

    Requires:
        - boto3 package
        - AWS credentials allowed to read, stage and label the secret
    """

    def __init__(
        self,
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        client: Any = None,
    ):
        """
        Initialize the adapter.

        Args:
            region: AWS region
            endpoint_url: Optional Secrets Manager endpoint (VPC endpoint, local stack)
            client: Pre-built secretsmanager client; built lazily when omitted
        """
        self.region = region
        self.endpoint_url = endpoint_url
        self._client = client

    @property
    def client(self):
        """Lazy-load the boto3 client."""
        if self._client is None:
            self._client = boto3.client(
                "secretsmanager", region_name=self.region, endpoint_url=self.endpoint_url
            )
        return self._client

    def get_secret_value(
        self,
        secret_id: str,
        stage: Optional[StageLabel] = StageLabel.CURRENT,
        version_id: Optional[str] = None,
    ) -> SecretVersion:
        kwargs: Dict[str, Any] = {"SecretId": secret_id}
        if version_id is not None:
            kwargs["VersionId"] = version_id
        if stage is not None:
            kwargs["VersionStage"] = stage.value

        try:
            response = self.client.get_secret_value(**kwargs)
        except ClientError as exc:
            if _error_code(exc) == "ResourceNotFoundException":
                raise SecretNotFoundError(
                    secret_id, stage=stage.value if stage else None, version_id=version_id
                ) from exc
            raise

        return SecretVersion(
            secret_id=secret_id,
            version_id=response["VersionId"],
            secret_string=response.get("SecretString") or "{}",
            stages=set(response.get("VersionStages", [])),
            created_at=response.get("CreatedDate") or datetime.now(timezone.utc),
        )

    def put_secret_value(
        self,
        secret_id: str,
        version_id: str,
        secret_string: str,
        stages: Iterable[StageLabel] = (StageLabel.PENDING,),
    ) -> SecretVersion:
        labels = [stage.value for stage in stages]
        response = self.client.put_secret_value(
            SecretId=secret_id,
            ClientRequestToken=version_id,
            SecretString=secret_string,
            VersionStages=labels,
        )
        logger.info("Staged version %s of %s under %s", version_id, secret_id, ",".join(labels))
        return SecretVersion(
            secret_id=secret_id,
            version_id=response.get("VersionId", version_id),
            secret_string=secret_string,
            stages=set(response.get("VersionStages", labels)),
        )

    def update_version_stage(
        self,
        secret_id: str,
        stage: StageLabel,
        move_to_version_id: Optional[str] = None,
        remove_from_version_id: Optional[str] = None,
    ) -> None:
        kwargs: Dict[str, Any] = {"SecretId": secret_id, "VersionStage": stage.value}
        if move_to_version_id is not None:
            kwargs["MoveToVersionId"] = move_to_version_id
        if remove_from_version_id is not None:
            kwargs["RemoveFromVersionId"] = remove_from_version_id
        self.client.update_secret_version_stage(**kwargs)

    def describe_versions(self, secret_id: str) -> Dict[str, List[str]]:
        try:
            metadata = self.client.describe_secret(SecretId=secret_id)
        except ClientError as exc:
            if _error_code(exc) == "ResourceNotFoundException":
                raise SecretNotFoundError(secret_id) from exc
            raise
        return {
            version_id: list(stages)
            for version_id, stages in metadata.get("VersionIdsToStages", {}).items()
        }
