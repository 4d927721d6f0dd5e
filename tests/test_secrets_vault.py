"""Tests for versioned secret storage with stage labels."""

import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from src.rotation_errors import InvalidPayloadError, SecretNotFoundError, SecretStoreError
from src.secrets_vault.aws_store import AwsSecretsManagerStore
from src.secrets_vault.config import SecretKind, StageLabel, VaultConfig
from src.secrets_vault.store import SecretVersion
from src.secrets_vault.vault import SecretsVault


CURRENT = StageLabel.CURRENT
PENDING = StageLabel.PENDING
PREVIOUS = StageLabel.PREVIOUS


# ── Config Tests ──────────────────────────────────────────────────────


class TestStoreConfig:
    def test_stage_label_values(self):
        assert StageLabel.CURRENT.value == "AWSCURRENT"
        assert StageLabel.PENDING.value == "AWSPENDING"
        assert StageLabel.PREVIOUS.value == "AWSPREVIOUS"

    def test_secret_kind_values(self):
        assert SecretKind.API_KEY.value == "AWS_API_KEY"
        assert SecretKind.RDS_CREDENTIALS.value == "RDS_CREDENTIALS"
        assert SecretKind.DOCUMENTDB_CREDENTIALS.value == "DOCUMENTDB_CREDENTIALS"

    def test_vault_config_defaults(self):
        cfg = VaultConfig()
        assert cfg.max_versions == 10


# ── SecretVersion Tests ───────────────────────────────────────────────


class TestSecretVersion:
    def test_payload_parses_json(self):
        version = SecretVersion("s", "v1", json.dumps({"username": "app"}))
        assert version.payload == {"username": "app"}

    def test_empty_string_is_empty_payload(self):
        assert SecretVersion("s", "v1", "").payload == {}

    def test_invalid_json_raises(self):
        with pytest.raises(InvalidPayloadError):
            SecretVersion("s", "v1", "not-json").payload

    def test_non_object_raises(self):
        with pytest.raises(InvalidPayloadError):
            SecretVersion("s", "v1", "[1, 2]").payload

    def test_repr_masks_value(self):
        version = SecretVersion("s", "v1", '{"password": "hunter2"}', {"AWSCURRENT"})
        assert "hunter2" not in repr(version)
        assert "masked" in str(version)


# ── Vault Tests ───────────────────────────────────────────────────────


class TestSecretsVault:
    def setup_method(self):
        self.vault = SecretsVault(VaultConfig(encryption_key="test-key-123", max_versions=3))
        self.vault.create_secret("db/app", '{"password": "p0"}', "v0")

    def test_create_secret_holds_current(self):
        current = self.vault.get_secret_value("db/app", CURRENT)
        assert current.version_id == "v0"
        assert current.stages == {"AWSCURRENT"}
        assert current.payload == {"password": "p0"}

    def test_create_existing_secret_fails(self):
        with pytest.raises(SecretStoreError):
            self.vault.create_secret("db/app", "{}", "v9")

    def test_values_encrypted_at_rest(self):
        stored = self.vault._store["db/app"][0]
        assert "password" not in stored.encrypted_value

    def test_unknown_secret(self):
        with pytest.raises(SecretNotFoundError):
            self.vault.get_secret_value("nope", CURRENT)

    def test_missing_stage(self):
        with pytest.raises(SecretNotFoundError):
            self.vault.get_secret_value("db/app", PENDING)

    def test_put_pending_and_read_by_token(self):
        self.vault.put_secret_value("db/app", "t1", '{"password": "p1"}')
        pending = self.vault.get_secret_value("db/app", PENDING, version_id="t1")
        assert pending.payload == {"password": "p1"}
        assert pending.stages == {"AWSPENDING"}

    def test_read_pending_with_other_token_fails(self):
        self.vault.put_secret_value("db/app", "t1", '{"password": "p1"}')
        with pytest.raises(SecretNotFoundError):
            self.vault.get_secret_value("db/app", PENDING, version_id="t2")

    def test_read_version_without_requested_stage_fails(self):
        with pytest.raises(SecretNotFoundError):
            self.vault.get_secret_value("db/app", PENDING, version_id="v0")

    def test_pending_is_exclusive(self):
        self.vault.put_secret_value("db/app", "t1", '{"password": "p1"}')
        self.vault.put_secret_value("db/app", "t2", '{"password": "p2"}')
        assert self.vault.describe_versions("db/app") == {
            "v0": ["AWSCURRENT"],
            "t2": ["AWSPENDING"],
        }

    def test_restaging_same_value_is_idempotent(self):
        self.vault.put_secret_value("db/app", "t1", '{"password": "p1"}')
        self.vault.put_secret_value("db/app", "t1", '{"password": "p1"}')
        assert len(self.vault._store["db/app"]) == 2

    def test_restaging_different_value_fails(self):
        self.vault.put_secret_value("db/app", "t1", '{"password": "p1"}')
        with pytest.raises(SecretStoreError):
            self.vault.put_secret_value("db/app", "t1", '{"password": "other"}')

    def test_move_current_marks_previous(self):
        self.vault.put_secret_value("db/app", "t1", '{"password": "p1"}')
        self.vault.update_version_stage(
            "db/app", CURRENT, move_to_version_id="t1", remove_from_version_id="v0"
        )
        assert self.vault.get_secret_value("db/app", CURRENT).version_id == "t1"
        assert self.vault.get_secret_value("db/app", PREVIOUS).version_id == "v0"

    def test_previous_is_exclusive(self):
        for old, new in (("v0", "t1"), ("t1", "t2")):
            self.vault.put_secret_value("db/app", new, json.dumps({"password": new}))
            self.vault.update_version_stage(
                "db/app", CURRENT, move_to_version_id=new, remove_from_version_id=old
            )
        versions = self.vault.describe_versions("db/app")
        assert versions["t1"] == ["AWSPREVIOUS"]
        assert "AWSPREVIOUS" not in versions.get("v0", [])

    def test_move_without_naming_holder_fails(self):
        self.vault.put_secret_value("db/app", "t1", '{"password": "p1"}')
        with pytest.raises(SecretStoreError):
            self.vault.update_version_stage("db/app", CURRENT, move_to_version_id="t1")
        assert self.vault.get_secret_value("db/app", CURRENT).version_id == "v0"

    def test_remove_from_version_without_stage_fails(self):
        with pytest.raises(SecretStoreError):
            self.vault.update_version_stage("db/app", PENDING, remove_from_version_id="v0")

    def test_move_to_unknown_version_fails(self):
        with pytest.raises(SecretNotFoundError):
            self.vault.update_version_stage(
                "db/app", CURRENT, move_to_version_id="ghost", remove_from_version_id="v0"
            )

    def test_remove_pending(self):
        self.vault.put_secret_value("db/app", "t1", '{"password": "p1"}')
        self.vault.update_version_stage("db/app", PENDING, remove_from_version_id="t1")
        with pytest.raises(SecretNotFoundError):
            self.vault.get_secret_value("db/app", PENDING)

    def test_prunes_unlabelled_versions(self):
        for i in range(1, 6):
            self.vault.put_secret_value("db/app", f"t{i}", json.dumps({"password": i}))
        versions = self.vault._store["db/app"]
        assert len(versions) == 3
        ids = [v.version_id for v in versions]
        assert "v0" in ids  # CURRENT is never pruned
        assert "t5" in ids


# ── AWS Store Tests ───────────────────────────────────────────────────


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "GetSecretValue")


class TestAwsSecretsManagerStore:
    def setup_method(self):
        self.client = MagicMock()
        self.store = AwsSecretsManagerStore(client=self.client)

    def test_get_by_stage(self):
        self.client.get_secret_value.return_value = {
            "VersionId": "v0",
            "SecretString": '{"username": "app"}',
            "VersionStages": ["AWSCURRENT"],
        }
        version = self.store.get_secret_value("db/app", CURRENT)
        self.client.get_secret_value.assert_called_once_with(
            SecretId="db/app", VersionStage="AWSCURRENT"
        )
        assert version.version_id == "v0"
        assert version.payload == {"username": "app"}

    def test_get_by_token_and_stage(self):
        self.client.get_secret_value.return_value = {
            "VersionId": "t1", "SecretString": "{}", "VersionStages": ["AWSPENDING"],
        }
        self.store.get_secret_value("db/app", PENDING, version_id="t1")
        self.client.get_secret_value.assert_called_once_with(
            SecretId="db/app", VersionId="t1", VersionStage="AWSPENDING"
        )

    def test_not_found_is_translated(self):
        self.client.get_secret_value.side_effect = _client_error("ResourceNotFoundException")
        with pytest.raises(SecretNotFoundError) as exc_info:
            self.store.get_secret_value("db/app", PENDING, version_id="t1")
        assert exc_info.value.version_id == "t1"

    def test_other_errors_propagate_unchanged(self):
        self.client.get_secret_value.side_effect = _client_error("InternalServiceError")
        with pytest.raises(ClientError):
            self.store.get_secret_value("db/app", CURRENT)

    def test_put_secret_value(self):
        self.client.put_secret_value.return_value = {
            "VersionId": "t1", "VersionStages": ["AWSPENDING"],
        }
        version = self.store.put_secret_value("db/app", "t1", '{"a": 1}')
        self.client.put_secret_value.assert_called_once_with(
            SecretId="db/app",
            ClientRequestToken="t1",
            SecretString='{"a": 1}',
            VersionStages=["AWSPENDING"],
        )
        assert version.stages == {"AWSPENDING"}

    def test_update_version_stage(self):
        self.store.update_version_stage(
            "db/app", CURRENT, move_to_version_id="t1", remove_from_version_id="v0"
        )
        self.client.update_secret_version_stage.assert_called_once_with(
            SecretId="db/app",
            VersionStage="AWSCURRENT",
            MoveToVersionId="t1",
            RemoveFromVersionId="v0",
        )

    def test_remove_only(self):
        self.store.update_version_stage("db/app", PENDING, remove_from_version_id="t1")
        self.client.update_secret_version_stage.assert_called_once_with(
            SecretId="db/app", VersionStage="AWSPENDING", RemoveFromVersionId="t1"
        )

    def test_describe_versions(self):
        self.client.describe_secret.return_value = {
            "VersionIdsToStages": {"v0": ["AWSCURRENT"], "t1": ["AWSPENDING"]}
        }
        assert self.store.describe_versions("db/app") == {
            "v0": ["AWSCURRENT"], "t1": ["AWSPENDING"],
        }

    def test_lazy_client_construction(self, monkeypatch):
        built = MagicMock()
        factory = MagicMock(return_value=built)
        monkeypatch.setattr("src.secrets_vault.aws_store.boto3.client", factory)
        store = AwsSecretsManagerStore(region="eu-west-1")
        assert store.client is built
        assert store.client is built
        factory.assert_called_once_with(
            "secretsmanager", region_name="eu-west-1", endpoint_url=None
        )
