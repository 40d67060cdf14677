"""Tests for communal credential sources."""

import base64
from unittest.mock import MagicMock

import pytest
from kubernetes.client.rest import ApiException

from vdb_operator.credentials import (
    CommunalCredentials,
    KubernetesSecretCredentials,
    StaticCredentials,
)
from vdb_operator.exceptions import CredentialsError


def b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


def test_auth_value():
    assert CommunalCredentials("minio", "minio123").auth == "minio:minio123"


@pytest.mark.asyncio
async def test_static_credentials(make_vdb):
    creds = await StaticCredentials("ak", "sk").get_communal_credentials(make_vdb())
    assert creds == CommunalCredentials("ak", "sk")


class TestKubernetesSecretCredentials:
    @pytest.mark.asyncio
    async def test_reads_and_decodes_secret(self, make_vdb):
        core_api = MagicMock()
        core_api.read_namespaced_secret.return_value.data = {
            "accesskey": b64("minio"),
            "secretkey": b64("minio123"),
        }

        creds = await KubernetesSecretCredentials(core_api).get_communal_credentials(make_vdb())

        assert creds == CommunalCredentials("minio", "minio123")
        core_api.read_namespaced_secret.assert_called_once_with("s3-auth", "default")

    @pytest.mark.asyncio
    async def test_missing_key(self, make_vdb):
        core_api = MagicMock()
        core_api.read_namespaced_secret.return_value.data = {"accesskey": b64("minio")}

        with pytest.raises(CredentialsError, match="secretkey"):
            await KubernetesSecretCredentials(core_api).get_communal_credentials(make_vdb())

    @pytest.mark.asyncio
    async def test_invalid_base64(self, make_vdb):
        core_api = MagicMock()
        core_api.read_namespaced_secret.return_value.data = {
            "accesskey": "abc",
            "secretkey": b64("x"),
        }

        with pytest.raises(CredentialsError, match="base64"):
            await KubernetesSecretCredentials(core_api).get_communal_credentials(make_vdb())

    @pytest.mark.asyncio
    async def test_secret_not_readable(self, make_vdb):
        core_api = MagicMock()
        core_api.read_namespaced_secret.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(CredentialsError, match="s3-auth"):
            await KubernetesSecretCredentials(core_api).get_communal_credentials(make_vdb())

    @pytest.mark.asyncio
    async def test_secret_not_named(self, make_vdb):
        vdb = make_vdb()
        vdb.spec.communal.credential_secret = ""
        core_api = MagicMock()

        with pytest.raises(CredentialsError):
            await KubernetesSecretCredentials(core_api).get_communal_credentials(vdb)
        core_api.read_namespaced_secret.assert_not_called()
