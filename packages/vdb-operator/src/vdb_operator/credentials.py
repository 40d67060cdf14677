"""
Communal storage credentials.

The access key and secret key for the communal endpoint live in a Secret
named by spec.communal.credentialSecret, under the keys "accesskey" and
"secretkey". Local (docker) runs supply them through settings instead.
"""

import asyncio
import base64
import binascii
from dataclasses import dataclass
from typing import Protocol

from kubernetes import client
from kubernetes.client.rest import ApiException

from vdb_operator.exceptions import CredentialsError
from vdb_operator.vdb import VerticaDB

ACCESS_KEY_NAME = "accesskey"
SECRET_KEY_NAME = "secretkey"


@dataclass(frozen=True)
class CommunalCredentials:
    access_key: str
    secret_key: str

    @property
    def auth(self) -> str:
        """Value of the awsauth parameter."""
        return f"{self.access_key}:{self.secret_key}"


class CredentialSource(Protocol):
    async def get_communal_credentials(self, vdb: VerticaDB) -> CommunalCredentials:
        ...


class StaticCredentials:
    """Credentials fixed at construction time."""

    def __init__(self, access_key: str, secret_key: str):
        self._creds = CommunalCredentials(access_key, secret_key)

    async def get_communal_credentials(self, vdb: VerticaDB) -> CommunalCredentials:
        return self._creds


class KubernetesSecretCredentials:
    """Read credentials from the communal credential Secret."""

    def __init__(self, core_api: client.CoreV1Api | None = None):
        self._core_api = core_api or client.CoreV1Api()

    async def get_communal_credentials(self, vdb: VerticaDB) -> CommunalCredentials:
        """
        Fetch and decode the credential Secret of vdb.

        Raises:
            CredentialsError: If the secret is not named, missing, or lacks a key
        """
        name = vdb.spec.communal.credential_secret
        namespace = vdb.metadata.namespace
        if not name:
            raise CredentialsError(f"{vdb.identity} does not name a communal credential secret")

        loop = asyncio.get_running_loop()

        def _blocking_read() -> dict[str, str]:
            try:
                secret = self._core_api.read_namespaced_secret(name, namespace)
            except ApiException as e:
                raise CredentialsError(
                    f"Cannot read secret {namespace}/{name}: {e.reason}"
                ) from e
            return secret.data or {}

        data = await loop.run_in_executor(None, _blocking_read)
        return CommunalCredentials(
            access_key=_decode(data, ACCESS_KEY_NAME, name),
            secret_key=_decode(data, SECRET_KEY_NAME, name),
        )


def _decode(data: dict[str, str], key: str, secret_name: str) -> str:
    if key not in data:
        raise CredentialsError(f"Secret '{secret_name}' is missing key '{key}'")
    try:
        return base64.b64decode(data[key]).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise CredentialsError(f"Secret '{secret_name}' key '{key}' is not valid base64") from e
