"""Sources of relational store credentials.

Two implementations of ``CredentialSource``: AWS Secrets Manager for
deployed environments (rotatable secrets) and plain settings for local
development and tests.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import SecretStr

from shared_kernel.errors import CredentialsUnavailableError

if TYPE_CHECKING:
    from infrastructure.settings import DatabaseSettings


@dataclass(frozen=True)
class DatabaseCredentials:
    """Connection credentials for the relational store.

    The password is a ``SecretStr`` so the value never shows up in reprs
    or log events by accident.
    """

    username: str
    password: SecretStr
    host: str
    port: int
    database: str

    @classmethod
    def from_secret(cls, payload: Mapping[str, Any]) -> DatabaseCredentials:
        """Build credentials from the secret shape
        ``{username, password, host, port, dbname}``.

        Raises:
            ValueError: If a required key is missing or the port is not numeric.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Secret is not a JSON object")
        missing = [
            key
            for key in ("username", "password", "host", "dbname")
            if not payload.get(key)
        ]
        if missing:
            raise ValueError(f"Secret is missing keys: {', '.join(missing)}")
        try:
            port = int(payload.get("port", 5432))
        except (TypeError, ValueError) as e:
            raise ValueError("Secret port is not an integer") from e
        return cls(
            username=str(payload["username"]),
            password=SecretStr(str(payload["password"])),
            host=str(payload["host"]),
            port=port,
            database=str(payload["dbname"]),
        )


@runtime_checkable
class CredentialSource(Protocol):
    """Retrieves the current store credentials."""

    @property
    def name(self) -> str:
        """Short label used in log events."""
        ...

    async def fetch(self) -> DatabaseCredentials:
        """Fetch credentials from the source.

        Raises:
            CredentialsUnavailableError: If the source cannot be read.
        """
        ...


class EnvironmentCredentialSource:
    """Reads credentials straight from ``DatabaseSettings``."""

    name = "environment"

    def __init__(self, settings: DatabaseSettings):
        self._settings = settings

    async def fetch(self) -> DatabaseCredentials:
        return DatabaseCredentials(
            username=self._settings.username,
            password=self._settings.password,
            host=self._settings.host,
            port=self._settings.port,
            database=self._settings.database,
        )


class SecretsManagerCredentialSource:
    """Reads a JSON credential secret from AWS Secrets Manager.

    boto3 is synchronous, so each lookup runs in the default executor to
    keep the event loop free.
    """

    name = "secrets_manager"

    def __init__(
        self,
        secret_id: str,
        region_name: str,
        client: Any | None = None,
    ):
        self._secret_id = secret_id
        self._region_name = region_name
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            session = boto3.session.Session()
            self._client = session.client(
                "secretsmanager", region_name=self._region_name
            )
        return self._client

    def _read_secret(self) -> str:
        response = self._get_client().get_secret_value(SecretId=self._secret_id)
        secret_string = response.get("SecretString")
        if secret_string is None:
            raise CredentialsUnavailableError(
                "Database secret has no string value",
                details={"secret_id": self._secret_id},
            )
        return secret_string

    async def fetch(self) -> DatabaseCredentials:
        loop = asyncio.get_running_loop()
        try:
            secret_string = await loop.run_in_executor(None, self._read_secret)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            raise CredentialsUnavailableError(
                f"Secrets Manager rejected the request: {error_code}",
                details={"secret_id": self._secret_id, "code": error_code},
            ) from e
        except BotoCoreError as e:
            raise CredentialsUnavailableError(
                "Secrets Manager is unreachable",
                details={"secret_id": self._secret_id},
            ) from e

        try:
            return DatabaseCredentials.from_secret(json.loads(secret_string))
        except (json.JSONDecodeError, ValueError) as e:
            raise CredentialsUnavailableError(
                "Database secret is malformed",
                details={"secret_id": self._secret_id},
            ) from e
