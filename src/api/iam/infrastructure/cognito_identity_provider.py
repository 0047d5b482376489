"""Amazon Cognito implementation of IIdentityProvider.

Uses the admin APIs of a single user pool through boto3. boto3 is
synchronous, so every call runs in the default executor.
"""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from iam.domain.value_objects import IdentityAttribute, IdentityId
from iam.infrastructure.observability import (
    DefaultIdentityProviderProbe,
    IdentityProviderProbe,
)
from iam.ports.identity_provider import IIdentityProvider
from shared_kernel.errors import (
    DuplicateEmailError,
    IdentityProviderError,
    IdentityProviderThrottledError,
    IdentityProviderUnavailableError,
    ImmutableIdentityAttributeError,
    ServiceError,
    UserNotFoundError,
    ValidationFailedError,
)

_THROTTLING_CODES = frozenset(
    {"TooManyRequestsException", "ThrottlingException", "LimitExceededException"}
)
_UNAVAILABLE_CODES = frozenset({"InternalErrorException", "ServiceUnavailable"})


class CognitoIdentityProvider(IIdentityProvider):
    """Identity records in a Cognito user pool.

    Users are created with their email as username, a pre-verified email,
    and the ``custom:tenant_id`` / ``custom:role`` attributes. Only the
    role can change afterwards.
    """

    def __init__(
        self,
        user_pool_id: str,
        region_name: str,
        client: Any | None = None,
        suppress_invitation: bool = True,
        probe: IdentityProviderProbe | None = None,
    ):
        """Initialize the adapter.

        Args:
            user_pool_id: Pool holding the tenant users
            region_name: AWS region of the pool
            client: Pre-built ``cognito-idp`` client (tests)
            suppress_invitation: Do not send Cognito's invitation email
            probe: Optional domain probe for observability
        """
        self._user_pool_id = user_pool_id
        self._region_name = region_name
        self._client = client
        self._suppress_invitation = suppress_invitation
        self._probe = probe or DefaultIdentityProviderProbe()

    def _get_client(self) -> Any:
        if self._client is None:
            session = boto3.session.Session()
            self._client = session.client("cognito-idp", region_name=self._region_name)
        return self._client

    async def _call(self, method: str, **kwargs: Any) -> dict[str, Any]:
        loop = asyncio.get_running_loop()
        fn = getattr(self._get_client(), method)
        return await loop.run_in_executor(None, partial(fn, **kwargs))

    async def create_user(
        self,
        email: str,
        tenant_id: str,
        role: str,
        temporary_password: str,
    ) -> IdentityId:
        request: dict[str, Any] = {
            "UserPoolId": self._user_pool_id,
            "Username": email,
            "UserAttributes": [
                {"Name": IdentityAttribute.EMAIL.value, "Value": email},
                {"Name": IdentityAttribute.EMAIL_VERIFIED.value, "Value": "true"},
                {"Name": IdentityAttribute.TENANT_ID.value, "Value": tenant_id},
                {"Name": IdentityAttribute.ROLE.value, "Value": role},
            ],
            "TemporaryPassword": temporary_password,
        }
        if self._suppress_invitation:
            request["MessageAction"] = "SUPPRESS"

        try:
            response = await self._call("admin_create_user", **request)
        except (ClientError, BotoCoreError) as e:
            raise self._translate("create_user", e) from e

        attributes = response.get("User", {}).get("Attributes", [])
        subject = next(
            (attr.get("Value") for attr in attributes if attr.get("Name") == "sub"),
            None,
        )
        if not subject:
            raise IdentityProviderError("Identity provider returned no subject")

        self._probe.identity_created(identity_id=subject, tenant_id=tenant_id)
        return IdentityId(subject)

    async def update_attribute(
        self,
        identity_id: IdentityId,
        attribute: IdentityAttribute,
        value: str,
    ) -> None:
        if not attribute.is_mutable:
            raise ImmutableIdentityAttributeError(
                f"Identity attribute {attribute.value} cannot be changed",
                details={"attribute": attribute.value},
            )
        try:
            await self._call(
                "admin_update_user_attributes",
                UserPoolId=self._user_pool_id,
                Username=identity_id.value,
                UserAttributes=[{"Name": attribute.value, "Value": value}],
            )
        except (ClientError, BotoCoreError) as e:
            raise self._translate("update_attribute", e) from e
        self._probe.identity_attribute_updated(
            identity_id=identity_id.value, attribute=attribute.value
        )

    async def delete_user(self, identity_id: IdentityId) -> None:
        try:
            await self._call(
                "admin_delete_user",
                UserPoolId=self._user_pool_id,
                Username=identity_id.value,
            )
        except ClientError as e:
            if _error_code(e) == "UserNotFoundException":
                self._probe.identity_deleted(identity_id=identity_id.value, existed=False)
                return
            raise self._translate("delete_user", e) from e
        except BotoCoreError as e:
            raise self._translate("delete_user", e) from e
        self._probe.identity_deleted(identity_id=identity_id.value, existed=True)

    def _translate(self, operation: str, error: Exception) -> ServiceError:
        """Map a boto error to the service taxonomy by error code."""
        code = _error_code(error) if isinstance(error, ClientError) else "NetworkError"
        self._probe.identity_call_failed(operation=operation, error_code=code, error=error)

        if code == "UsernameExistsException":
            return DuplicateEmailError("User with this email already exists", field="email")
        if code == "InvalidPasswordException":
            return ValidationFailedError(
                "Password does not meet the identity provider policy", field="password"
            )
        if code == "UserNotFoundException":
            return UserNotFoundError("User not found")
        if code in _THROTTLING_CODES:
            return IdentityProviderThrottledError(
                "Identity provider is throttling requests, please retry"
            )
        if code in _UNAVAILABLE_CODES or code == "NetworkError":
            return IdentityProviderUnavailableError("Identity provider is unavailable")
        return IdentityProviderError(
            f"Identity provider rejected the request: {code}",
            details={"operation": operation, "code": code},
        )


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")
