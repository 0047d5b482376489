"""Identity provider port.

The identity provider is the system of record for sign-in credentials and
token claims. It fails independently of the relational store and offers
no transactions, so callers pair every mutation with a compensating one.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from iam.domain.value_objects import IdentityAttribute, IdentityId


@runtime_checkable
class IIdentityProvider(Protocol):
    """Mutations the service performs against identity records."""

    async def create_user(
        self,
        email: str,
        tenant_id: str,
        role: str,
        temporary_password: str,
    ) -> IdentityId:
        """Create an identity record tagged with tenant and role.

        Returns:
            The subject of the new record

        Raises:
            DuplicateEmailError: A record with this email already exists
            ValidationFailedError: The password violates the provider policy
            IdentityProviderThrottledError: The provider throttled the call
            IdentityProviderUnavailableError: The provider was unreachable
        """
        ...

    async def update_attribute(
        self,
        identity_id: IdentityId,
        attribute: IdentityAttribute,
        value: str,
    ) -> None:
        """Overwrite a mutable attribute.

        Raises:
            ImmutableIdentityAttributeError: ``attribute`` is fixed at creation
        """
        ...

    async def delete_user(self, identity_id: IdentityId) -> None:
        """Delete an identity record. Deleting a missing record succeeds."""
        ...
