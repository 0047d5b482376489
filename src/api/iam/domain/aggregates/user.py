"""User aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from iam.domain.value_objects import IdentityId, TenantId, UserId, UserRole, UserStatus


@dataclass(frozen=True)
class User:
    """A tenant member as recorded in the relational store.

    The same person also exists as an identity-provider record, linked by
    ``identity_id``. ``tenant_id`` and ``identity_id`` never change once
    the user exists.
    """

    user_id: UserId
    tenant_id: TenantId
    email: str
    identity_id: IdentityId
    role: UserRole
    status: UserStatus
    is_tenant_admin: bool
    created_at: datetime
    region: str | None = None
    store_id: str | None = None

    def __str__(self) -> str:
        return f"User({self.tenant_id}/{self.user_id})"

    def __eq__(self, other: object) -> bool:
        """Users are equal if they have the same tenant-scoped ID."""
        if not isinstance(other, User):
            return False
        return (self.tenant_id, self.user_id) == (other.tenant_id, other.user_id)

    def __hash__(self) -> int:
        return hash((self.tenant_id, self.user_id))

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @property
    def is_deleted(self) -> bool:
        return self.status == UserStatus.DELETED

    def is_identity(self, identity_id: str) -> bool:
        """Whether this row belongs to the given identity-provider subject."""
        return self.identity_id.value == identity_id
