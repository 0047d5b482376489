"""Value objects for IAM domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from shared_kernel.roles import UserRole

_USER_ID_PATTERN = re.compile(r"^U\d+$")
MIN_USER_ID_WIDTH = 3

__all__ = [
    "IdentityAttribute",
    "IdentityId",
    "TenantId",
    "UserId",
    "UserRole",
    "UserStatus",
]


class UserStatus(StrEnum):
    """Lifecycle status of a user row. ``DELETED`` is a soft delete."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    DELETED = "Deleted"


class IdentityAttribute(StrEnum):
    """Attributes stored on the identity-provider record."""

    EMAIL = "email"
    EMAIL_VERIFIED = "email_verified"
    TENANT_ID = "custom:tenant_id"
    ROLE = "custom:role"

    @property
    def is_mutable(self) -> bool:
        """Whether the attribute may be written after the record is created."""
        return self is IdentityAttribute.ROLE


@dataclass(frozen=True)
class TenantId:
    """Identifier for a tenant (e.g. ``T001``). Assigned out of band."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class UserId:
    """Tenant-scoped user identifier: ``U`` followed by a zero-padded number.

    Numbers grow monotonically within a tenant but may have gaps. Padding
    is at least three digits and widens once the tenant outgrows it.
    """

    value: str

    def __str__(self) -> str:
        return self.value

    @property
    def number(self) -> int:
        return int(self.value[1:])

    @classmethod
    def from_string(cls, value: str) -> UserId:
        """Create UserId from string value.

        Raises:
            ValueError: If value is not ``U`` followed by digits
        """
        if not _USER_ID_PATTERN.match(value):
            raise ValueError(f"Invalid UserId: {value}")
        return cls(value=value)

    @classmethod
    def allocate(cls, max_number: int | None, current_width: int | None) -> UserId:
        """Next identifier after the tenant's highest existing one.

        Args:
            max_number: Highest numeric suffix in the tenant, None if empty
            current_width: Widest existing suffix, None if empty

        Returns:
            ``U`` + (max_number + 1), padded to max(3, current_width)
        """
        width = max(MIN_USER_ID_WIDTH, current_width or 0)
        return cls(value=f"U{(max_number or 0) + 1:0{width}d}")


@dataclass(frozen=True)
class IdentityId:
    """Identity-provider subject of a user. Globally unique and immutable."""

    value: str

    def __str__(self) -> str:
        return self.value
