"""Typed commands for user lifecycle operations.

Request bodies are converted into these before any business logic runs.
``build`` validates and normalizes; a command that exists is valid.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from iam.domain.value_objects import UserRole
from shared_kernel.errors import ValidationFailedError

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{8,}$")

PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 8 characters with uppercase, lowercase, and numbers"
)


def normalize_email(email: str | None) -> str:
    """Trim and lower-case an email, rejecting malformed ones.

    Raises:
        ValidationFailedError: Missing or malformed email (field ``email``)
    """
    if email is None or not email.strip():
        raise ValidationFailedError("Email is required", field="email")
    normalized = email.strip().lower()
    if not _EMAIL_PATTERN.match(normalized):
        raise ValidationFailedError("Invalid email format", field="email")
    return normalized


def validate_password(password: str | None) -> str:
    """Enforce the temporary password policy.

    Raises:
        ValidationFailedError: Policy violated (field ``password``)
    """
    if not password:
        raise ValidationFailedError("Password is required", field="password")
    if not _PASSWORD_PATTERN.match(password):
        raise ValidationFailedError(PASSWORD_POLICY_MESSAGE, field="password")
    return password


def parse_role(role: str | None) -> UserRole:
    """Parse a role name.

    Raises:
        ValidationFailedError: Missing or unknown role (field ``role``)
    """
    if role is None or not role.strip():
        raise ValidationFailedError("Role is required", field="role")
    try:
        return UserRole(role.strip())
    except ValueError as e:
        allowed = ", ".join(r.value for r in UserRole)
        raise ValidationFailedError(
            f"Invalid role. Must be one of: {allowed}", field="role"
        ) from e


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class CreateUserCommand:
    """Validated input for creating a user."""

    email: str
    password: str
    role: UserRole
    region: str | None = None
    store_id: str | None = None
    is_tenant_admin: bool = False

    def __repr__(self) -> str:
        return (
            f"CreateUserCommand(email={self.email!r}, role={self.role.value!r}, "
            f"is_tenant_admin={self.is_tenant_admin})"
        )

    @classmethod
    def build(
        cls,
        email: str | None,
        password: str | None,
        role: str | None,
        region: str | None = None,
        store_id: str | None = None,
        is_tenant_admin: bool = False,
    ) -> CreateUserCommand:
        """Validate raw input and return a command.

        Raises:
            ValidationFailedError: On the first invalid field
        """
        return cls(
            email=normalize_email(email),
            password=validate_password(password),
            role=parse_role(role),
            region=_optional_text(region),
            store_id=_optional_text(store_id),
            is_tenant_admin=bool(is_tenant_admin),
        )


@dataclass(frozen=True)
class UpdateUserRoleCommand:
    """Validated input for changing a user's role."""

    user_id: str
    role: UserRole

    @classmethod
    def build(cls, user_id: str, role: str | None) -> UpdateUserRoleCommand:
        """Validate raw input and return a command.

        Raises:
            ValidationFailedError: Missing or unknown role
        """
        return cls(user_id=user_id, role=parse_role(role))
