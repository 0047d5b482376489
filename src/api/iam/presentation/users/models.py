"""Pydantic models for user API requests and responses.

Payloads use camelCase on the wire. Request models only check shape;
content rules (email format, password policy, known roles) are enforced
when the request is turned into a command, so they produce the same
``ValidationFailed`` errors no matter which client sent them.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from iam.domain.aggregates import User


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateUserRequest(_CamelModel):
    """Request model for creating a user."""

    model_config = ConfigDict(extra="forbid")

    email: str | None = Field(default=None, description="Email, also the sign-in name")
    password: str | None = Field(default=None, description="Temporary password")
    role: str | None = Field(default=None, description="Admin, Finance, Operations or Marketing")
    region: str | None = Field(default=None, max_length=100)
    store_id: str | None = Field(default=None, max_length=50)
    is_tenant_admin: bool = Field(default=False)


class UpdateUserRoleRequest(_CamelModel):
    """Request model for changing a user's role."""

    model_config = ConfigDict(extra="forbid")

    role: str | None = Field(default=None, description="New role")


class UserResponse(_CamelModel):
    """Response model for a user."""

    user_id: str
    tenant_id: str
    email: str
    role: str
    region: str | None
    store_id: str | None
    is_tenant_admin: bool
    status: str
    created_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> UserResponse:
        """Convert domain User aggregate to API response."""
        return cls(
            user_id=user.user_id.value,
            tenant_id=user.tenant_id.value,
            email=user.email,
            role=user.role.value,
            region=user.region,
            store_id=user.store_id,
            is_tenant_admin=user.is_tenant_admin,
            status=user.status.value,
            created_at=user.created_at,
        )


class CreateUserResponse(_CamelModel):
    """Response model for a created user."""

    user_id: str
    email: str
    role: str
    status: str
    created_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> CreateUserResponse:
        return cls(
            user_id=user.user_id.value,
            email=user.email,
            role=user.role.value,
            status=user.status.value,
            created_at=user.created_at,
        )


class UserListResponse(_CamelModel):
    """Response model for listing users."""

    users: list[UserResponse]
    count: int


class UpdateUserRoleResponse(_CamelModel):
    success: bool = True
    user_id: str
    role: str


class DeleteUserResponse(_CamelModel):
    success: bool = True
    user_id: str
