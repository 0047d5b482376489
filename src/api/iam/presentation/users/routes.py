"""HTTP routes for tenant user management.

Errors raised by the coordinator are ``ServiceError`` subclasses and are
rendered by the application-wide handler, so handlers stay free of
try/except blocks.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from iam.application.commands import CreateUserCommand, UpdateUserRoleCommand
from iam.application.services import DualSystemUserLifecycleCoordinator
from iam.dependencies.user_lifecycle import get_user_lifecycle_coordinator
from iam.presentation.users.models import (
    CreateUserRequest,
    CreateUserResponse,
    DeleteUserResponse,
    UpdateUserRoleRequest,
    UpdateUserRoleResponse,
    UserListResponse,
    UserResponse,
)
from infrastructure.authentication_dependencies import get_request_context
from shared_kernel.auth import RequestContext

router = APIRouter(
    prefix="/users",
    tags=["users"],
)

Coordinator = Annotated[
    DualSystemUserLifecycleCoordinator, Depends(get_user_lifecycle_coordinator)
]
Context = Annotated[RequestContext, Depends(get_request_context)]


@router.get("")
async def list_users(context: Context, coordinator: Coordinator) -> UserListResponse:
    """List non-deleted users of the caller's tenant, newest first."""
    users = await coordinator.list_users(context)
    return UserListResponse(
        users=[UserResponse.from_domain(user) for user in users],
        count=len(users),
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    request: CreateUserRequest,
    context: Context,
    coordinator: Coordinator,
) -> CreateUserResponse:
    """Create a user in the identity provider and the caller's tenant.

    Requires tenant admin.
    """
    command = CreateUserCommand.build(
        email=request.email,
        password=request.password,
        role=request.role,
        region=request.region,
        store_id=request.store_id,
        is_tenant_admin=request.is_tenant_admin,
    )
    user = await coordinator.create_user(context, command)
    return CreateUserResponse.from_domain(user)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    context: Context,
    coordinator: Coordinator,
) -> UserResponse:
    """Get one user of the caller's tenant."""
    user = await coordinator.get_user(context, user_id)
    return UserResponse.from_domain(user)


@router.put("/{user_id}/role")
async def update_user_role(
    user_id: str,
    request: UpdateUserRoleRequest,
    context: Context,
    coordinator: Coordinator,
) -> UpdateUserRoleResponse:
    """Change a user's role. Requires tenant admin."""
    command = UpdateUserRoleCommand.build(user_id=user_id, role=request.role)
    user = await coordinator.update_user_role(context, command)
    return UpdateUserRoleResponse(user_id=user.user_id.value, role=user.role.value)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    context: Context,
    coordinator: Coordinator,
) -> DeleteUserResponse:
    """Delete a user. Requires tenant admin; callers cannot delete themselves."""
    await coordinator.delete_user(context, user_id)
    return DeleteUserResponse(user_id=user_id)
