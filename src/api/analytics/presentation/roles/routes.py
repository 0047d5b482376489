"""HTTP routes for role → metric visibility."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from analytics.application.commands import CreateRoleCommand, ShowMetricsCommand
from analytics.application.services import RoleVisibilityService
from analytics.dependencies import get_role_visibility_service
from analytics.presentation.roles.models import (
    CreateRoleRequest,
    CreateRoleResponse,
    DeleteRoleResponse,
    HideMetricResponse,
    RoleDetailResponse,
    RoleListResponse,
    RoleMetricResponse,
    RoleSummary,
    ShowMetricsRequest,
    ShowMetricsResponse,
)
from infrastructure.authentication_dependencies import get_request_context
from shared_kernel.auth import RequestContext

router = APIRouter(
    prefix="/roles",
    tags=["roles"],
)

Service = Annotated[RoleVisibilityService, Depends(get_role_visibility_service)]
Context = Annotated[RequestContext, Depends(get_request_context)]


@router.get("")
async def list_roles(context: Context, service: Service) -> RoleListResponse:
    """List the tenant's roles with their metrics."""
    grouped = await service.list_roles(context)
    roles = [
        RoleSummary(
            role=role,
            metrics=[RoleMetricResponse.from_domain(m) for m in metrics],
        )
        for role, metrics in grouped.items()
    ]
    return RoleListResponse(roles=roles, count=len(roles))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_role(
    request: CreateRoleRequest,
    context: Context,
    service: Service,
) -> CreateRoleResponse:
    """Create a role with visible metrics. Requires tenant admin."""
    command = CreateRoleCommand.build(role=request.role, metrics=request.metrics)
    created = await service.create_role(context, command)
    return CreateRoleResponse(
        role=command.role.value,
        metrics=[RoleMetricResponse.from_domain(m) for m in created],
    )


@router.get("/{role}")
async def get_role(role: str, context: Context, service: Service) -> RoleDetailResponse:
    """List the metrics of one role."""
    metrics = await service.get_role(context, role)
    return RoleDetailResponse(
        role=role,
        metrics=[RoleMetricResponse.from_domain(m) for m in metrics],
        count=len(metrics),
    )


@router.post("/{role}/metrics")
async def show_metrics(
    role: str,
    request: ShowMetricsRequest,
    context: Context,
    service: Service,
) -> ShowMetricsResponse:
    """Make metrics visible to a role. Requires tenant admin."""
    command = ShowMetricsCommand.build(role=role, metrics=request.metrics)
    changed = await service.show_metrics(context, command)
    return ShowMetricsResponse(
        role=command.role.value,
        added=[RoleMetricResponse.from_domain(m) for m in changed],
    )


@router.delete("/{role}/metrics/{metric_name}")
async def hide_metric(
    role: str,
    metric_name: str,
    context: Context,
    service: Service,
) -> HideMetricResponse:
    """Hide a metric from a role. Requires tenant admin."""
    await service.hide_metric(context, role, metric_name)
    return HideMetricResponse(role=role, metric_name=metric_name)


@router.delete("/{role}")
async def delete_role(role: str, context: Context, service: Service) -> DeleteRoleResponse:
    """Delete a role that no active user holds. Requires tenant admin."""
    deleted = await service.delete_role(context, role)
    return DeleteRoleResponse(role=role, metrics_deleted=deleted)
