"""Pydantic models for role visibility requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field

from analytics.domain.value_objects import RoleMetric
from analytics.presentation.camel import CamelModel


class CreateRoleRequest(CamelModel):
    """Request model for creating a role."""

    model_config = ConfigDict(extra="forbid")

    role: str | None = Field(default=None, description="Admin, Finance, Operations or Marketing")
    metrics: list[str] | None = Field(default=None, description="Metrics the role sees")


class ShowMetricsRequest(CamelModel):
    """Request model for making metrics visible to a role."""

    model_config = ConfigDict(extra="forbid")

    metrics: list[str] | None = Field(default=None)


class RoleMetricResponse(CamelModel):
    id: int
    metric_name: str
    is_visible: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, metric: RoleMetric) -> RoleMetricResponse:
        return cls(
            id=metric.id,
            metric_name=metric.metric_name,
            is_visible=metric.is_visible,
            created_at=metric.created_at,
            updated_at=metric.updated_at,
        )


class RoleSummary(CamelModel):
    role: str
    metrics: list[RoleMetricResponse]


class RoleListResponse(CamelModel):
    """Response model for listing roles."""

    roles: list[RoleSummary]
    count: int


class RoleDetailResponse(CamelModel):
    role: str
    metrics: list[RoleMetricResponse]
    count: int


class CreateRoleResponse(CamelModel):
    role: str
    metrics: list[RoleMetricResponse]


class ShowMetricsResponse(CamelModel):
    role: str
    added: list[RoleMetricResponse]


class HideMetricResponse(CamelModel):
    success: bool = True
    role: str
    metric_name: str


class DeleteRoleResponse(CamelModel):
    success: bool = True
    role: str
    metrics_deleted: int
