"""SQLAlchemy ORM models for the analytics bounded context."""

from analytics.infrastructure.models.governance_rule import GovernanceRuleModel
from analytics.infrastructure.models.role_metric_visibility import (
    RoleMetricVisibilityModel,
)

__all__ = [
    "GovernanceRuleModel",
    "RoleMetricVisibilityModel",
]
