"""Repository protocols for the analytics bounded context.

Every method is scoped by tenant id; implementations must never return
rows of another tenant.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from analytics.domain.value_objects import CallerProfile, GovernanceRule, RoleMetric


@runtime_checkable
class IGovernanceRuleRepository(Protocol):
    """Read access to governance rules. Rules are maintained elsewhere."""

    async def list_for_user(self, tenant_id: str, user_id: str) -> list[GovernanceRule]:
        """All rules for one user of one tenant."""
        ...


@runtime_checkable
class ICallerDirectory(Protocol):
    """Lookups against the tenant's user rows."""

    async def find_active_caller(
        self, tenant_id: str, identity_id: str
    ) -> CallerProfile | None:
        """Active row of the authenticated caller, None if absent."""
        ...

    async def count_active_with_role(self, tenant_id: str, role: str) -> int:
        """Number of active users holding ``role``."""
        ...


@runtime_checkable
class IRoleVisibilityRepository(Protocol):
    """Persistence for role → metric visibility rows."""

    async def list_all(self, tenant_id: str) -> list[RoleMetric]:
        """All rows of a tenant ordered by role, then metric."""
        ...

    async def list_for_role(self, tenant_id: str, role: str) -> list[RoleMetric]:
        """Rows of one role ordered by metric."""
        ...

    async def role_exists(self, tenant_id: str, role: str) -> bool:
        ...

    async def create_role(
        self, tenant_id: str, role: str, metrics: Sequence[str]
    ) -> list[RoleMetric]:
        """Insert one visible row per metric in a single transaction."""
        ...

    async def show_metrics(
        self, tenant_id: str, role: str, metrics: Sequence[str]
    ) -> list[RoleMetric]:
        """Make metrics visible, inserting missing rows.

        Returns:
            Only the rows that were inserted or flipped to visible
        """
        ...

    async def hide_metric(self, tenant_id: str, role: str, metric_name: str) -> bool:
        """Mark one metric hidden. False if the row does not exist."""
        ...

    async def delete_role(self, tenant_id: str, role: str) -> int:
        """Delete every row of a role, returning how many were removed."""
        ...
