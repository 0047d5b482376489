"""Tenant authorization guard.

Decides whether a caller may act inside their tenant. All lookups are
scoped by the caller's tenant id, which comes only from verified claims,
so a resource in another tenant is indistinguishable from a missing one.
"""

from __future__ import annotations

from typing import Any

from iam.application.observability import (
    DefaultTenantAuthorizationProbe,
    TenantAuthorizationProbe,
)
from iam.domain.aggregates import User
from iam.ports.repositories import IUserRepository
from shared_kernel.auth import RequestContext
from shared_kernel.errors import (
    CallerNotFoundError,
    CrossTenantAccessError,
    InsufficientPrivilegeError,
)


class TenantAuthorizationGuard:
    """Authorization checks shared by every tenant-scoped operation."""

    def __init__(
        self,
        user_repository: IUserRepository,
        probe: TenantAuthorizationProbe | None = None,
    ):
        self._user_repository = user_repository
        self._probe = probe or DefaultTenantAuthorizationProbe()

    async def require_member(
        self, context: RequestContext, connection: Any = None
    ) -> User:
        """Return the caller's own active row.

        Raises:
            CallerNotFoundError: No active row for the caller in their tenant
        """
        caller = await self._user_repository.get_active_by_identity(
            context.tenant_id, context.user_id, connection=connection
        )
        if caller is None:
            self._probe.access_denied(
                tenant_id=context.tenant_id,
                user_id=context.user_id,
                reason="caller_not_found",
            )
            raise CallerNotFoundError("User not found")
        return caller

    async def require_tenant_admin(
        self, context: RequestContext, connection: Any = None
    ) -> User:
        """Require the caller to be an active administrator of their tenant.

        Only the relational row counts: an identity record that was never
        synced to the store grants nothing.

        Returns:
            The caller's row

        Raises:
            CallerNotFoundError: No active row for the caller in their tenant
            InsufficientPrivilegeError: Caller is not a tenant admin
        """
        caller = await self.require_member(context, connection=connection)
        if not caller.is_tenant_admin:
            self._probe.access_denied(
                tenant_id=context.tenant_id,
                user_id=context.user_id,
                reason="insufficient_privilege",
            )
            raise InsufficientPrivilegeError(
                "Unauthorized: Only tenant admins can perform this action"
            )
        self._probe.admin_verified(tenant_id=context.tenant_id, user_id=context.user_id)
        return caller

    async def require_same_tenant(
        self,
        context: RequestContext,
        target_user_id: str,
        connection: Any = None,
    ) -> User:
        """Load a target user, requiring it to belong to the caller's tenant.

        The returned row is the read the subsequent action should rely on;
        pass ``connection`` to make it part of the action's transaction.

        Raises:
            CrossTenantAccessError: Target missing or in another tenant
        """
        target = await self._user_repository.get_by_user_id(
            context.tenant_id, target_user_id, connection=connection
        )
        if target is None:
            self._probe.access_denied(
                tenant_id=context.tenant_id,
                user_id=context.user_id,
                reason="cross_tenant_access",
                target_user_id=target_user_id,
            )
            raise CrossTenantAccessError("User not found in your tenant")
        return target
