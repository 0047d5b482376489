"""User lifecycle across the identity provider and the relational store.

A user exists twice: as an identity-provider record (sign-in, claims) and
as a tenant-scoped row. The two systems fail independently and share no
transaction, so every operation follows the same saga:

1. Decide authorization and validation before touching either system.
2. Mutate the identity provider first, outside any database transaction.
3. Write the relational store in one short transaction.
4. If step 3 fails, undo step 2. If the undo fails too, or no undo
   exists, raise a divergence error that names the records an operator
   has to reconcile.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from iam.application.commands import CreateUserCommand, UpdateUserRoleCommand
from iam.application.observability import (
    DefaultUserLifecycleProbe,
    UserLifecycleProbe,
)
from iam.application.services.tenant_authorization import TenantAuthorizationGuard
from iam.domain.aggregates import User
from iam.domain.value_objects import (
    IdentityAttribute,
    IdentityId,
    TenantId,
    UserRole,
    UserStatus,
)
from iam.ports.exceptions import DuplicateUserRowError
from iam.ports.identity_provider import IIdentityProvider
from iam.ports.repositories import IUserRepository, TransactionRunner
from shared_kernel.auth import RequestContext
from shared_kernel.errors import (
    AllocationConflictError,
    DuplicateEmailError,
    OrphanedIdentityRecordError,
    OrphanedUserRecordError,
    RoleDivergenceError,
    SelfDeletionForbiddenError,
    UserNotFoundError,
)

# One initial attempt plus one re-allocation after a lost race
MAX_ALLOCATION_ATTEMPTS = 2


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DualSystemUserLifecycleCoordinator:
    """Creates, re-roles, deletes and reads users of the caller's tenant."""

    def __init__(
        self,
        user_repository: IUserRepository,
        identity_provider: IIdentityProvider,
        transactions: TransactionRunner,
        guard: TenantAuthorizationGuard | None = None,
        probe: UserLifecycleProbe | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize the coordinator.

        Args:
            user_repository: Tenant-scoped user rows
            identity_provider: Identity records
            transactions: Opens relational transactions
            guard: Authorization checks (defaults to one on the same repository)
            probe: Optional domain probe for observability
            clock: Source of creation timestamps
        """
        self._user_repository = user_repository
        self._identity_provider = identity_provider
        self._transactions = transactions
        self._guard = guard or TenantAuthorizationGuard(user_repository)
        self._probe = probe or DefaultUserLifecycleProbe()
        self._clock = clock

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_user(
        self, context: RequestContext, command: CreateUserCommand
    ) -> User:
        """Create a user in both systems.

        Returns:
            The new, active user row

        Raises:
            CallerNotFoundError, InsufficientPrivilegeError: Caller may not create users
            DuplicateEmailError: A live user with this email exists in the tenant
            AllocationConflictError: Lost the user ID race twice
            OrphanedIdentityRecordError: The row could not be written and the
                identity record could not be removed
        """
        await self._guard.require_tenant_admin(context)

        existing = await self._user_repository.find_live_by_email(
            context.tenant_id, command.email
        )
        if existing is not None:
            raise DuplicateEmailError(
                "User with this email already exists", field="email"
            )

        identity_id = await self._identity_provider.create_user(
            email=command.email,
            tenant_id=context.tenant_id,
            role=command.role.value,
            temporary_password=command.password,
        )

        try:
            user = await self._insert_user_row(context, command, identity_id)
        except Exception as e:
            await self._remove_created_identity(context, identity_id, command.email, e)
            raise

        self._probe.user_created(
            tenant_id=context.tenant_id,
            user_id=user.user_id.value,
            role=user.role.value,
        )
        return user

    async def _insert_user_row(
        self,
        context: RequestContext,
        command: CreateUserCommand,
        identity_id: IdentityId,
    ) -> User:
        for attempt in range(1, MAX_ALLOCATION_ATTEMPTS + 1):
            candidate: dict[str, str] = {}

            async def allocate_and_insert(connection: Any) -> User:
                user_id = await self._user_repository.next_user_id(
                    context.tenant_id, connection
                )
                candidate["user_id"] = user_id.value
                user = User(
                    user_id=user_id,
                    tenant_id=TenantId(context.tenant_id),
                    email=command.email,
                    identity_id=identity_id,
                    role=command.role,
                    status=UserStatus.ACTIVE,
                    is_tenant_admin=command.is_tenant_admin,
                    created_at=self._clock(),
                    region=command.region,
                    store_id=command.store_id,
                )
                await self._user_repository.insert(user, connection)
                return user

            try:
                return await self._transactions.transaction(allocate_and_insert)
            except DuplicateUserRowError as e:
                # A concurrent create with the same email won the race
                if await self._user_repository.find_live_by_email(
                    context.tenant_id, command.email
                ):
                    raise DuplicateEmailError(
                        "User with this email already exists", field="email"
                    ) from e
                self._probe.user_id_conflict(
                    tenant_id=context.tenant_id,
                    candidate_user_id=candidate.get("user_id", ""),
                    attempt=attempt,
                )
                if attempt == MAX_ALLOCATION_ATTEMPTS:
                    raise AllocationConflictError(
                        "Could not allocate a user ID, please retry",
                        details={"tenant_id": context.tenant_id},
                    ) from e

        # Unreachable: the loop either returns or raises
        raise AllocationConflictError("Could not allocate a user ID, please retry")

    async def _remove_created_identity(
        self,
        context: RequestContext,
        identity_id: IdentityId,
        email: str,
        error: Exception,
    ) -> None:
        self._probe.compensation_started(
            operation="create",
            tenant_id=context.tenant_id,
            identity_id=identity_id.value,
            error=error,
        )
        try:
            await self._identity_provider.delete_user(identity_id)
        except Exception as compensation_error:
            self._probe.divergence_detected(
                kind=OrphanedIdentityRecordError.kind,
                tenant_id=context.tenant_id,
                identity_id=identity_id.value,
                user_id=None,
                error=compensation_error,
            )
            raise OrphanedIdentityRecordError(
                "User creation failed and the identity record could not be removed",
                details={
                    "tenant_id": context.tenant_id,
                    "identity_id": identity_id.value,
                    "email": email,
                    "cause": type(error).__name__,
                },
            ) from compensation_error
        self._probe.compensation_succeeded(
            operation="create",
            tenant_id=context.tenant_id,
            identity_id=identity_id.value,
        )

    # ------------------------------------------------------------------
    # Update role
    # ------------------------------------------------------------------

    async def update_user_role(
        self, context: RequestContext, command: UpdateUserRoleCommand
    ) -> User:
        """Change a user's role in both systems.

        Returns:
            The user row with the new role

        Raises:
            CallerNotFoundError, InsufficientPrivilegeError: Caller may not change roles
            CrossTenantAccessError: Target not in the caller's tenant
            UserNotFoundError: Target is deleted
            RoleDivergenceError: The row could not be written and the
                previous role could not be restored
        """
        await self._guard.require_tenant_admin(context)
        target = await self._guard.require_same_tenant(context, command.user_id)
        if target.is_deleted:
            raise UserNotFoundError("User not found")

        previous_role = target.role
        await self._identity_provider.update_attribute(
            target.identity_id, IdentityAttribute.ROLE, command.role.value
        )

        async def write_role(connection: Any) -> None:
            updated = await self._user_repository.update_role(
                context.tenant_id, command.user_id, command.role, connection
            )
            if updated == 0:
                raise UserNotFoundError("User not found")

        try:
            await self._transactions.transaction(write_role)
        except Exception as e:
            await self._restore_identity_role(context, target, previous_role, e)
            raise

        self._probe.user_role_updated(
            tenant_id=context.tenant_id,
            user_id=command.user_id,
            previous_role=previous_role.value,
            role=command.role.value,
        )
        return replace(target, role=command.role)

    async def _restore_identity_role(
        self,
        context: RequestContext,
        target: User,
        previous_role: UserRole,
        error: Exception,
    ) -> None:
        self._probe.compensation_started(
            operation="update_role",
            tenant_id=context.tenant_id,
            identity_id=target.identity_id.value,
            error=error,
        )
        try:
            await self._identity_provider.update_attribute(
                target.identity_id, IdentityAttribute.ROLE, previous_role.value
            )
        except UserNotFoundError:
            # Deleted concurrently; there is no role left to diverge
            pass
        except Exception as compensation_error:
            self._probe.divergence_detected(
                kind=RoleDivergenceError.kind,
                tenant_id=context.tenant_id,
                identity_id=target.identity_id.value,
                user_id=target.user_id.value,
                error=compensation_error,
            )
            raise RoleDivergenceError(
                "Role update failed and the previous role could not be restored",
                details={
                    "tenant_id": context.tenant_id,
                    "user_id": target.user_id.value,
                    "identity_id": target.identity_id.value,
                    "previous_role": previous_role.value,
                    "cause": type(error).__name__,
                },
            ) from compensation_error
        self._probe.compensation_succeeded(
            operation="update_role",
            tenant_id=context.tenant_id,
            identity_id=target.identity_id.value,
        )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete_user(self, context: RequestContext, target_user_id: str) -> None:
        """Delete the identity record and soft-delete the row.

        Raises:
            SelfDeletionForbiddenError: Target is the caller
            CallerNotFoundError, InsufficientPrivilegeError: Caller may not delete users
            CrossTenantAccessError: Target not in the caller's tenant
            UserNotFoundError: Target already deleted
            OrphanedUserRecordError: Identity deleted but the row stayed live
        """
        caller = await self._guard.require_member(context)
        if caller.user_id.value == target_user_id:
            self._probe.self_deletion_denied(
                tenant_id=context.tenant_id, user_id=target_user_id
            )
            raise SelfDeletionForbiddenError("Cannot delete your own account")
        await self._guard.require_tenant_admin(context)

        target = await self._guard.require_same_tenant(context, target_user_id)
        if target.is_deleted:
            raise UserNotFoundError("User not found")

        await self._identity_provider.delete_user(target.identity_id)

        async def soft_delete(connection: Any) -> int:
            return await self._user_repository.soft_delete(
                context.tenant_id, target_user_id, connection
            )

        try:
            deleted = await self._transactions.transaction(soft_delete)
        except Exception as e:
            # The identity record is gone and cannot be recreated as it was
            self._probe.divergence_detected(
                kind=OrphanedUserRecordError.kind,
                tenant_id=context.tenant_id,
                identity_id=target.identity_id.value,
                user_id=target_user_id,
                error=e,
            )
            raise OrphanedUserRecordError(
                "Identity record was deleted but the user record could not be updated",
                details={
                    "tenant_id": context.tenant_id,
                    "user_id": target_user_id,
                    "identity_id": target.identity_id.value,
                    "cause": type(e).__name__,
                },
            ) from e

        if deleted == 0:
            # A concurrent delete got there first
            raise UserNotFoundError("User not found")

        self._probe.user_deleted(tenant_id=context.tenant_id, user_id=target_user_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_users(self, context: RequestContext) -> list[User]:
        """All non-deleted users of the caller's tenant, newest first."""
        return await self._user_repository.list_live(context.tenant_id)

    async def get_user(self, context: RequestContext, target_user_id: str) -> User:
        """One user of the caller's tenant.

        Raises:
            CrossTenantAccessError: Target not in the caller's tenant
            UserNotFoundError: Target is deleted
        """
        target = await self._guard.require_same_tenant(context, target_user_id)
        if target.is_deleted:
            raise UserNotFoundError("User not found")
        return target
