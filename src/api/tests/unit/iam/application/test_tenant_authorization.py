"""Unit tests for TenantAuthorizationGuard."""

from unittest.mock import MagicMock

import pytest

from iam.application.observability import TenantAuthorizationProbe
from iam.application.services import TenantAuthorizationGuard
from iam.domain.value_objects import UserStatus
from shared_kernel.errors import (
    CallerNotFoundError,
    CrossTenantAccessError,
    InsufficientPrivilegeError,
)
from tests.unit.conftest import make_context
from tests.unit.iam.conftest import make_row


@pytest.fixture
def probe():
    return MagicMock(spec=TenantAuthorizationProbe)


@pytest.fixture
def guard(user_store, probe):
    return TenantAuthorizationGuard(user_store, probe=probe)


class TestRequireTenantAdmin:
    @pytest.mark.asyncio
    async def test_admin_passes(self, guard, probe):
        caller = await guard.require_tenant_admin(make_context(user_id="sub-admin"))

        assert caller.user_id.value == "U001"
        probe.admin_verified.assert_called_once_with(tenant_id="T001", user_id="sub-admin")

    @pytest.mark.asyncio
    async def test_member_rejected(self, guard, probe):
        with pytest.raises(InsufficientPrivilegeError) as exc_info:
            await guard.require_tenant_admin(make_context(user_id="sub-member"))

        assert exc_info.value.message == (
            "Unauthorized: Only tenant admins can perform this action"
        )
        probe.access_denied.assert_called_once_with(
            tenant_id="T001", user_id="sub-member", reason="insufficient_privilege"
        )

    @pytest.mark.asyncio
    async def test_admin_claim_alone_is_not_enough(self, guard):
        # Role claim says Admin but the row is not a tenant admin
        context = make_context(user_id="sub-member", role="Admin")

        with pytest.raises(InsufficientPrivilegeError):
            await guard.require_tenant_admin(context)

    @pytest.mark.asyncio
    async def test_unknown_caller(self, guard):
        with pytest.raises(CallerNotFoundError, match="User not found"):
            await guard.require_tenant_admin(make_context(user_id="sub-nobody"))

    @pytest.mark.asyncio
    async def test_inactive_admin_rejected(self, guard, user_store):
        user_store.add(
            make_row(
                "T001", "U009", "sub-former", is_tenant_admin=True, status=UserStatus.INACTIVE
            )
        )

        with pytest.raises(CallerNotFoundError):
            await guard.require_tenant_admin(make_context(user_id="sub-former"))

    @pytest.mark.asyncio
    async def test_lookup_is_scoped_to_claimed_tenant(self, guard):
        with pytest.raises(CallerNotFoundError):
            await guard.require_tenant_admin(
                make_context(tenant_id="T002", user_id="sub-admin")
            )


class TestRequireSameTenant:
    @pytest.mark.asyncio
    async def test_returns_target_in_tenant(self, guard):
        target = await guard.require_same_tenant(make_context(), "U002")

        assert target.identity_id.value == "sub-member"

    @pytest.mark.asyncio
    async def test_other_tenant_target_rejected(self, guard, user_store, probe):
        user_store.add(make_row("T002", "U005", "sub-t2-user"))

        with pytest.raises(CrossTenantAccessError) as exc_info:
            await guard.require_same_tenant(make_context(), "U005")

        assert exc_info.value.message == "User not found in your tenant"
        probe.access_denied.assert_called_once_with(
            tenant_id="T001",
            user_id="sub-admin",
            reason="cross_tenant_access",
            target_user_id="U005",
        )

    @pytest.mark.asyncio
    async def test_missing_target_looks_the_same(self, guard):
        with pytest.raises(CrossTenantAccessError, match="User not found in your tenant"):
            await guard.require_same_tenant(make_context(), "U404")
