"""In-memory doubles for the IAM ports.

``InMemoryUserStore`` plays both the user repository and the transaction
runner, enforcing the same uniqueness rules as the ``users`` table so the
lifecycle coordinator can be exercised without a database.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from iam.domain.aggregates import User
from iam.domain.value_objects import (
    IdentityAttribute,
    IdentityId,
    TenantId,
    UserId,
    UserRole,
    UserStatus,
)
from iam.ports.exceptions import DuplicateUserRowError
from shared_kernel.errors import UserNotFoundError


class InMemoryUserStore:
    """User rows keyed by ``(tenant_id, user_id)``."""

    def __init__(self):
        self.rows: dict[tuple[str, str], User] = {}
        self.fail_next_transaction: Exception | None = None
        self.id_conflicts = 0
        self.on_insert = None
        self.transactions = 0

    def add(self, user: User) -> User:
        self.rows[(user.tenant_id.value, user.user_id.value)] = user
        return user

    def get(self, tenant_id: str, user_id: str) -> User | None:
        return self.rows.get((tenant_id, user_id))

    # TransactionRunner

    async def transaction(self, fn):
        self.transactions += 1
        if self.fail_next_transaction is not None:
            error, self.fail_next_transaction = self.fail_next_transaction, None
            raise error
        connection = {"inserted": []}
        try:
            return await fn(connection)
        except Exception:
            for key in connection["inserted"]:
                self.rows.pop(key, None)
            raise

    # IUserRepository

    async def get_active_by_identity(self, tenant_id, identity_id, connection=None):
        for user in self.rows.values():
            if (
                user.tenant_id.value == tenant_id
                and user.is_identity(identity_id)
                and user.is_active
            ):
                return user
        return None

    async def get_by_user_id(self, tenant_id, user_id, connection=None):
        return self.get(tenant_id, user_id)

    async def find_live_by_email(self, tenant_id, email, connection=None):
        for user in self.rows.values():
            if (
                user.tenant_id.value == tenant_id
                and user.email == email.lower()
                and not user.is_deleted
            ):
                return user
        return None

    async def list_live(self, tenant_id):
        live = [
            user
            for user in self.rows.values()
            if user.tenant_id.value == tenant_id and not user.is_deleted
        ]
        return sorted(live, key=lambda u: (u.created_at, u.user_id.value), reverse=True)

    async def next_user_id(self, tenant_id, connection):
        numbers = [
            user.user_id.number
            for user in self.rows.values()
            if user.tenant_id.value == tenant_id
        ]
        candidate = UserId.allocate(max(numbers, default=None), 3)
        # Let concurrent creates read the same maximum
        await asyncio.sleep(0)
        return candidate

    async def insert(self, user, connection):
        if self.on_insert is not None:
            hook, self.on_insert = self.on_insert, None
            hook(user)
        key = (user.tenant_id.value, user.user_id.value)
        if self.id_conflicts > 0:
            self.id_conflicts -= 1
            raise DuplicateUserRowError("duplicate key", constraint="pk_users")
        if key in self.rows:
            raise DuplicateUserRowError("duplicate key", constraint="pk_users")
        if await self.find_live_by_email(user.tenant_id.value, user.email):
            raise DuplicateUserRowError(
                "duplicate key", constraint="uq_users_tenant_email_live"
            )
        self.rows[key] = user
        connection["inserted"].append(key)

    async def update_role(self, tenant_id, user_id, role, connection):
        user = self.get(tenant_id, user_id)
        if user is None or user.is_deleted:
            return 0
        self.rows[(tenant_id, user_id)] = replace(user, role=role)
        return 1

    async def soft_delete(self, tenant_id, user_id, connection):
        user = self.get(tenant_id, user_id)
        if user is None or user.is_deleted:
            return 0
        self.rows[(tenant_id, user_id)] = replace(user, status=UserStatus.DELETED)
        return 1


class FakeIdentityProvider:
    """Identity records keyed by subject, with one-shot failure injection."""

    def __init__(self):
        self.records: dict[str, dict[str, str]] = {}
        self.fail_create: Exception | None = None
        self.fail_update: list[Exception] = []
        self.fail_delete: Exception | None = None
        self.deleted: list[str] = []
        self._subjects = count(1)

    async def create_user(self, email, tenant_id, role, temporary_password):
        if self.fail_create is not None:
            raise self.fail_create
        subject = f"sub-{next(self._subjects):04d}"
        self.records[subject] = {
            IdentityAttribute.EMAIL.value: email,
            IdentityAttribute.TENANT_ID.value: tenant_id,
            IdentityAttribute.ROLE.value: role,
        }
        return IdentityId(subject)

    async def update_attribute(self, identity_id, attribute, value):
        if self.fail_update:
            raise self.fail_update.pop(0)
        if identity_id.value not in self.records:
            raise UserNotFoundError("User not found")
        self.records[identity_id.value][attribute.value] = value

    async def delete_user(self, identity_id):
        if self.fail_delete is not None:
            raise self.fail_delete
        self.deleted.append(identity_id.value)
        self.records.pop(identity_id.value, None)

    def role_of(self, identity_id: str) -> str:
        return self.records[identity_id][IdentityAttribute.ROLE.value]


class TickingClock:
    """Clock advancing one second per call."""

    def __init__(self):
        self._now = datetime(2026, 3, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


def make_row(
    tenant_id: str,
    user_id: str,
    identity_id: str,
    role: UserRole = UserRole.FINANCE,
    is_tenant_admin: bool = False,
    status: UserStatus = UserStatus.ACTIVE,
    email: str | None = None,
    created_at: datetime | None = None,
) -> User:
    return User(
        user_id=UserId(user_id),
        tenant_id=TenantId(tenant_id),
        email=email or f"{user_id.lower()}@{tenant_id.lower()}.example.com",
        identity_id=IdentityId(identity_id),
        role=role,
        status=status,
        is_tenant_admin=is_tenant_admin,
        created_at=created_at or datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def user_store() -> InMemoryUserStore:
    """Store seeded with an admin and a member in T001 and an admin in T002."""
    store = InMemoryUserStore()
    store.add(make_row("T001", "U001", "sub-admin", UserRole.ADMIN, is_tenant_admin=True))
    store.add(make_row("T001", "U002", "sub-member", UserRole.FINANCE))
    store.add(make_row("T002", "U001", "sub-t2-admin", UserRole.ADMIN, is_tenant_admin=True))
    return store


@pytest.fixture
def identity_provider(user_store) -> FakeIdentityProvider:
    provider = FakeIdentityProvider()
    for user in user_store.rows.values():
        provider.records[user.identity_id.value] = {
            IdentityAttribute.EMAIL.value: user.email,
            IdentityAttribute.TENANT_ID.value: user.tenant_id.value,
            IdentityAttribute.ROLE.value: user.role.value,
        }
    return provider
