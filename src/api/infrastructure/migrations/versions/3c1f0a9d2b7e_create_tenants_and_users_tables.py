"""create tenants and users tables

Tenants are the isolation boundary. Users are keyed by (tenant_id, user_id)
so a lost user ID allocation race surfaces as a primary key violation.
Emails are unique among a tenant's non-deleted users.

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-09-28 10:12:41.318204

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3c1f0a9d2b7e"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "tenants",
        sa.Column("tenant_id", sa.String(length=10), nullable=False),
        sa.Column("tenant_name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("tenant_id", name=op.f("pk_tenants")),
    )

    op.create_table(
        "users",
        sa.Column("tenant_id", sa.String(length=10), nullable=False),
        sa.Column("user_id", sa.String(length=20), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("identity_id", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("region", sa.String(length=100), nullable=True),
        sa.Column("store_id", sa.String(length=50), nullable=True),
        sa.Column("is_tenant_admin", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "role IN ('Admin', 'Finance', 'Operations', 'Marketing')",
            name=op.f("ck_users_role"),
        ),
        sa.CheckConstraint(
            "status IN ('Active', 'Inactive', 'Deleted')",
            name=op.f("ck_users_status"),
        ),
        sa.ForeignKeyConstraint(
            ["tenant_id"],
            ["tenants.tenant_id"],
            name=op.f("fk_users_tenant_id_tenants"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("tenant_id", "user_id", name=op.f("pk_users")),
        sa.UniqueConstraint("identity_id", name=op.f("uq_users_identity_id")),
    )
    # Deleted users release their email for reuse
    op.create_index(
        "uq_users_tenant_email_live",
        "users",
        ["tenant_id", "email"],
        unique=True,
        postgresql_where=sa.text("status <> 'Deleted'"),
    )
    op.create_index("ix_users_tenant_status", "users", ["tenant_id", "status"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_users_tenant_status", table_name="users")
    op.drop_index("uq_users_tenant_email_live", table_name="users")
    op.drop_table("users")
    op.drop_table("tenants")
