"""create governance_rules and role_metric_visibility tables

Revision ID: 9e4b27c5d013
Revises: 3c1f0a9d2b7e
Create Date: 2026-09-28 10:31:07.552916

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "9e4b27c5d013"
down_revision: Union[str, Sequence[str], None] = "3c1f0a9d2b7e"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "governance_rules",
        sa.Column("rule_id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.String(length=10), nullable=False),
        sa.Column("user_id", sa.String(length=20), nullable=False),
        sa.Column("dimension", sa.String(length=50), nullable=False),
        sa.Column("values", postgresql.ARRAY(sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "dimension IN ('region', 'store', 'team', 'custom')",
            name=op.f("ck_governance_rules_dimension"),
        ),
        sa.ForeignKeyConstraint(
            ["tenant_id", "user_id"],
            ["users.tenant_id", "users.user_id"],
            name=op.f("fk_governance_rules_tenant_id_users"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("rule_id", name=op.f("pk_governance_rules")),
    )
    op.create_index(
        "ix_governance_rules_tenant_user",
        "governance_rules",
        ["tenant_id", "user_id"],
    )

    op.create_table(
        "role_metric_visibility",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.String(length=10), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("metric_name", sa.String(length=50), nullable=False),
        sa.Column("is_visible", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "role IN ('Admin', 'Finance', 'Operations', 'Marketing')",
            name=op.f("ck_role_metric_visibility_role"),
        ),
        sa.ForeignKeyConstraint(
            ["tenant_id"],
            ["tenants.tenant_id"],
            name=op.f("fk_role_metric_visibility_tenant_id_tenants"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_role_metric_visibility")),
        sa.UniqueConstraint(
            "tenant_id",
            "role",
            "metric_name",
            name="uq_role_metric_visibility_tenant_role_metric",
        ),
    )
    op.create_index(
        "ix_role_metric_visibility_tenant_role",
        "role_metric_visibility",
        ["tenant_id", "role"],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(
        "ix_role_metric_visibility_tenant_role", table_name="role_metric_visibility"
    )
    op.drop_table("role_metric_visibility")
    op.drop_index("ix_governance_rules_tenant_user", table_name="governance_rules")
    op.drop_table("governance_rules")
