"""SQLAlchemy ORM model for the governance_rules table."""

from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    ForeignKeyConstraint,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin

# TEXT[] on PostgreSQL, JSON list elsewhere
_VALUES_TYPE = JSON().with_variant(postgresql.ARRAY(Text), "postgresql")


class GovernanceRuleModel(Base, TimestampMixin):
    """ORM model for governance_rules table.

    Rules belong to a user row, so ``(tenant_id, user_id)`` references
    ``users``. They are maintained by tenant tooling; this service only
    reads them.
    """

    __tablename__ = "governance_rules"
    __table_args__ = (
        ForeignKeyConstraint(
            ["tenant_id", "user_id"],
            ["users.tenant_id", "users.user_id"],
            ondelete="CASCADE",
        ),
        CheckConstraint(
            "dimension IN ('region', 'store', 'team', 'custom')",
            name="dimension",
        ),
        Index("ix_governance_rules_tenant_user", "tenant_id", "user_id"),
    )

    rule_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    tenant_id: Mapped[str] = mapped_column(String(10), nullable=False)
    user_id: Mapped[str] = mapped_column(String(20), nullable=False)
    dimension: Mapped[str] = mapped_column(String(50), nullable=False)
    values: Mapped[list[str]] = mapped_column(_VALUES_TYPE, nullable=False)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<GovernanceRuleModel(tenant_id={self.tenant_id}, "
            f"user_id={self.user_id}, dimension={self.dimension})>"
        )
