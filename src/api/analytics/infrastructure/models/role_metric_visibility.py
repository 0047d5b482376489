"""SQLAlchemy ORM model for the role_metric_visibility table."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class RoleMetricVisibilityModel(Base, TimestampMixin):
    """ORM model for role_metric_visibility table.

    One row per ``(tenant_id, role, metric_name)``. Hiding a metric flips
    ``is_visible``; only deleting the role removes rows.
    """

    __tablename__ = "role_metric_visibility"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id",
            "role",
            "metric_name",
            name="uq_role_metric_visibility_tenant_role_metric",
        ),
        CheckConstraint(
            "role IN ('Admin', 'Finance', 'Operations', 'Marketing')",
            name="role",
        ),
        Index("ix_role_metric_visibility_tenant_role", "tenant_id", "role"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[str] = mapped_column(
        String(10),
        ForeignKey("tenants.tenant_id", ondelete="RESTRICT"),
        nullable=False,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    metric_name: Mapped[str] = mapped_column(String(50), nullable=False)
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<RoleMetricVisibilityModel(tenant_id={self.tenant_id}, "
            f"role={self.role}, metric_name={self.metric_name})>"
        )
