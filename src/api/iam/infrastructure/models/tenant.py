"""SQLAlchemy ORM model for the tenants table.

Tenants are the top-level isolation boundary. Rows are created by seed or
admin tooling; the service only references them.
"""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class TenantModel(Base, TimestampMixin):
    """ORM model for tenants table."""

    __tablename__ = "tenants"

    tenant_id: Mapped[str] = mapped_column(String(10), primary_key=True)
    tenant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TenantModel(tenant_id={self.tenant_id}, name={self.tenant_name})>"
