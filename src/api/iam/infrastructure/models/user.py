"""SQLAlchemy ORM model for the users table."""

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin

_LIVE_ROW = text("status <> 'Deleted'")


class UserModel(Base, TimestampMixin):
    """ORM model for users table.

    ``(tenant_id, user_id)`` is the primary key, which is what turns a lost
    user ID allocation race into a detectable unique violation. Emails are
    unique among a tenant's non-deleted rows only, so a deleted user's
    address can be reused.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role IN ('Admin', 'Finance', 'Operations', 'Marketing')",
            name="role",
        ),
        CheckConstraint(
            "status IN ('Active', 'Inactive', 'Deleted')",
            name="status",
        ),
        Index(
            "uq_users_tenant_email_live",
            "tenant_id",
            "email",
            unique=True,
            postgresql_where=_LIVE_ROW,
            sqlite_where=_LIVE_ROW,
        ),
        Index("ix_users_tenant_status", "tenant_id", "status"),
    )

    tenant_id: Mapped[str] = mapped_column(
        String(10),
        ForeignKey("tenants.tenant_id", ondelete="RESTRICT"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(20), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    identity_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    region: Mapped[str | None] = mapped_column(String(100), nullable=True)
    store_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_tenant_admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Active")

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserModel(tenant_id={self.tenant_id}, user_id={self.user_id})>"
