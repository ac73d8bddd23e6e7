"""SQLAlchemy ORM models for the identity tables inside a tenant database.

These live on ``TenantDatabaseBase`` and are created by the tenant schema
migrations during provisioning. Roles and users are tenant scoped, so
sessions bound to a tenant see and create only that tenant's rows.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import (
    TenantDatabaseBase,
    TenantScopedMixin,
    _utc_now,
)


class RoleModel(TenantDatabaseBase, TenantScopedMixin):
    """ORM model for roles table."""

    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("tenant_id", "normalized_name", name="uq_roles_tenant_name"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    normalized_name: Mapped[str] = mapped_column(String(256), nullable=False)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<RoleModel(id={self.id}, name={self.name})>"


class TenantUserModel(TenantDatabaseBase, TenantScopedMixin):
    """ORM model for users table of a tenant database."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("tenant_id", "normalized_email", name="uq_users_tenant_email"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    user_name: Mapped[str] = mapped_column(String(256), nullable=False)
    normalized_user_name: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str] = mapped_column(String(256), nullable=False)
    normalized_email: Mapped[str] = mapped_column(String(256), nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(50))
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    security_stamp: Mapped[str] = mapped_column(String(64), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    email_confirmed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TenantUserModel(id={self.id}, email={self.email})>"


class UserRoleModel(TenantDatabaseBase):
    """ORM model for user_roles link table."""

    __tablename__ = "user_roles"

    user_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    role_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    )
