"""SQLAlchemy ORM models for the tenants and tenant_brandings tables.

Stores the tenant catalog in the control-plane database.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from infrastructure.database.models import Base, TimestampMixin


class TenantBrandingModel(Base, TimestampMixin):
    """ORM model for tenant_brandings table.

    Each branding row is owned by exactly one tenant and removed with it.
    """

    __tablename__ = "tenant_brandings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    logo_url: Mapped[str | None] = mapped_column(String(500))
    favicon_url: Mapped[str | None] = mapped_column(String(500))
    primary_color: Mapped[str | None] = mapped_column(String(20))
    secondary_color: Mapped[str | None] = mapped_column(String(20))
    accent_color: Mapped[str | None] = mapped_column(String(20))
    login_background_url: Mapped[str | None] = mapped_column(String(500))
    email_footer_html: Mapped[str | None] = mapped_column(String(4000))
    custom_css: Mapped[str | None] = mapped_column(String(8000))

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TenantBrandingModel(id={self.id})>"


class TenantModel(Base, TimestampMixin):
    """ORM model for tenants table.

    Constraints:
    - slug is globally unique (ix_tenants_slug), stored lowercase
    - database_name is unique when set (ix_tenants_database_name);
      PostgreSQL unique indexes admit any number of NULLs
    """

    __tablename__ = "tenants"
    __table_args__ = (
        Index("ix_tenants_slug", "slug", unique=True),
        Index("ix_tenants_database_name", "database_name", unique=True),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    database_name: Mapped[str | None] = mapped_column(String(200))
    connection_string: Mapped[str | None] = mapped_column(String(500))
    document_number: Mapped[str | None] = mapped_column(String(20))
    primary_contact_name: Mapped[str | None] = mapped_column(String(200))
    primary_contact_email: Mapped[str | None] = mapped_column(String(200))
    primary_contact_phone: Mapped[str | None] = mapped_column(String(50))
    region: Mapped[str | None] = mapped_column(String(100))
    is_demo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[str | None] = mapped_column(String(2000))
    configuration: Mapped[dict[str, Any]] = mapped_column(
        JSONB, nullable=False, default=dict
    )
    branding_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("tenant_brandings.id", ondelete="SET NULL"),
        nullable=True,
    )
    activated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    suspended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    branding: Mapped[TenantBrandingModel | None] = relationship(
        TenantBrandingModel,
        lazy="joined",
        cascade="all, delete-orphan",
        single_parent=True,
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TenantModel(id={self.id}, slug={self.slug}, status={self.status})>"
