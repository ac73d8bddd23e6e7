"""SQLAlchemy declarative bases and shared model utilities.

Two metadata trees exist: ``Base`` for the control-plane catalog (tenants,
memberships, users) and ``TenantDatabaseBase`` for the schema that lives in
every provisioned tenant database.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utc_now() -> datetime:
    """Generate UTC timestamp for database defaults.

    Uses a named function instead of lambda for SQLAlchemy 2.0 compatibility.
    Ensures proper INSERT-time evaluation.
    """
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for control-plane ORM models."""

    type_annotation_map: dict[type, Any] = {}


class TenantDatabaseBase(DeclarativeBase):
    """Base class for ORM models stored inside a tenant database.

    Kept on its own metadata so control-plane migrations never touch
    tenant tables and vice versa.
    """

    type_annotation_map: dict[type, Any] = {}


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamp columns.

    Automatically sets created_at on insert and updates updated_at on modification.
    Uses timezone-aware UTC timestamps with Python-side default generation.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,  # Evaluated at INSERT time
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,  # Evaluated at INSERT time
        onupdate=_utc_now,  # Evaluated at UPDATE time
        nullable=False,
    )


class TenantScopedMixin:
    """Mixin for rows owned by a single tenant.

    Sessions carrying a resolved tenant id filter every ORM select against
    these models by ``tenant_id`` and stamp it on new rows
    (see ``infrastructure.database.tenant_filter``).
    """

    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
