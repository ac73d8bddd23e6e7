"""Automatic per-tenant row filtering for ORM sessions.

A session opts in by carrying the resolved tenant id in ``session.info``
under ``TENANT_ID_KEY``. For such sessions every ORM select gets a
``tenant_id = :id`` criterion for all ``TenantScopedMixin`` models,
including relationship and eager loads, and pending scoped rows without
an owner are stamped with the tenant id at flush.

Sessions without the key (control plane, administrative maintenance) are left
untouched.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.orm import ORMExecuteState, Session, with_loader_criteria

from infrastructure.database.models import TenantScopedMixin

TENANT_ID_KEY = "tenant_id"


def bind_session_to_tenant(session: Any, tenant_id: int | None) -> None:
    """Scope a session (sync or async) to a tenant, or clear the scope."""
    info = session.info
    if tenant_id is None:
        info.pop(TENANT_ID_KEY, None)
    else:
        info[TENANT_ID_KEY] = tenant_id


def current_session_tenant(session: Session) -> int | None:
    """Return the tenant id a session is scoped to, if any."""
    return session.info.get(TENANT_ID_KEY)


@event.listens_for(Session, "do_orm_execute")
def _filter_tenant_rows(execute_state: ORMExecuteState) -> None:
    tenant_id = current_session_tenant(execute_state.session)
    if tenant_id is None:
        return

    if (
        execute_state.is_select
        and not execute_state.is_column_load
        and not execute_state.is_relationship_load
    ):
        execute_state.statement = execute_state.statement.options(
            with_loader_criteria(
                TenantScopedMixin,
                lambda cls: cls.tenant_id == tenant_id,
                include_aliases=True,
            )
        )


@event.listens_for(Session, "before_flush")
def _stamp_tenant_rows(session: Session, flush_context: Any, instances: Any) -> None:
    tenant_id = current_session_tenant(session)
    if tenant_id is None:
        return

    for instance in session.new:
        if isinstance(instance, TenantScopedMixin) and instance.tenant_id is None:
            instance.tenant_id = tenant_id
