"""Tenancy presentation layer.

Holds the tenant resolution middleware and the administrative routes,
organized by aggregate.
"""

from __future__ import annotations

from fastapi import APIRouter

from tenancy.presentation import tenants

# Auth is enforced per-endpoint (each handler declares its own Depends)
router = APIRouter(prefix="/api")

router.include_router(tenants.router)

__all__ = ["router"]
