"""Analytics presentation layer."""

from __future__ import annotations

from fastapi import APIRouter

from analytics.presentation import dashboards, roles

router = APIRouter(tags=["analytics"])

router.include_router(roles.router)
router.include_router(dashboards.router)

__all__ = ["router"]
