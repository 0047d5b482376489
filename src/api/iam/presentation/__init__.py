"""IAM presentation layer - aggregate-based organization.

Each aggregate package contains its own routes and models. Auth is
enforced per-endpoint through the request context dependency.
"""

from __future__ import annotations

from fastapi import APIRouter

from iam.presentation import users

router = APIRouter(tags=["iam"])

router.include_router(users.router)

__all__ = ["router"]
