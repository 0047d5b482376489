"""Role visibility presentation layer."""

from analytics.presentation.roles.routes import router

__all__ = ["router"]
