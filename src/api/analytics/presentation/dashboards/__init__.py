"""Dashboard embedding presentation layer."""

from analytics.presentation.dashboards.routes import router

__all__ = ["router"]
