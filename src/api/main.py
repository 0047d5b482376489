"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import Annotated

import structlog
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from analytics.presentation import router as analytics_router
from iam.presentation import router as iam_router
from infrastructure.database import ConnectionPoolManager
from infrastructure.database.dependencies import (
    close_connection_pool,
    get_connection_pool,
)
from infrastructure.logging import configure_logging
from infrastructure.settings import get_settings
from infrastructure.version import __version__
from shared_kernel.errors import (
    ErrorCategory,
    ErrorKind,
    ServiceError,
    ValidationFailedError,
)

logger = structlog.get_logger()


@asynccontextmanager
async def shoppulse_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Connection pool lifecycle (created lazily, closed on shutdown)
    """
    configure_logging(debug=get_settings().debug)

    yield

    await close_connection_pool()


app = FastAPI(
    title="ShopPulse API",
    description="Multi-tenant analytics: tenant users, roles and embedded dashboards",
    version=__version__,
    lifespan=shoppulse_lifespan,
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render every domain error as the uniform envelope."""
    if exc.category in (ErrorCategory.DIVERGENCE, ErrorCategory.INTERNAL):
        log = logger.error
    else:
        log = logger.info
    log(
        "request_failed",
        method=request.method,
        path=request.url.path,
        kind=str(exc.kind),
        category=str(exc.category),
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are validation failures (400), not 422."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    error = ValidationFailedError(
        first.get("msg", "Invalid request"),
        field=".".join(location) or None,
    )
    return JSONResponse(status_code=error.status_code, content=error.to_envelope())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_error",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "kind": str(ErrorKind.INTERNAL_ERROR),
            "retryable": True,
        },
    )


app.include_router(iam_router)
app.include_router(analytics_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/health/db")
async def health_db(
    pool: Annotated[ConnectionPoolManager, Depends(get_connection_pool)],
) -> dict:
    """Check that the relational store answers ``SELECT 1``."""
    connected = await pool.ping()
    return {"status": "ok" if connected else "unhealthy", "connected": connected}
