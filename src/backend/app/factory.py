"""
Application factory for FastAPI.

This module provides the create_app() function that creates and configures
the FastAPI application instance.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.schemas.common import ApiResponse
from api.v1 import api_router
from app.routes import health_router, root_router
from core.config import settings
from core.exceptions import AppError
from core.instrumentator import instrumentator
from core.lifespan import lifespan
from core.middleware import CorrelationIdMiddleware

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    message: str,
    *,
    data: Optional[Any] = None,
    error: Optional[str] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Render a failure in the standard response envelope."""
    body = ApiResponse[Any](success=False, message=message, data=data, error=error)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(by_alias=True, exclude_none=True)),
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return error_response(exc.status_code, exc.message, data=exc.data, error=exc.error)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Route not found"
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or unknown fields are rejected with 400 before reaching any service."""
    errors = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid request")
    return error_response(400, message, data={"errors": errors})


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return error_response(429, "Too many requests, please try again later", error=str(exc.detail))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    # Internal details are only exposed when debugging
    return error_response(
        500,
        "Internal server error",
        error=f"{type(exc).__name__}: {exc}" if settings.api.debug else None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def create_app() -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application with all necessary
    middleware, routes, and instrumentation.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    # Rate limiter instance
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[f"{settings.rate_limit.per_minute}/minute"],
        enabled=settings.rate_limit.enabled,
    )

    # Create FastAPI app
    app = FastAPI(
        title=settings.api.app_name,
        version=settings.api.app_version,
        description="Vegobolt tank monitoring, pump control and account API",
        lifespan=lifespan,
        docs_url=f"{settings.api.api_prefix}/docs",
        redoc_url=f"{settings.api.api_prefix}/redoc",
        openapi_url=f"{settings.api.api_prefix}/openapi.json",
    )

    # Add rate limiter
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    register_exception_handlers(app)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_credentials="*" not in settings.cors.origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With", "X-Correlation-ID"],
        expose_headers=["X-Total-Count", "X-Page", "X-Per-Page", "X-Correlation-ID"],
    )

    # Outermost, so every log line of the request carries the ID
    app.add_middleware(CorrelationIdMiddleware)

    # Include routers
    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(api_router, prefix=settings.api.api_prefix)

    # Instrumentation
    if settings.monitoring.enable_metrics:
        instrumentator.instrument(app)
        instrumentator.expose(app, endpoint="/metrics")

    return app
