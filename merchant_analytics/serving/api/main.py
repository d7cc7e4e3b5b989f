"""
FastAPI Application Factory

Creates and configures the analytics API application.
"""

from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from merchant_analytics.config import get_settings
from merchant_analytics.serving.api.errors import register_exception_handlers
from merchant_analytics.serving.api.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from merchant_analytics.serving.api.routes import (
    admin_analytics_router,
    health_router,
    merchant_analytics_router,
)


def create_api_app(lifespan: Optional[Callable] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        lifespan: Startup/shutdown context manager; tests pass None to skip
            connecting to Postgres and Redis.

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Merchant Analytics API",
        description="Dashboard charts for the platform admin and sales reports for merchants",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.security.rate_limit_requests,
        window_seconds=settings.security.rate_limit_window_seconds,
    )
    # Added last so it wraps the others and sees rejected requests too
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router, prefix="/api", tags=["Health"])
    app.include_router(admin_analytics_router, prefix="/api/admin/analytics", tags=["Admin Analytics"])
    app.include_router(merchant_analytics_router, prefix="/api/merchant/analytics", tags=["Merchant Analytics"])

    @app.get("/api/info", tags=["Health"])
    async def api_info():
        """API information endpoint."""
        return {
            "name": "Merchant Analytics API",
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": "/docs" if settings.is_development else None,
        }

    return app
