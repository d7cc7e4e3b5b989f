"""
Error envelope rendering.

Every AnalyticsError becomes `{"success": false, "error", "message"}` with
the error's HTTP status.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from merchant_analytics.exceptions import AnalyticsError

logger = structlog.get_logger(__name__)


async def analytics_error_handler(request: Request, exc: AnalyticsError) -> JSONResponse:
    logger.info(
        "Request rejected",
        path=request.url.path,
        error=exc.error_code,
        status_code=exc.status_code,
    )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_payload(),
        headers=headers,
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Failures outside a route's own error handling, e.g. session setup."""
    logger.error(
        "Unhandled error",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=AnalyticsError().to_payload())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AnalyticsError, analytics_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
