"""
Merchant Analytics API

Main entry point. Run with:

    uvicorn merchant_analytics.main:app
    gunicorn -c gunicorn.conf.py merchant_analytics.main:app
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from merchant_analytics.config import get_settings
from merchant_analytics.config.logging import configure_logging
from merchant_analytics.database.connection import close_database, init_database
from merchant_analytics.serving.api.main import create_api_app
from merchant_analytics.serving.cache import close_redis, init_redis

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()
    settings = get_settings()

    logger.info("Starting Merchant Analytics API", environment=settings.app_env, version=settings.version)

    try:
        await init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.warning("Database init failed", error=str(e))

    if settings.analytics.cache_enabled:
        try:
            await init_redis()
            logger.info("Redis initialized")
        except Exception as e:
            logger.warning("Redis init failed, serving uncached responses", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_database()
    await close_redis()


app = create_api_app(lifespan)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
