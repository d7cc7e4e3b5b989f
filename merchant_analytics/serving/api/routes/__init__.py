"""
API Routes Module
"""
from .health import router as health_router
from .admin_analytics import router as admin_analytics_router
from .merchant_analytics import router as merchant_analytics_router

__all__ = [
    "health_router",
    "admin_analytics_router",
    "merchant_analytics_router",
]
