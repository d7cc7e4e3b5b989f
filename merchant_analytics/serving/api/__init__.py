"""
HTTP API: app factory, auth dependencies and error envelope
"""
from .dependencies import get_analytics_source
from .errors import register_exception_handlers
from .main import create_api_app

__all__ = [
    "create_api_app",
    "get_analytics_source",
    "register_exception_handlers",
]
