"""
Middleware for the Config Registry API.
"""

from config_registry.api.middleware.logging import RequestLoggingMiddleware
from config_registry.api.middleware.session import SessionMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "SessionMiddleware",
]
