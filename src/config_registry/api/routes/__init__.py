"""
API route handlers.
"""

from config_registry.api.routes import correlations, health, targets

__all__ = [
    "correlations",
    "health",
    "targets",
]
