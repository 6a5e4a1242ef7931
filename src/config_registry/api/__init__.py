"""
Config Registry API Module.

REST API over the correlation and target registries.
"""

from config_registry.api.app import create_app

__all__ = ["create_app"]
