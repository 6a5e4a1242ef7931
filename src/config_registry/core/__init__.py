"""
Config Registry Core Module.

Provides the error taxonomy and identifier generation shared by every
registry component.
"""

__all__ = [
    "IdGenerator",
    "id_timestamp",
    "is_valid_id",
    # Exceptions
    "ConfigRegistryError",
    "NotFoundError",
    "InvalidConfigurationError",
    "InvalidModificationError",
    "ObjectExistsError",
    "UnauthorizedError",
    "StorageError",
    "SessionResolutionError",
]

from config_registry.core.exceptions import (
    ConfigRegistryError,
    InvalidConfigurationError,
    InvalidModificationError,
    NotFoundError,
    ObjectExistsError,
    SessionResolutionError,
    StorageError,
    UnauthorizedError,
)
from config_registry.core.ids import IdGenerator, id_timestamp, is_valid_id
