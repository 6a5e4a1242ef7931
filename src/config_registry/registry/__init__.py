"""
Config Registry Module.

Generic registry keeping a durable store and an in-memory index in step,
parameterized by an object kind.
"""

__all__ = [
    "ConfigRegistry",
    "IndexEntry",
    "InMemoryIndex",
    "ObjectKind",
]

from config_registry.registry.core import ConfigRegistry
from config_registry.registry.index import IndexEntry, InMemoryIndex
from config_registry.registry.kinds import ObjectKind
