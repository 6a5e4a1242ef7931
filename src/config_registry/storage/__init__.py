"""
Config Registry Storage Module.

Durable key-value backends the registries persist through.
"""

__all__ = [
    "ObjectStore",
    "StoredRecord",
    "FileObjectStore",
    "MemoryObjectStore",
]

from config_registry.storage.base import ObjectStore, StoredRecord
from config_registry.storage.file_store import FileObjectStore
from config_registry.storage.memory import MemoryObjectStore
