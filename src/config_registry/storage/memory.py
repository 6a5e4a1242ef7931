"""In-process store used for development and tests."""

import threading
from typing import Iterator

from config_registry.core.exceptions import ObjectExistsError
from config_registry.storage.base import check_key


class MemoryObjectStore:
    """Durable-store stand-in that keeps values in a dict. Nothing survives a restart."""

    def __init__(self) -> None:
        self._data: dict[tuple[str, str], bytes] = {}
        self._lock = threading.Lock()

    def get(self, kind: str, object_id: str) -> bytes | None:
        check_key(kind, object_id)
        with self._lock:
            return self._data.get((kind, object_id))

    def put(self, kind: str, object_id: str, payload: bytes, *, create_only: bool = False) -> None:
        check_key(kind, object_id)
        with self._lock:
            if create_only and (kind, object_id) in self._data:
                raise ObjectExistsError(
                    f"'{object_id}' already exists", kind=kind, object_id=object_id
                )
            self._data[(kind, object_id)] = payload

    def delete(self, kind: str, object_id: str) -> bool:
        check_key(kind, object_id)
        with self._lock:
            return self._data.pop((kind, object_id), None) is not None

    def scan(self, kind: str) -> Iterator[tuple[str, bytes]]:
        with self._lock:
            items = [(oid, payload) for (k, oid), payload in self._data.items() if k == kind]
        yield from items
