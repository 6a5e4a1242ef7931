"""
In-memory index mirroring the durable store.

Entries are immutable snapshots; a write swaps the whole entry under the
lock, so readers observe either the previous or the next value of an id.
"""

import threading
from dataclasses import dataclass
from typing import Generic, Iterable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class IndexEntry(Generic[T]):
    """An indexed object with its store timestamps."""

    value: T
    created_at: str
    updated_at: str


class InMemoryIndex(Generic[T]):
    """Thread-safe id -> entry map. The lock is only ever held for dict operations."""

    def __init__(self) -> None:
        self._entries: dict[str, IndexEntry[T]] = {}
        self._lock = threading.RLock()

    def get(self, object_id: str) -> IndexEntry[T] | None:
        with self._lock:
            return self._entries.get(object_id)

    def put(self, object_id: str, entry: IndexEntry[T]) -> IndexEntry[T] | None:
        """Insert or replace an entry, returning the previous one."""
        with self._lock:
            previous = self._entries.get(object_id)
            self._entries[object_id] = entry
            return previous

    def remove(self, object_id: str) -> IndexEntry[T] | None:
        with self._lock:
            return self._entries.pop(object_id, None)

    def snapshot(self) -> list[IndexEntry[T]]:
        """Entries in insertion order, detached from later writes."""
        with self._lock:
            return list(self._entries.values())

    def replace_all(self, entries: Iterable[tuple[str, IndexEntry[T]]]) -> None:
        fresh = dict(entries)
        with self._lock:
            self._entries = fresh

    def __contains__(self, object_id: object) -> bool:
        with self._lock:
            return object_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
