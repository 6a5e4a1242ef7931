"""
Durable store contract and the record envelope written through it.

A store is a byte-oriented key-value backend addressed by
``(kind, object_id)``. It knows nothing about correlations or targets;
serialization and validation live in the registry.
"""

import hashlib
import json
import re
from datetime import datetime, timezone
from typing import Any, Iterator, Protocol

from pydantic import BaseModel, Field

from config_registry.core.exceptions import StorageError

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def check_key(kind: str, object_id: str) -> None:
    """
    Reject keys that cannot be stored safely.

    Raises:
        StorageError: If kind or object_id contain path separators or other
            characters outside the key alphabet
    """
    for part in (kind, object_id):
        if not _KEY_PATTERN.match(part or "") or ".." in part:
            raise StorageError(
                f"Invalid store key '{kind}/{object_id}'",
                operation="key",
                key=f"{kind}/{object_id}",
            )


class StoredRecord(BaseModel):
    """Envelope persisted for every registry object."""

    kind: str
    object_id: str
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: str = Field(default_factory=_now)
    updated_at: str = Field(default_factory=_now)
    checksum: str = ""

    def compute_checksum(self) -> str:
        """Compute SHA256 checksum of the object data."""
        data_str = json.dumps(self.data, sort_keys=True)
        return hashlib.sha256(data_str.encode()).hexdigest()

    def seal(self) -> "StoredRecord":
        """Return a copy with the checksum refreshed."""
        return self.model_copy(update={"checksum": self.compute_checksum()})

    def verify(self) -> bool:
        """Check the stored checksum against the data."""
        return self.checksum == self.compute_checksum()


class ObjectStore(Protocol):
    """
    Key-value persistence consumed by the registries.

    Implementations must be safe to call from several threads and
    crash-consistent per key: a reader sees either the old or the new
    value of a key, never a torn write.
    """

    def get(self, kind: str, object_id: str) -> bytes | None:
        """Return the stored bytes, or None if the key is absent."""
        ...

    def put(self, kind: str, object_id: str, payload: bytes, *, create_only: bool = False) -> None:
        """
        Write a value.

        With ``create_only`` the write is atomic against concurrent writers
        of the same key and fails with ObjectExistsError if it is present.
        """
        ...

    def delete(self, kind: str, object_id: str) -> bool:
        """Remove a key. Returns False if it was not present."""
        ...

    def scan(self, kind: str) -> Iterator[tuple[str, bytes]]:
        """Yield ``(object_id, payload)`` for every key of a kind."""
        ...
