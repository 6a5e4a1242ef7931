"""
File Store - JSON-file backed durable storage.

Lays records out as ``{root}/{kind}/{object_id}.json``. Every write goes
to a temporary file in the same directory first and is then moved into
place, so a crash never leaves a half-written record behind.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Iterator

from config_registry.core.exceptions import ObjectExistsError, StorageError
from config_registry.storage.base import check_key

logger = logging.getLogger(__name__)


class FileObjectStore:
    """
    Durable store backed by one JSON file per object.

    Manages {root}/ with:
    - {kind}/{object_id}.json (object records)
    - {kind}/.{object_id}.{nonce}.tmp (in-flight writes, never read back)
    """

    SUFFIX = ".json"

    def __init__(self, root: Path | str | None = None):
        """Initialize store with its root directory."""
        self._root = Path(root or "var/registry")
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Cannot create store directory {self._root}: {e}", operation="init"
            ) from e

    @property
    def root(self) -> Path:
        return self._root

    def _kind_dir(self, kind: str) -> Path:
        return self._root / kind

    def _path(self, kind: str, object_id: str) -> Path:
        check_key(kind, object_id)
        return self._kind_dir(kind) / f"{object_id}{self.SUFFIX}"

    def get(self, kind: str, object_id: str) -> bytes | None:
        path = self._path(kind, object_id)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(
                f"Cannot read {path}: {e}", operation="get", key=f"{kind}/{object_id}"
            ) from e

    def put(self, kind: str, object_id: str, payload: bytes, *, create_only: bool = False) -> None:
        path = self._path(kind, object_id)
        temp_path = path.parent / f".{object_id}.{uuid.uuid4().hex[:8]}.tmp"

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(payload)
            if create_only:
                # link() refuses to overwrite, so only one concurrent creator wins
                os.link(temp_path, path)
                temp_path.unlink()
            else:
                os.replace(temp_path, path)
        except FileExistsError as e:
            temp_path.unlink(missing_ok=True)
            raise ObjectExistsError(
                f"'{object_id}' already exists", kind=kind, object_id=object_id
            ) from e
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise StorageError(
                f"Cannot write {path}: {e}", operation="put", key=f"{kind}/{object_id}"
            ) from e

        logger.debug(f"Wrote {path} ({len(payload)} bytes)")

    def delete(self, kind: str, object_id: str) -> bool:
        path = self._path(kind, object_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(
                f"Cannot delete {path}: {e}", operation="delete", key=f"{kind}/{object_id}"
            ) from e
        return True

    def scan(self, kind: str) -> Iterator[tuple[str, bytes]]:
        kind_dir = self._kind_dir(kind)
        if not kind_dir.is_dir():
            return

        for path in sorted(kind_dir.glob(f"*{self.SUFFIX}")):
            if path.name.startswith("."):
                continue
            try:
                payload = path.read_bytes()
            except OSError as e:
                logger.warning(f"Skipping unreadable {kind} record {path}: {e}")
                continue
            yield path.stem, payload
