"""
Config Registry - durable store plus in-memory index for one object kind.

Write path: validate -> authorize -> store write -> index update. The index
is touched only after the store accepted the write, so a failed write leaves
the index at its last known-good value. Reads are served from the index
alone.

A store write that exceeds the timeout fails the call without touching the
index, but its id stays locked until the worker finishes. If the late write
lands, the index is brought in line with the store before the id is
released, so a later write to the same id can never be overtaken by it.

A crash between the store write and the index update leaves the index one
write behind; the next hydration (process start) reconciles it.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Generic, Iterator, TypeVar

from pydantic import BaseModel

from config_registry.auth.permissions import AllowAllGate, PermissionGate
from config_registry.auth.session import Session
from config_registry.core.exceptions import (
    ConfigRegistryError,
    InvalidConfigurationError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
)
from config_registry.registry.index import IndexEntry, InMemoryIndex
from config_registry.registry.kinds import ObjectKind
from config_registry.storage.base import ObjectStore, StoredRecord

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
R = TypeVar("R")


class _KeyLock:
    """Lock for one id plus the number of threads holding or waiting on it."""

    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class _WriteTicket:
    """One holder's claim on an id; handed off when a timed-out write is still running."""

    __slots__ = ("object_id", "key_lock", "handed_off")

    def __init__(self, object_id: str, key_lock: _KeyLock) -> None:
        self.object_id = object_id
        self.key_lock = key_lock
        self.handed_off = False


class ConfigRegistry(Generic[T]):
    """
    CRUD over one object kind with a mirrored in-memory index.

    Thread safety:
    - Index reads never wait on store I/O.
    - Writes to the same id are serialized by a per-id lock held across the
      store write and the index update, and past a timeout until the store
      call really returns; writes to different ids proceed independently.
    - Per-id locks are dropped once no thread holds or waits on them.
    """

    STORE_WORKERS = 4

    def __init__(
        self,
        kind: ObjectKind[T],
        store: ObjectStore,
        gate: PermissionGate | None = None,
        *,
        store_timeout: float | None = None,
    ):
        """
        Initialize a registry.

        Args:
            kind: Rules for the object kind held by this registry
            store: Durable store (authoritative copy)
            gate: Permission gate for referenced streams (allow-all if None)
            store_timeout: Seconds to wait on a store call, or on an earlier
                write to the same id, before failing with StorageError
                (no limit if None)
        """
        self._kind = kind
        self._store = store
        self._gate = gate or AllowAllGate()
        self._store_timeout = store_timeout
        self._index: InMemoryIndex[T] = InMemoryIndex()

        self._key_locks: dict[str, _KeyLock] = {}
        self._key_locks_guard = threading.Lock()

        self._executor: ThreadPoolExecutor | None = None
        if store_timeout is not None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.STORE_WORKERS, thread_name_prefix=f"{kind.name}-store"
            )

    @property
    def kind(self) -> str:
        return self._kind.name

    def __len__(self) -> int:
        return len(self._index)

    def _store_key(self, object_id: str) -> str:
        return f"{self.kind}/{object_id}"

    def _drop_user(self, object_id: str, key_lock: _KeyLock) -> None:
        with self._key_locks_guard:
            key_lock.users -= 1
            if key_lock.users == 0:
                del self._key_locks[object_id]

    def _release(self, ticket: _WriteTicket) -> None:
        ticket.key_lock.lock.release()
        self._drop_user(ticket.object_id, ticket.key_lock)

    @contextmanager
    def _write_lock(self, object_id: str) -> Iterator[_WriteTicket]:
        """
        Hold the per-id lock for the duration of a write.

        Raises:
            StorageError: If an earlier write to the id is still in flight
                after store_timeout seconds
        """
        with self._key_locks_guard:
            key_lock = self._key_locks.get(object_id)
            if key_lock is None:
                key_lock = self._key_locks[object_id] = _KeyLock()
            key_lock.users += 1

        wait = -1 if self._store_timeout is None else self._store_timeout
        if not key_lock.lock.acquire(timeout=wait):
            self._drop_user(object_id, key_lock)
            raise StorageError(
                f"An earlier write to {self.kind} '{object_id}' is still in flight",
                operation="lock",
                key=self._store_key(object_id),
            )

        ticket = _WriteTicket(object_id, key_lock)
        try:
            yield ticket
        finally:
            if not ticket.handed_off:
                self._release(ticket)

    def _call_store(self, operation: str, object_id: str, func: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        """Run a store read, applying the timeout and normalizing I/O errors."""
        key = self._store_key(object_id)
        try:
            if self._executor is None:
                return func(*args, **kwargs)

            future = self._executor.submit(func, *args, **kwargs)
            try:
                return future.result(timeout=self._store_timeout)
            except FuturesTimeoutError as e:
                future.cancel()
                raise StorageError(
                    f"Store {operation} timed out after {self._store_timeout}s",
                    operation=operation,
                    key=key,
                ) from e
        except ConfigRegistryError:
            raise
        except OSError as e:
            raise StorageError(f"Store {operation} failed: {e}", operation=operation, key=key) from e

    def _commit(
        self,
        ticket: _WriteTicket,
        operation: str,
        store_call: Callable[[], R],
        apply: Callable[[R], None],
    ) -> R:
        """
        Run a store write and mirror its result into the index.

        On timeout the caller gets StorageError and the index is left alone;
        the ticket is handed to the running worker, which mirrors a late
        success and then releases the id.
        """
        key = self._store_key(ticket.object_id)
        try:
            if self._executor is None:
                result = store_call()
            else:
                future = self._executor.submit(store_call)
                try:
                    result = future.result(timeout=self._store_timeout)
                except FuturesTimeoutError as e:
                    future.cancel()
                    ticket.handed_off = True
                    future.add_done_callback(partial(self._finish_late_write, ticket, operation, apply))
                    raise StorageError(
                        f"Store {operation} timed out after {self._store_timeout}s",
                        operation=operation,
                        key=key,
                    ) from e
        except ConfigRegistryError:
            raise
        except OSError as e:
            raise StorageError(f"Store {operation} failed: {e}", operation=operation, key=key) from e

        apply(result)
        return result

    def _finish_late_write(
        self, ticket: _WriteTicket, operation: str, apply: Callable[[Any], None], future: Future
    ) -> None:
        try:
            if future.cancelled():
                return
            error = future.exception()
            if error is not None:
                logger.warning(f"Timed out {operation} of {self.kind} '{ticket.object_id}' failed: {error}")
                return
            apply(future.result())
            logger.warning(
                f"Timed out {operation} of {self.kind} '{ticket.object_id}' completed late; index now matches the store"
            )
        finally:
            self._release(ticket)

    def _authorize(self, obj: T, session: Session) -> None:
        streams = self._kind.referenced_streams(obj)
        if not streams:
            return

        result = self._gate.authorize(session, streams)
        if not result.allowed:
            raise UnauthorizedError(
                f"Unauthorized access to stream '{result.denied_stream}'",
                stream=result.denied_stream,
                kind=self.kind,
                object_id=self._kind.object_id(obj),
            )

    def _encode(self, obj: T, created_at: str | None = None) -> tuple[bytes, IndexEntry[T]]:
        now = datetime.now(timezone.utc).isoformat()
        record = StoredRecord(
            kind=self.kind,
            object_id=self._kind.object_id(obj),
            data=obj.model_dump(mode="json"),
            created_at=created_at or now,
            updated_at=now,
        ).seal()
        entry = IndexEntry(value=obj, created_at=record.created_at, updated_at=record.updated_at)
        return record.model_dump_json().encode("utf-8"), entry

    def _decode(self, object_id: str, payload: bytes) -> IndexEntry[T]:
        """
        Rebuild an index entry from stored bytes.

        Raises:
            ValueError: If the record is malformed or fails its checksum
            InvalidConfigurationError: If the data no longer validates
        """
        record = StoredRecord.model_validate_json(payload)
        if record.kind != self.kind or record.object_id != object_id:
            raise ValueError(f"record key {record.kind}/{record.object_id} does not match file")
        if not record.verify():
            raise ValueError("checksum mismatch")

        value = self._kind.parse(record.data)
        self._kind.validate(value)
        return IndexEntry(value=value, created_at=record.created_at, updated_at=record.updated_at)

    def hydrate(self) -> int:
        """
        Load every stored object of this kind into the index.

        Malformed records are skipped with a warning. Must run before the
        registry serves traffic.

        Returns:
            Number of objects loaded
        """
        stored = self._call_store("scan", "*", lambda: list(self._store.scan(self.kind)))

        entries: list[tuple[str, IndexEntry[T]]] = []
        for object_id, payload in stored:
            try:
                entries.append((object_id, self._decode(object_id, payload)))
            except (ValueError, InvalidConfigurationError) as e:
                logger.warning(f"Skipping malformed {self.kind} '{object_id}': {e}")

        self._index.replace_all(entries)
        skipped = len(stored) - len(entries)
        logger.info(f"Hydrated {len(entries)} {self.kind}(s) from store ({skipped} skipped)")
        return len(entries)

    def create(self, payload: T | dict[str, Any], session: Session) -> T:
        """
        Create a new object.

        Raises:
            InvalidConfigurationError: If the payload fails validation
            UnauthorizedError: If a referenced stream is denied
            ObjectExistsError: If the id is already stored
            StorageError: If the store write fails or times out
        """
        obj = self._kind.parse(payload)
        self._kind.validate(obj)
        obj = self._kind.prepare_create(obj, session)
        self._authorize(obj, session)

        object_id = self._kind.object_id(obj)
        data, entry = self._encode(obj)
        with self._write_lock(object_id) as ticket:
            self._commit(
                ticket,
                "put",
                partial(self._store.put, self.kind, object_id, data, create_only=True),
                lambda _: self._index.put(object_id, entry),
            )

        logger.info(f"Created {self.kind} '{object_id}'")
        return obj

    def get(self, object_id: str, session: Session) -> T:
        """
        Read an object from the index.

        Raises:
            NotFoundError: If the id is unknown
            UnauthorizedError: If the kind authorizes reads and a
                referenced stream is denied
        """
        entry = self._index.get(object_id)
        if entry is None:
            raise NotFoundError(
                f"{self.kind.capitalize()} '{object_id}' not found", kind=self.kind, object_id=object_id
            )

        if self._kind.authorize_reads:
            self._authorize(entry.value, session)
        return entry.value

    def lookup(self, object_id: str) -> T | None:
        """Session-less index read for in-process consumers such as the alert dispatcher."""
        entry = self._index.get(object_id)
        return entry.value if entry else None

    def all(self) -> list[T]:
        """Every indexed object regardless of visibility, for operator tooling."""
        return [entry.value for entry in self._index.snapshot()]

    def list(self, session: Session) -> list[T]:
        """
        Objects visible to the session, in insertion order.

        No per-object stream authorization is performed here.
        """
        return [entry.value for entry in self._index.snapshot() if self._kind.visible(entry.value, session)]

    def update(self, object_id: str, payload: T | dict[str, Any], session: Session) -> T:
        """
        Replace an existing object.

        Raises:
            NotFoundError: If the id is unknown
            InvalidModificationError: If an immutable field changed
            InvalidConfigurationError: If the payload fails validation
            UnauthorizedError: If the session may not modify the object
            StorageError: If the store write fails or times out
        """
        incoming = self._kind.parse(payload)

        with self._write_lock(object_id) as ticket:
            existing = self._index.get(object_id)
            if existing is None:
                raise NotFoundError(
                    f"{self.kind.capitalize()} '{object_id}' not found", kind=self.kind, object_id=object_id
                )

            updated = self._kind.prepare_update(existing.value, incoming, object_id, session)
            self._kind.validate(updated)
            self._authorize(updated, session)

            data, entry = self._encode(updated, created_at=existing.created_at)
            self._commit(
                ticket,
                "put",
                partial(self._store.put, self.kind, object_id, data),
                lambda _: self._index.put(object_id, entry),
            )

        logger.info(f"Updated {self.kind} '{object_id}'")
        return updated

    def delete(self, object_id: str, session: Session) -> T:
        """
        Remove an object and return its last stored value.

        The store is updated first; the index follows only on success.

        Raises:
            NotFoundError: If the id is absent from the store
            UnauthorizedError: If the session may not delete the object
            StorageError: If the store delete fails or times out
        """
        with self._write_lock(object_id) as ticket:
            existing = self._index.get(object_id)
            if existing is None:
                existing = self._load_from_store(object_id)

            self._kind.check_delete(existing.value, session)

            removed = self._commit(
                ticket,
                "delete",
                partial(self._store.delete, self.kind, object_id),
                lambda _: self._index.remove(object_id),
            )

        if not removed:
            logger.warning(f"{self.kind} '{object_id}' was indexed but missing from the store")
            raise NotFoundError(
                f"{self.kind.capitalize()} '{object_id}' not found", kind=self.kind, object_id=object_id
            )

        logger.info(f"Deleted {self.kind} '{object_id}'")
        return existing.value

    def _load_from_store(self, object_id: str) -> IndexEntry[T]:
        """Fallback read for ids the index does not hold (it may be one write behind)."""
        not_found = NotFoundError(
            f"{self.kind.capitalize()} '{object_id}' not found", kind=self.kind, object_id=object_id
        )
        try:
            payload = self._call_store("get", object_id, self._store.get, self.kind, object_id)
        except StorageError as e:
            if e.operation == "key":
                raise not_found from e
            raise
        if payload is None:
            raise not_found

        try:
            return self._decode(object_id, payload)
        except (ValueError, InvalidConfigurationError) as e:
            logger.warning(f"Stored {self.kind} '{object_id}' is unreadable: {e}")
            raise not_found from e

    def close(self) -> None:
        """Release the store worker pool, if any."""
        if self._executor is not None:
            self._executor.shutdown(wait=False)
