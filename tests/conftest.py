"""Pytest configuration and fixtures."""

import os
import tempfile
import threading
from pathlib import Path
from typing import Generator, Iterator

import pytest

from config_registry.auth.permissions import PolicyPermissionGate
from config_registry.auth.session import Session
from config_registry.core.ids import IdGenerator
from config_registry.correlations.kind import CorrelationKind
from config_registry.correlations.models import CorrelationConfig
from config_registry.registry.core import ConfigRegistry
from config_registry.storage.memory import MemoryObjectStore
from config_registry.targets.kind import TargetKind
from config_registry.targets.models import Target

# Keep tests independent of the developer's shell
os.environ.setdefault("CR_JWT_SECRET", "test-secret")
os.environ.setdefault("CR_STORE", "memory")

POLICY = {
    "roles": {
        "admin": ["*"],
        "app": ["app-*"],
        "nginx": ["nginx"],
    },
    "users": {
        "alice": ["admin"],
        "bob": ["app"],
        "carol": ["app", "nginx"],
    },
}


class FailingStore(MemoryObjectStore):
    """Memory store whose writes can be made to fail on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False

    def put(self, kind: str, object_id: str, payload: bytes, *, create_only: bool = False) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        super().put(kind, object_id, payload, create_only=create_only)

    def delete(self, kind: str, object_id: str) -> bool:
        if self.fail_writes:
            raise OSError("disk full")
        return super().delete(kind, object_id)


class BlockingStore(MemoryObjectStore):
    """Memory store whose writes and deletes hang until ``release`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.block_writes = False
        self.release = threading.Event()

    def put(self, kind: str, object_id: str, payload: bytes, *, create_only: bool = False) -> None:
        if self.block_writes:
            self.release.wait(timeout=5)
        super().put(kind, object_id, payload, create_only=create_only)

    def delete(self, kind: str, object_id: str) -> bool:
        if self.block_writes:
            self.release.wait(timeout=5)
        return super().delete(kind, object_id)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def alice() -> Session:
    return Session(key="alice-key", username="alice")


@pytest.fixture
def bob() -> Session:
    return Session(key="bob-key", username="bob")


@pytest.fixture
def carol() -> Session:
    return Session(key="carol-key", username="carol")


@pytest.fixture
def policy_gate() -> PolicyPermissionGate:
    """Gate granting alice everything, bob app-* and carol app-* plus nginx."""
    return PolicyPermissionGate.from_dict(POLICY)


@pytest.fixture
def memory_store() -> MemoryObjectStore:
    return MemoryObjectStore()


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def blocking_store() -> Iterator[BlockingStore]:
    store = BlockingStore()
    yield store
    store.release.set()


@pytest.fixture
def ids() -> IdGenerator:
    return IdGenerator()


@pytest.fixture
def correlation_registry(
    memory_store: MemoryObjectStore, policy_gate: PolicyPermissionGate, ids: IdGenerator
) -> Iterator[ConfigRegistry[CorrelationConfig]]:
    registry = ConfigRegistry(CorrelationKind(ids), memory_store, policy_gate)
    yield registry
    registry.close()


@pytest.fixture
def target_registry(
    memory_store: MemoryObjectStore, policy_gate: PolicyPermissionGate, ids: IdGenerator
) -> Iterator[ConfigRegistry[Target]]:
    registry = ConfigRegistry(TargetKind(ids), memory_store, policy_gate)
    yield registry
    registry.close()


@pytest.fixture
def correlation_payload() -> dict:
    """A correlation over two app streams joined on trace_id."""
    return {
        "id": "checkout-errors",
        "title": "Checkout errors",
        "table_configs": [
            {"table_name": "app-frontend", "selected_fields": ["trace_id", "status"]},
            {"table_name": "app-backend", "selected_fields": ["trace_id", "error"]},
        ],
        "join_config": {
            "join_conditions": [
                {"table_name": "app-frontend", "field": "trace_id"},
                {"table_name": "app-backend", "field": "trace_id"},
            ]
        },
        "filter": {"status": {"gte": 500}},
        "start_time": "2026-01-01T00:00:00Z",
        "end_time": "2026-01-02T00:00:00Z",
    }


@pytest.fixture
def target_payload() -> dict:
    return {
        "name": "slack-ops",
        "type": "slack",
        "config": {"endpoint": "https://hooks.slack.com/services/T000/B000/XXXX"},
        "notification_config": {"interval": 5, "times": 3},
    }
