"""Construction of the registries a process serves."""

import logging
from dataclasses import dataclass

from config_registry.auth.permissions import AllowAllGate, PermissionGate, PolicyPermissionGate
from config_registry.core.ids import IdGenerator
from config_registry.correlations.kind import CorrelationKind
from config_registry.correlations.models import CorrelationConfig
from config_registry.registry.core import ConfigRegistry
from config_registry.settings import Settings
from config_registry.storage.base import ObjectStore
from config_registry.storage.file_store import FileObjectStore
from config_registry.storage.memory import MemoryObjectStore
from config_registry.targets.kind import TargetKind
from config_registry.targets.models import Target

logger = logging.getLogger(__name__)


@dataclass
class Registries:
    """The registries a process serves, sharing one store and gate."""

    correlations: ConfigRegistry[CorrelationConfig]
    targets: ConfigRegistry[Target]
    store: ObjectStore
    gate: PermissionGate

    def hydrate(self) -> None:
        self.correlations.hydrate()
        self.targets.hydrate()

    def close(self) -> None:
        self.correlations.close()
        self.targets.close()


def build_store(settings: Settings) -> ObjectStore:
    if settings.store == "memory":
        logger.warning("Using in-memory store; objects will not survive a restart")
        return MemoryObjectStore()
    return FileObjectStore(settings.data_dir)


def build_gate(settings: Settings) -> PermissionGate:
    if settings.policy_file is None:
        logger.warning("No CR_POLICY_FILE configured; every stream is authorized")
        return AllowAllGate()
    return PolicyPermissionGate.from_yaml(settings.policy_file)


def build_registries(
    settings: Settings,
    *,
    store: ObjectStore | None = None,
    gate: PermissionGate | None = None,
) -> Registries:
    """
    Construct both registries. They are not hydrated yet.

    Args:
        settings: Service configuration
        store: Overrides the store selected by settings
        gate: Overrides the gate selected by settings
    """
    store = store if store is not None else build_store(settings)
    gate = gate if gate is not None else build_gate(settings)
    ids = IdGenerator()

    return Registries(
        correlations=ConfigRegistry(CorrelationKind(ids), store, gate, store_timeout=settings.store_timeout),
        targets=ConfigRegistry(TargetKind(ids), store, gate, store_timeout=settings.store_timeout),
        store=store,
        gate=gate,
    )
