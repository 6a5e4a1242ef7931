"""Registry rules for notification targets."""

from typing import Any

from config_registry.auth.session import Session
from config_registry.core.exceptions import InvalidConfigurationError, InvalidModificationError
from config_registry.core.ids import IdGenerator
from config_registry.registry.kinds import parse_model
from config_registry.targets.models import Target


class TargetKind:
    """
    Targets are shared by every caller and reference no streams.

    The server assigns the id on create and ignores any id in the payload;
    the name may never change afterwards.
    """

    name = "target"
    authorize_reads = False

    def __init__(self, ids: IdGenerator | None = None):
        self._ids = ids or IdGenerator()

    def parse(self, payload: Target | dict[str, Any]) -> Target:
        return parse_model(Target, payload, self.name)

    def validate(self, obj: Target) -> None:
        if not obj.name.strip():
            raise InvalidConfigurationError(
                "Invalid target configuration", kind=self.name, failures={"name": "must not be empty"}
            )

    def prepare_create(self, obj: Target, session: Session) -> Target:
        return obj.model_copy(update={"id": self._ids.new_id()})

    def prepare_update(self, existing: Target, incoming: Target, object_id: str, session: Session) -> Target:
        if incoming.name != existing.name:
            raise InvalidModificationError(
                "Can't modify target name", field="name", kind=self.name, object_id=object_id
            )
        return incoming.model_copy(update={"id": object_id})

    def check_delete(self, existing: Target, session: Session) -> None:
        # alerts may still reference the target; deletion is allowed regardless
        return None

    def object_id(self, obj: Target) -> str:
        return obj.id or ""

    def referenced_streams(self, obj: Target) -> list[str]:
        return []

    def visible(self, obj: Target, session: Session) -> bool:
        return True
