"""Registry rules for correlations."""

import re
from typing import Any

from config_registry.auth.session import Session
from config_registry.core.exceptions import InvalidConfigurationError, UnauthorizedError
from config_registry.core.ids import IdGenerator
from config_registry.correlations.models import CorrelationConfig
from config_registry.registry.kinds import parse_model

_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


class CorrelationKind:
    """
    Correlations are owned by the user who created them.

    - ids are caller-supplied (generated when omitted) and fixed afterwards
    - ``user_id`` is always recomputed from the acting session
    - every referenced stream is authorized on get, create and update
    - only the owner may update or delete; list shows the caller's own
      correlations without re-checking streams
    """

    name = "correlation"
    authorize_reads = True

    def __init__(self, ids: IdGenerator | None = None):
        self._ids = ids or IdGenerator()

    def parse(self, payload: CorrelationConfig | dict[str, Any]) -> CorrelationConfig:
        return parse_model(CorrelationConfig, payload, self.name)

    def validate(self, obj: CorrelationConfig) -> None:
        failures: dict[str, str] = {}

        if obj.id is not None and (not _ID_PATTERN.match(obj.id) or ".." in obj.id):
            failures["id"] = "must be 1-128 characters of letters, digits, '.', '_' or '-' without '..'"

        if not obj.table_configs:
            failures["table_configs"] = "must reference at least one stream"
        for i, table in enumerate(obj.table_configs):
            if not table.table_name.strip():
                failures[f"table_configs.{i}.table_name"] = "must not be empty"

        tables = set(obj.stream_names())
        for i, condition in enumerate(obj.join_config.join_conditions):
            if condition.table_name not in tables:
                failures[f"join_config.join_conditions.{i}.table_name"] = (
                    f"'{condition.table_name}' is not one of the correlated streams"
                )
            if not condition.field.strip():
                failures[f"join_config.join_conditions.{i}.field"] = "must not be empty"

        if obj.start_time and obj.end_time:
            if (obj.start_time.tzinfo is None) != (obj.end_time.tzinfo is None):
                failures["end_time"] = "start_time and end_time must both carry a timezone or neither"
            elif obj.start_time > obj.end_time:
                failures["start_time"] = "must not be after end_time"

        if failures:
            raise InvalidConfigurationError("Invalid correlation configuration", kind=self.name, failures=failures)

    def prepare_create(self, obj: CorrelationConfig, session: Session) -> CorrelationConfig:
        return obj.model_copy(update={"id": obj.id or self._ids.new_id(), "user_id": session.user_id})

    def _check_owner(self, existing: CorrelationConfig, session: Session) -> None:
        if existing.user_id != session.user_id:
            raise UnauthorizedError(
                f"Correlation '{existing.id}' does not belong to user {session.username}",
                kind=self.name,
                object_id=existing.id,
            )

    def prepare_update(
        self, existing: CorrelationConfig, incoming: CorrelationConfig, object_id: str, session: Session
    ) -> CorrelationConfig:
        self._check_owner(existing, session)
        return incoming.model_copy(update={"id": object_id, "user_id": session.user_id})

    def check_delete(self, existing: CorrelationConfig, session: Session) -> None:
        self._check_owner(existing, session)

    def object_id(self, obj: CorrelationConfig) -> str:
        return obj.id or ""

    def referenced_streams(self, obj: CorrelationConfig) -> list[str]:
        return obj.stream_names()

    def visible(self, obj: CorrelationConfig, session: Session) -> bool:
        return obj.user_id == session.user_id
