"""
Object kind strategy.

The registry is generic; everything that differs between correlations and
targets is supplied through an object implementing :class:`ObjectKind`.
"""

from typing import Any, Protocol, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from config_registry.auth.session import Session
from config_registry.core.exceptions import InvalidConfigurationError

T = TypeVar("T", bound=BaseModel)


class ObjectKind(Protocol[T]):
    """
    Per-kind rules plugged into ConfigRegistry.

    Attributes:
        name: Store namespace and label used in errors and logs
        authorize_reads: Whether ``get`` re-checks referenced streams
    """

    name: str
    authorize_reads: bool

    def parse(self, payload: T | dict[str, Any]) -> T:
        """Coerce a request payload into the kind's model."""
        ...

    def validate(self, obj: T) -> None:
        """Raise InvalidConfigurationError on structural problems."""
        ...

    def prepare_create(self, obj: T, session: Session) -> T:
        """Apply the id policy and server-owned fields for a new object."""
        ...

    def prepare_update(self, existing: T, incoming: T, object_id: str, session: Session) -> T:
        """Check immutable fields and return the replacement object."""
        ...

    def check_delete(self, existing: T, session: Session) -> None:
        """Raise if the session may not delete the object."""
        ...

    def object_id(self, obj: T) -> str:
        ...

    def referenced_streams(self, obj: T) -> list[str]:
        """Streams the permission gate must clear, in check order."""
        ...

    def visible(self, obj: T, session: Session) -> bool:
        """Whether ``list`` includes the object for this session."""
        ...


def parse_model(model: type[T], payload: T | dict[str, Any], kind: str) -> T:
    """Validate a payload against a model, raising InvalidConfigurationError on failure."""
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()

    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        failures = {
            ".".join(str(loc) for loc in error["loc"]) or "__root__": error["msg"]
            for error in e.errors()
        }
        raise InvalidConfigurationError(
            f"Invalid {kind} configuration", kind=kind, failures=failures
        ) from e
