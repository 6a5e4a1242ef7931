"""
Config Registry Exception Hierarchy.

Defines the error kinds raised by the registries and their collaborators.
Every error carries a human-readable message and a structured ``details``
dict so the API layer can report which kind of failure occurred.
"""

from typing import Any


class ConfigRegistryError(Exception):
    """
    Base exception for all Config Registry errors.

    All custom exceptions inherit from this class, allowing
    generic catch blocks and consistent error handling.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        """
        Initialize a ConfigRegistryError.

        Args:
            message: Human-readable error message
            details: Optional structured data for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details."""
        base = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{base} ({details_str})"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(ConfigRegistryError):
    """Raised when an operation references an id the registry does not hold."""

    def __init__(
        self,
        message: str = "Object not found",
        *,
        kind: str | None = None,
        object_id: str | None = None,
    ):
        details: dict[str, Any] = {}
        if kind:
            details["kind"] = kind
        if object_id:
            details["object_id"] = object_id

        super().__init__(message, details=details)
        self.kind = kind
        self.object_id = object_id


class InvalidConfigurationError(ConfigRegistryError):
    """
    Raised when structural validation of a payload fails.

    Always raised before any persistence attempt. ``failures`` maps the
    offending field path to the reason it was rejected.
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        *,
        kind: str | None = None,
        failures: dict[str, str] | None = None,
    ):
        details: dict[str, Any] = {}
        if kind:
            details["kind"] = kind
        if failures:
            details["failures"] = failures

        super().__init__(message, details=details)
        self.kind = kind
        self.failures = failures or {}


class ObjectExistsError(ConfigRegistryError):
    """Raised when a create targets an id that is already stored."""

    def __init__(
        self,
        message: str = "Object already exists",
        *,
        kind: str | None = None,
        object_id: str | None = None,
    ):
        details: dict[str, Any] = {}
        if kind:
            details["kind"] = kind
        if object_id:
            details["object_id"] = object_id

        super().__init__(message, details=details)
        self.kind = kind
        self.object_id = object_id


class InvalidModificationError(ConfigRegistryError):
    """Raised when an update tries to change a field that is fixed after creation."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        kind: str | None = None,
        object_id: str | None = None,
    ):
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if kind:
            details["kind"] = kind
        if object_id:
            details["object_id"] = object_id

        super().__init__(message, details=details)
        self.field = field
        self.kind = kind
        self.object_id = object_id


class UnauthorizedError(ConfigRegistryError):
    """
    Raised when the acting session may not touch a referenced stream.

    ``stream`` names the first stream the permission gate denied, or is
    None when the denial is about ownership of the object itself.
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        *,
        stream: str | None = None,
        kind: str | None = None,
        object_id: str | None = None,
    ):
        details: dict[str, Any] = {}
        if stream:
            details["stream"] = stream
        if kind:
            details["kind"] = kind
        if object_id:
            details["object_id"] = object_id

        super().__init__(message, details=details)
        self.stream = stream
        self.kind = kind
        self.object_id = object_id


class StorageError(ConfigRegistryError):
    """
    Raised when the durable store rejects or fails a read/write.

    The registry never retries on its own; callers decide whether to.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if operation:
            details["operation"] = operation
        if key:
            details["key"] = key

        super().__init__(message, details=details)
        self.operation = operation
        self.key = key


class SessionResolutionError(ConfigRegistryError):
    """Raised when a request credential cannot be resolved into a session."""

    def __init__(self, message: str = "Could not resolve session", *, reason: str | None = None):
        details: dict[str, Any] = {}
        if reason:
            details["reason"] = reason

        super().__init__(message, details=details)
        self.reason = reason
