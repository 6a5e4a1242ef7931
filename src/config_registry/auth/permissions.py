"""
Permission gates.

A gate answers one question for the registries: may this session access
these streams? Streams are checked in the order given and the first denied
stream is reported; nothing after it is evaluated.
"""

import logging
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any, Protocol, Sequence

import yaml

from config_registry.auth.session import Session
from config_registry.core.exceptions import ConfigRegistryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authorization:
    """Outcome of a gate check."""

    allowed: bool
    denied_stream: str | None = None

    @classmethod
    def granted(cls) -> "Authorization":
        return cls(allowed=True)

    @classmethod
    def denied(cls, stream: str) -> "Authorization":
        return cls(allowed=False, denied_stream=stream)


class PermissionGate(Protocol):
    """Authority consulted before an object touching streams is read or written."""

    def authorize(self, session: Session, streams: Sequence[str]) -> Authorization:
        ...


class AllowAllGate:
    """Gate that grants every stream. Meant for local development."""

    def authorize(self, session: Session, streams: Sequence[str]) -> Authorization:
        return Authorization.granted()


class PolicyPermissionGate:
    """
    Role-based gate driven by a static policy.

    Policy layout::

        roles:
          admin: ["*"]
          ops: ["app-*", "nginx"]
        users:
          alice: [admin]
          bob: [ops]

    Role entries are shell-style patterns matched case-sensitively against
    stream names. Users missing from the policy are granted nothing.
    """

    def __init__(self, roles: dict[str, list[str]], users: dict[str, list[str]]):
        unknown = {role for assigned in users.values() for role in assigned} - set(roles)
        if unknown:
            raise ConfigRegistryError(
                "Policy assigns undefined roles", details={"roles": sorted(unknown)}
            )
        self._roles = {name: tuple(patterns) for name, patterns in roles.items()}
        self._users = {name: tuple(assigned) for name, assigned in users.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PolicyPermissionGate":
        if not isinstance(data, dict):
            raise ConfigRegistryError("Permission policy must be a mapping")
        return cls(roles=data.get("roles") or {}, users=data.get("users") or {})

    @classmethod
    def from_yaml(cls, path: Path | str) -> "PolicyPermissionGate":
        """Load a policy file."""
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text())
        except (OSError, yaml.YAMLError) as e:
            raise ConfigRegistryError(
                f"Cannot load permission policy: {e}", details={"path": str(path)}
            ) from e

        gate = cls.from_dict(data or {})
        logger.info(f"Loaded permission policy from {path} ({len(gate._users)} users)")
        return gate

    def patterns_for(self, username: str) -> list[str]:
        patterns: list[str] = []
        for role in self._users.get(username, ()):
            patterns.extend(self._roles[role])
        return patterns

    def authorize(self, session: Session, streams: Sequence[str]) -> Authorization:
        patterns = self.patterns_for(session.username)
        for stream in streams:
            if not any(fnmatchcase(stream, pattern) for pattern in patterns):
                logger.debug(f"Denied stream '{stream}' for user {session.username}")
                return Authorization.denied(stream)
        return Authorization.granted()
