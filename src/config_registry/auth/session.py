"""
Session resolution.

Turns request credentials into a :class:`Session`: the opaque session key
the permission gate is asked about, plus the caller's username and the
identity hash stored as ``user_id`` on the objects they own.
"""

import base64
import binascii
import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Mapping

from config_registry.auth.tokens import TokenError, decode_token, extract_token_from_header, hash_api_key
from config_registry.core.exceptions import SessionResolutionError

logger = logging.getLogger(__name__)


def get_hash(value: str) -> str:
    """Return the SHA-256 hex digest used as a stable identity hash."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Session:
    """An authenticated caller."""

    key: str
    username: str
    method: str = "bearer"

    @property
    def user_id(self) -> str:
        return get_hash(self.username)


class SessionResolver:
    """
    Resolves request headers into a Session.

    An ``Authorization`` header takes precedence over an API key:
    - ``Authorization: Bearer <token>`` signed with the configured secret
    - ``Authorization: Basic <credentials>`` when basic auth is allowed
    - otherwise ``x-api-key`` matched against configured key hashes
    """

    def __init__(
        self,
        *,
        jwt_secret: str | None = None,
        api_keys: Mapping[str, str] | None = None,
        allow_basic: bool = False,
        api_key_header: str = "x-api-key",
    ) -> None:
        """
        Args:
            jwt_secret: HMAC secret for bearer tokens
            api_keys: key hash -> username
            allow_basic: Accept Basic credentials (username taken as is)
            api_key_header: Header carrying the API key
        """
        self._jwt_secret = jwt_secret
        self._api_keys = dict(api_keys or {})
        self._allow_basic = allow_basic
        self._api_key_header = api_key_header.lower()

    def resolve(self, headers: Mapping[str, str]) -> Session:
        """
        Resolve a session from request headers.

        Raises:
            SessionResolutionError: If no credential is present or the
                presented one is invalid
        """
        auth_header = headers.get("authorization")
        if auth_header:
            scheme = auth_header.split(" ", 1)[0].lower()
            if scheme == "bearer":
                return self._from_bearer(auth_header)
            if scheme == "basic":
                return self._from_basic(auth_header)
            raise SessionResolutionError(
                "Unsupported authorization scheme", reason=f"scheme={scheme}"
            )

        api_key = headers.get(self._api_key_header)
        if api_key:
            return self._from_api_key(api_key)

        raise SessionResolutionError("Authentication required", reason="no credentials")

    def _from_bearer(self, auth_header: str) -> Session:
        token = extract_token_from_header(auth_header)
        if not token:
            raise SessionResolutionError("Malformed bearer token", reason="malformed")
        try:
            payload = decode_token(token, self._jwt_secret)
        except TokenError as e:
            raise SessionResolutionError("Invalid bearer token", reason=str(e)) from e
        return Session(key=token, username=payload.sub, method="bearer")

    def _from_api_key(self, api_key: str) -> Session:
        key_hash = hash_api_key(api_key)
        for stored_hash, username in self._api_keys.items():
            if hmac.compare_digest(stored_hash, key_hash):
                return Session(key=key_hash, username=username, method="api_key")

        logger.debug(f"Rejected API key (hash prefix {key_hash[:8]})")
        raise SessionResolutionError("Invalid API key", reason="unknown key")

    def _from_basic(self, auth_header: str) -> Session:
        if not self._allow_basic:
            raise SessionResolutionError("Basic authentication is disabled", reason="basic disabled")

        parts = auth_header.split()
        if len(parts) != 2:
            raise SessionResolutionError("Malformed basic credentials", reason="malformed")
        try:
            decoded = base64.b64decode(parts[1], validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise SessionResolutionError("Malformed basic credentials", reason="malformed") from e

        username, sep, _password = decoded.partition(":")
        if not sep or not username:
            raise SessionResolutionError("Malformed basic credentials", reason="malformed")
        return Session(key=get_hash(decoded), username=username, method="basic")
