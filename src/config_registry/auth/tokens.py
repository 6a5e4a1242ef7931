"""
Bearer token implementation.

HMAC-SHA256 signed JWTs identifying a user by their ``sub`` claim, plus the
API key hashing used to configure key-based access.
"""

import base64
import hashlib
import hmac
import json
import logging
import os
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_EXPIRATION_SECONDS = int(timedelta(hours=24).total_seconds())

JWT_ALGORITHM = "HS256"

_DEV_SECRET = "config-registry-dev-secret"
_API_KEY_SALT = "config-registry-api-key-salt"


class TokenError(Exception):
    """Base exception for token-related errors."""


class InvalidTokenError(TokenError):
    """Raised when a token is malformed or its signature does not match."""


class ExpiredTokenError(TokenError):
    """Raised when a token has expired."""


@dataclass
class TokenPayload:
    """Claims carried by a bearer token."""

    sub: str
    exp: int
    iat: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TokenPayload":
        return cls(sub=str(data["sub"]), exp=int(data["exp"]), iat=int(data.get("iat", 0)))


def resolve_secret(secret: str | None = None) -> str:
    """Pick the explicit secret, then CR_JWT_SECRET, then the development default."""
    secret = secret or os.getenv("CR_JWT_SECRET", "")
    if not secret:
        logger.warning(
            "CR_JWT_SECRET is not set; using the development secret (INSECURE outside local use)"
        )
        return _DEV_SECRET
    return secret


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64decode(data: str) -> bytes:
    padding = -len(data) % 4
    return base64.urlsafe_b64decode(data + "=" * padding)


def _sign(signing_input: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), signing_input.encode("utf-8"), hashlib.sha256).digest()
    return _b64encode(digest)


def _encode_json(data: dict[str, Any]) -> str:
    return _b64encode(json.dumps(data, separators=(",", ":"), sort_keys=True).encode("utf-8"))


def create_access_token(
    subject: str,
    expiration_seconds: int = DEFAULT_EXPIRATION_SECONDS,
    secret: str | None = None,
) -> str:
    """
    Create a bearer token for a user.

    Args:
        subject: Username (the 'sub' claim)
        expiration_seconds: Token lifetime in seconds (default: 24 hours)
        secret: Signing secret (falls back to CR_JWT_SECRET)

    Raises:
        ValueError: If subject is empty
    """
    if not subject:
        raise ValueError("Subject cannot be empty")

    now = int(time.time())
    header_b64 = _encode_json({"alg": JWT_ALGORITHM, "typ": "JWT"})
    payload_b64 = _encode_json({"sub": subject, "iat": now, "exp": now + expiration_seconds})

    signing_input = f"{header_b64}.{payload_b64}"
    return f"{signing_input}.{_sign(signing_input, resolve_secret(secret))}"


def decode_token(token: str, secret: str | None = None) -> TokenPayload:
    """
    Verify a bearer token and return its claims.

    Raises:
        InvalidTokenError: If token is malformed or signature is invalid
        ExpiredTokenError: If token has expired
    """
    if not token:
        raise InvalidTokenError("Token cannot be empty")

    parts = token.split(".")
    if len(parts) != 3:
        raise InvalidTokenError("Invalid token format")

    header_b64, payload_b64, signature = parts
    expected = _sign(f"{header_b64}.{payload_b64}", resolve_secret(secret))
    if not hmac.compare_digest(expected, signature):
        raise InvalidTokenError("Invalid token signature")

    try:
        payload_data = json.loads(_b64decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidTokenError(f"Cannot decode token payload: {e}") from e

    if "sub" not in payload_data or "exp" not in payload_data:
        raise InvalidTokenError("Token missing required claims")

    if int(time.time()) >= int(payload_data["exp"]):
        raise ExpiredTokenError(f"Token expired at {payload_data['exp']}")

    return TokenPayload.from_dict(payload_data)


def hash_api_key(api_key: str) -> str:
    """Hash an API key the way it is listed in CR_API_KEYS."""
    return hmac.new(_API_KEY_SALT.encode("utf-8"), api_key.encode("utf-8"), hashlib.sha256).hexdigest()


def extract_token_from_header(auth_header: str) -> str | None:
    """Extract the token from a ``Bearer <token>`` header value."""
    if not auth_header:
        return None

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]
