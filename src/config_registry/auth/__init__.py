"""
Authentication and authorization for Config Registry.

Session resolution from request credentials and the permission gates the
registries consult.
"""

from config_registry.auth.permissions import (
    AllowAllGate,
    Authorization,
    PermissionGate,
    PolicyPermissionGate,
)
from config_registry.auth.session import Session, SessionResolver, get_hash
from config_registry.auth.tokens import (
    ExpiredTokenError,
    InvalidTokenError,
    TokenError,
    TokenPayload,
    create_access_token,
    decode_token,
    hash_api_key,
)

__all__ = [
    "AllowAllGate",
    "Authorization",
    "PermissionGate",
    "PolicyPermissionGate",
    "Session",
    "SessionResolver",
    "get_hash",
    "create_access_token",
    "decode_token",
    "hash_api_key",
    "TokenPayload",
    "TokenError",
    "InvalidTokenError",
    "ExpiredTokenError",
]
