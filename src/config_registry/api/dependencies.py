"""
Route dependencies.

The registries live on ``app.state.registries``; routes get them, and the
caller's session, through these functions.
"""

from fastapi import Request

from config_registry.auth.session import Session
from config_registry.core.exceptions import SessionResolutionError
from config_registry.correlations.models import CorrelationConfig
from config_registry.registries import Registries
from config_registry.registry.core import ConfigRegistry
from config_registry.targets.models import Target


def get_registries(request: Request) -> Registries:
    return request.app.state.registries


def get_correlation_registry(request: Request) -> ConfigRegistry[CorrelationConfig]:
    return get_registries(request).correlations


def get_target_registry(request: Request) -> ConfigRegistry[Target]:
    return get_registries(request).targets


def require_session(request: Request) -> Session:
    """
    Session resolved by SessionMiddleware.

    Raises:
        SessionResolutionError: If the request carried no usable credential
    """
    session = getattr(request.state, "session", None)
    if session is None:
        error = getattr(request.state, "session_error", None)
        raise error or SessionResolutionError("Authentication required", reason="no credentials")
    return session
