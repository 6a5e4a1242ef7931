"""
Correlation endpoints.

Every referenced stream is authorized for get, create and update. Listing
returns the caller's correlations without re-checking their streams.
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from config_registry.api.dependencies import get_correlation_registry, require_session
from config_registry.auth.session import Session
from config_registry.correlations.models import CorrelationConfig
from config_registry.registry.core import ConfigRegistry

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[CorrelationConfig])
def list_correlations(
    session: Session = Depends(require_session),
    registry: ConfigRegistry[CorrelationConfig] = Depends(get_correlation_registry),
) -> list[CorrelationConfig]:
    """List correlations created by the current user."""
    return registry.list(session)


@router.get("/{correlation_id}", response_model=CorrelationConfig)
def get_correlation(
    correlation_id: str,
    session: Session = Depends(require_session),
    registry: ConfigRegistry[CorrelationConfig] = Depends(get_correlation_registry),
) -> CorrelationConfig:
    """
    Get a correlation.

    Raises:
        UnauthorizedError: If a referenced stream is denied (403)
        NotFoundError: If the correlation does not exist (404)
    """
    return registry.get(correlation_id, session)


@router.post("", response_model=CorrelationConfig)
def create_correlation(
    correlation: CorrelationConfig,
    session: Session = Depends(require_session),
    registry: ConfigRegistry[CorrelationConfig] = Depends(get_correlation_registry),
) -> CorrelationConfig:
    """
    Create a correlation owned by the current user.

    ``user_id`` is always set by the server; ``id`` is generated when omitted.

    Raises:
        InvalidConfigurationError: If the configuration is invalid (400)
        UnauthorizedError: If a referenced stream is denied (403)
    """
    return registry.create(correlation, session)


@router.put("/{correlation_id}", response_model=CorrelationConfig)
def modify_correlation(
    correlation_id: str,
    correlation: CorrelationConfig,
    session: Session = Depends(require_session),
    registry: ConfigRegistry[CorrelationConfig] = Depends(get_correlation_registry),
) -> CorrelationConfig:
    """
    Replace a correlation. The path id wins over any id in the body.

    Raises:
        InvalidConfigurationError: If the configuration is invalid (400)
        UnauthorizedError: If the caller does not own it or a stream is denied (403)
        NotFoundError: If the correlation does not exist (404)
    """
    return registry.update(correlation_id, correlation, session)


@router.delete("/{correlation_id}", status_code=status.HTTP_200_OK)
def delete_correlation(
    correlation_id: str,
    session: Session = Depends(require_session),
    registry: ConfigRegistry[CorrelationConfig] = Depends(get_correlation_registry),
) -> Response:
    """Delete a correlation owned by the current user. Responds with an empty body."""
    registry.delete(correlation_id, session)
    return Response(status_code=status.HTTP_200_OK)
