"""
Target endpoints.

Targets are shared: any authenticated caller can manage them.
"""

import logging

from fastapi import APIRouter, Depends

from config_registry.api.dependencies import get_target_registry, require_session
from config_registry.auth.session import Session
from config_registry.registry.core import ConfigRegistry
from config_registry.targets.models import Target

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=Target)
def create_target(
    target: Target,
    session: Session = Depends(require_session),
    registry: ConfigRegistry[Target] = Depends(get_target_registry),
) -> Target:
    """Create a target. The response carries the assigned id."""
    return registry.create(target, session)


@router.get("", response_model=list[Target])
def list_targets(
    session: Session = Depends(require_session),
    registry: ConfigRegistry[Target] = Depends(get_target_registry),
) -> list[Target]:
    """List all configured targets."""
    return registry.list(session)


@router.get("/{target_id}", response_model=Target)
def get_target(
    target_id: str,
    session: Session = Depends(require_session),
    registry: ConfigRegistry[Target] = Depends(get_target_registry),
) -> Target:
    return registry.get(target_id, session)


@router.put("/{target_id}", response_model=Target)
def update_target(
    target_id: str,
    target: Target,
    session: Session = Depends(require_session),
    registry: ConfigRegistry[Target] = Depends(get_target_registry),
) -> Target:
    """
    Replace a target's configuration.

    Raises:
        InvalidModificationError: If the name differs from the stored one (400)
        NotFoundError: If the target does not exist (404)
    """
    return registry.update(target_id, target, session)


@router.delete("/{target_id}", response_model=Target)
def delete_target(
    target_id: str,
    session: Session = Depends(require_session),
    registry: ConfigRegistry[Target] = Depends(get_target_registry),
) -> Target:
    """Delete a target and return it. Alerts still pointing at it are not checked."""
    return registry.delete(target_id, session)
