"""
Health check endpoint.
"""

from typing import Any

from fastapi import APIRouter, Depends

from config_registry.api.dependencies import get_registries
from config_registry.registries import Registries
from config_registry.version import __version__

router = APIRouter()


@router.get("", response_model=dict[str, Any])
def health_check(registries: Registries = Depends(get_registries)) -> dict[str, Any]:
    """Liveness plus the number of indexed objects per kind."""
    return {
        "status": "healthy",
        "version": __version__,
        "indexed": {
            registries.correlations.kind: len(registries.correlations),
            registries.targets.kind: len(registries.targets),
        },
    }
