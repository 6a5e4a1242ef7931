"""
Correlations: saved cross-stream join/filter configurations.
"""

__all__ = [
    "CorrelationConfig",
    "CorrelationKind",
    "JoinCondition",
    "JoinConfig",
    "TableConfig",
]

from config_registry.correlations.kind import CorrelationKind
from config_registry.correlations.models import (
    CorrelationConfig,
    JoinCondition,
    JoinConfig,
    TableConfig,
)
