"""
Targets: notification delivery destinations used by alerts.
"""

__all__ = [
    "NotificationConfig",
    "Target",
    "TargetKind",
    "TargetType",
]

from config_registry.targets.kind import TargetKind
from config_registry.targets.models import NotificationConfig, Target, TargetType
