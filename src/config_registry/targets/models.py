"""
Notification target data models.

A target is a delivery destination alerts notify through. Its ``config``
is owned by the delivery side and stored verbatim.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TargetType(Enum):
    """Delivery mechanisms a target can describe."""

    WEBHOOK = "webhook"
    SLACK = "slack"
    EMAIL = "email"
    ALERTMANAGER = "alertmanager"


class NotificationConfig(BaseModel):
    """How often the dispatcher repeats a notification while an alert stays triggered."""

    model_config = ConfigDict(frozen=True)

    interval: int = Field(default=1, ge=1, description="Minutes between repeats")
    times: int = Field(default=1, ge=1, description="Number of notifications to send")


class Target(BaseModel):
    """A stored notification target."""

    model_config = ConfigDict(frozen=True)

    id: str | None = Field(default=None, description="Assigned by the server at creation")
    name: str = Field(description="Display name, fixed after creation")
    type: TargetType = Field(description="Delivery mechanism")
    config: dict[str, Any] = Field(default_factory=dict, description="Type-specific delivery settings")
    notification_config: NotificationConfig = Field(default_factory=NotificationConfig)
