"""Notification model for operator-facing status messages."""

from enum import Enum

from pydantic import BaseModel


class NotificationLevel(str, Enum):
    """Severity of a notification."""

    success = "success"
    info = "info"
    warning = "warning"
    error = "error"


class Notification(BaseModel):
    """A terminal status message for one operation.

    Notifications are feedback only; nothing reads them to make decisions.
    """

    model_config = {"extra": "forbid"}

    notification_id: str
    timestamp: str
    level: NotificationLevel
    operation: str  # e.g. "create_component", "create_link"
    outcome: str | None = None  # WorkflowOutcome value when emitted by a workflow
    message: str
