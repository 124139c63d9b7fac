"""Notification sinks and the notifier that feeds them."""

import logging
from pathlib import Path
from typing import Protocol

from archflow.models.notification import Notification, NotificationLevel
from archflow.utils.identifiers import generate_notification_id, utc_timestamp

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Protocol for receiving notifications."""

    def append(self, notification: Notification) -> None:
        """Append a notification to the sink."""
        ...


class ListSink:
    """Stores notifications in a list."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def append(self, notification: Notification) -> None:
        """Append a notification to the list."""
        self.notifications.append(notification)

    @property
    def messages(self) -> list[str]:
        return [n.message for n in self.notifications]

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    def clear(self) -> None:
        """Clear all notifications."""
        self.notifications.clear()


class FileSink:
    """Writes notifications to a JSONL file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, notification: Notification) -> None:
        """Append a notification to the file."""
        with open(self.path, "a") as f:
            f.write(notification.model_dump_json() + "\n")


_LOG_LEVELS = {
    NotificationLevel.success: logging.INFO,
    NotificationLevel.info: logging.INFO,
    NotificationLevel.warning: logging.WARNING,
    NotificationLevel.error: logging.ERROR,
}


class LoggingSink:
    """Forwards notifications to a logger."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def append(self, notification: Notification) -> None:
        self.log.log(
            _LOG_LEVELS[notification.level],
            "[%s] %s", notification.operation, notification.message,
        )


class FanoutSink:
    """Delivers each notification to several sinks in order."""

    def __init__(self, *sinks: NotificationSink) -> None:
        self.sinks = list(sinks)

    def append(self, notification: Notification) -> None:
        for sink in self.sinks:
            sink.append(notification)


class Notifier:
    """Builds notifications and hands them to a sink."""

    def __init__(self, sink: NotificationSink) -> None:
        self.sink = sink

    def notify(
        self,
        level: NotificationLevel,
        operation: str,
        message: str,
        outcome: str | None = None,
    ) -> Notification:
        """Emit a notification with the given parameters."""
        notification = Notification(
            notification_id=generate_notification_id(),
            timestamp=utc_timestamp(),
            level=level,
            operation=operation,
            outcome=outcome,
            message=message,
        )
        self.sink.append(notification)
        return notification

    def success(self, operation: str, message: str, outcome: str | None = None) -> Notification:
        return self.notify(NotificationLevel.success, operation, message, outcome)

    def info(self, operation: str, message: str, outcome: str | None = None) -> Notification:
        return self.notify(NotificationLevel.info, operation, message, outcome)

    def warning(self, operation: str, message: str, outcome: str | None = None) -> Notification:
        return self.notify(NotificationLevel.warning, operation, message, outcome)

    def error(self, operation: str, message: str, outcome: str | None = None) -> Notification:
        return self.notify(NotificationLevel.error, operation, message, outcome)
