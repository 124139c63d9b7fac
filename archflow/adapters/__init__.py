"""Adapters for delivering notifications to the operator."""

from archflow.adapters.sinks import (
    FanoutSink,
    FileSink,
    ListSink,
    LoggingSink,
    NotificationSink,
    Notifier,
)

__all__ = [
    "NotificationSink",
    "ListSink",
    "FileSink",
    "LoggingSink",
    "FanoutSink",
    "Notifier",
]
