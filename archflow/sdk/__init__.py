"""SDK: remote service client, confirmation surface and session state."""

from archflow.sdk.client import GENERIC_MESSAGES, GraphServiceClient
from archflow.sdk.confirmation import (
    ACCEPT_DEFAULT,
    ConfirmationSurface,
    Presentation,
    ScriptedConfirmation,
)
from archflow.sdk.session import SessionContext

__all__ = [
    "GENERIC_MESSAGES",
    "GraphServiceClient",
    "ACCEPT_DEFAULT",
    "ConfirmationSurface",
    "Presentation",
    "ScriptedConfirmation",
    "SessionContext",
]
