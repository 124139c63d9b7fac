"""Exceptions raised by archflow.

Only remote-call failures and stale references are exceptional. Validation
rejections, empty candidate lists and user cancellations are ordinary
workflow outcomes (see ``archflow.models.workflow.WorkflowOutcome``).
"""

from __future__ import annotations


class ArchflowError(Exception):
    """Base class for archflow errors."""
    pass


class GraphServiceError(ArchflowError):
    """A call to the remote graph service failed.

    Covers transport errors, timeouts and non-2xx responses alike.
    ``service_message`` holds the message the service returned, if any;
    ``user_message`` is what should be shown to the operator.
    """

    def __init__(
        self,
        operation: str,
        generic_message: str,
        service_message: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.operation = operation
        self.generic_message = generic_message
        self.service_message = service_message
        self.status_code = status_code
        super().__init__(self.user_message)

    @property
    def user_message(self) -> str:
        return self.service_message or self.generic_message


class StaleReferenceError(ArchflowError):
    """A node or edge referenced by a workflow is no longer in the graph store."""

    def __init__(self, kind: str, local_id: str) -> None:
        self.kind = kind
        self.local_id = local_id
        super().__init__(f"{kind} not found: {local_id}")
