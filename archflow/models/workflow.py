"""Workflow outcomes reported back to the caller of a gesture."""

from enum import Enum

from pydantic import BaseModel, Field

from archflow.models.component import ComponentNode
from archflow.models.link import LinkEdge


class WorkflowOutcome(str, Enum):
    """Terminal outcomes of a workflow."""

    succeeded = "succeeded"
    rejected = "rejected"  # the service judged the proposed link invalid
    failed = "failed"  # a remote call failed
    cancelled = "cancelled"  # the operator dismissed a dialog
    no_candidates = "no_candidates"  # nothing to choose from
    stale = "stale"  # a referenced entity disappeared mid-flight
    busy = "busy"  # another operation of the same kind is outstanding


class WorkflowResult(BaseModel):
    """What a workflow did, including the states it passed through."""

    operation: str
    outcome: WorkflowOutcome
    message: str
    states: list[str] = Field(default_factory=list)
    node: ComponentNode | None = None
    edge: LinkEdge | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == WorkflowOutcome.succeeded
