"""archflow - workflow engine for building system architectures on a graph service."""

from archflow.models.component import (
    ComponentNode,
    ComponentType,
    Position,
    SubtypeOption,
)
from archflow.models.link import (
    ConnectionParams,
    LinkEdge,
    LinkType,
)
from archflow.models.selection import DragPayload
from archflow.models.workflow import (
    WorkflowOutcome,
    WorkflowResult,
)
from archflow.errors import (
    ArchflowError,
    GraphServiceError,
    StaleReferenceError,
)
from archflow.store.graph_store import GraphStore
from archflow.sdk.client import GraphServiceClient
from archflow.sdk.confirmation import ScriptedConfirmation
from archflow.engine.engine import WorkflowEngine

__all__ = [
    # Components
    "ComponentNode",
    "ComponentType",
    "Position",
    "SubtypeOption",
    # Links
    "ConnectionParams",
    "LinkEdge",
    "LinkType",
    "DragPayload",
    # Workflow results
    "WorkflowOutcome",
    "WorkflowResult",
    # Errors
    "ArchflowError",
    "GraphServiceError",
    "StaleReferenceError",
    # High-level APIs
    "GraphStore",
    "GraphServiceClient",
    "ScriptedConfirmation",
    "WorkflowEngine",
]
