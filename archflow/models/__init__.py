"""Core data models for archflow."""

from archflow.models.architecture import (
    Architecture,
    ArchitectureValidation,
    EvaluationReport,
)
from archflow.models.component import (
    SUBTYPE_BEARING_TYPES,
    ComponentNode,
    ComponentType,
    Position,
    SubtypeOption,
    has_subtypes,
)
from archflow.models.link import (
    LINK_TYPE_DESCRIPTIONS,
    ConnectionParams,
    LinkEdge,
    LinkType,
)
from archflow.models.notification import Notification, NotificationLevel
from archflow.models.pending import (
    PendingComponent,
    PendingComponentCreation,
    PendingComponentWithSubtype,
    PendingConnection,
)
from archflow.models.selection import (
    DragPayload,
    EdgeSelection,
    NodeSelection,
    NoSelection,
    PreviewSelection,
    Selection,
)
from archflow.models.workflow import WorkflowOutcome, WorkflowResult

__all__ = [
    # Architecture
    "Architecture",
    "ArchitectureValidation",
    "EvaluationReport",
    # Components
    "SUBTYPE_BEARING_TYPES",
    "ComponentNode",
    "ComponentType",
    "Position",
    "SubtypeOption",
    "has_subtypes",
    # Links
    "LINK_TYPE_DESCRIPTIONS",
    "ConnectionParams",
    "LinkEdge",
    "LinkType",
    # Notifications
    "Notification",
    "NotificationLevel",
    # Pending operations
    "PendingComponent",
    "PendingComponentCreation",
    "PendingComponentWithSubtype",
    "PendingConnection",
    # Selection
    "DragPayload",
    "EdgeSelection",
    "NodeSelection",
    "NoSelection",
    "PreviewSelection",
    "Selection",
    # Workflow results
    "WorkflowOutcome",
    "WorkflowResult",
]
