"""In-memory records of workflows that have started but not committed."""

from pydantic import BaseModel

from archflow.models.component import ComponentType, Position
from archflow.models.link import ConnectionParams


class PendingComponentCreation(BaseModel):
    """A drop that has not been named yet.

    ``subtype`` is set when the drag payload already carried one.
    """

    component_type: ComponentType
    position: Position
    subtype: str | None = None


class PendingComponentWithSubtype(BaseModel):
    """A drop whose subtype has been chosen and which now awaits a name."""

    component_type: ComponentType
    position: Position
    subtype: str


class PendingConnection(BaseModel):
    """A connect gesture being resolved, tied to its optimistic edge."""

    source_node_id: str
    target_node_id: str
    connection_params: ConnectionParams
    optimistic_edge_id: str


PendingComponent = PendingComponentCreation | PendingComponentWithSubtype
