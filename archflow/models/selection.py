"""What the inspection panel is showing.

Real entities and palette previews are separate variants of one union, so a
preview is never mistaken for a node in the graph store.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from archflow.models.component import ComponentNode, ComponentType, SubtypeOption
from archflow.models.link import LinkEdge


class NoSelection(BaseModel):
    kind: Literal["none"] = "none"


class NodeSelection(BaseModel):
    kind: Literal["node"] = "node"
    node: ComponentNode


class EdgeSelection(BaseModel):
    kind: Literal["edge"] = "edge"
    edge: LinkEdge


class PreviewSelection(BaseModel):
    """A palette item under inspection; it does not exist in the graph store."""

    kind: Literal["preview"] = "preview"
    component_type: ComponentType
    subtype: SubtypeOption | None = None
    heuristics: dict[str, Any] | None = None
    pinned: bool = False


Selection = Annotated[
    NoSelection | NodeSelection | EdgeSelection | PreviewSelection,
    Field(discriminator="kind"),
]


class DragPayload(BaseModel):
    """Data carried from a palette drag to the canvas drop."""

    component_type: ComponentType
    subtype: str | None = None
