"""Link models: link types and the canvas edge."""

from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, model_validator


class LinkType(str, Enum):
    """Kinds of interaction between two components."""

    API_CALL = "API_CALL"
    STREAM = "STREAM"
    REPLICATION = "REPLICATION"
    ETL_PIPELINE = "ETL_PIPELINE"
    BATCH_TRANSFER = "BATCH_TRANSFER"
    EVENT_FLOW = "EVENT_FLOW"
    CACHE_LOOKUP = "CACHE_LOOKUP"
    DATABASE_QUERY = "DATABASE_QUERY"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


LINK_TYPE_DESCRIPTIONS: dict[LinkType, str] = {
    LinkType.API_CALL: "Synchronous request-response communication",
    LinkType.STREAM: "Real-time data streaming and processing",
    LinkType.REPLICATION: "Data replication for redundancy and availability",
    LinkType.ETL_PIPELINE: "Extract, Transform, Load data pipeline",
    LinkType.BATCH_TRANSFER: "Batch data transfer for large datasets",
    LinkType.EVENT_FLOW: "Asynchronous event-driven communication",
    LinkType.CACHE_LOOKUP: "Cache read/write operations",
    LinkType.DATABASE_QUERY: "Database read/write operations",
}

OPTIMISTIC_LABEL = "connecting"


class ConnectionParams(BaseModel):
    """The raw connect gesture: which handles the user joined."""

    model_config = {"frozen": True}

    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None


class LinkEdge(BaseModel):
    """An edge on the canvas.

    Optimistic edges are placeholders shown while a connection is being
    resolved. They have no remote identity, no link type and no heuristics,
    and they are never evaluated or persisted.
    """

    model_config = {"frozen": True}

    local_id: str
    remote_link_id: str | None = None
    source_node_id: str
    target_node_id: str
    link_type: LinkType | None = None
    heuristics: dict[str, Any] | None = None
    is_optimistic: bool = False

    @model_validator(mode="after")
    def validate_identity(self) -> Self:
        if self.is_optimistic:
            if self.remote_link_id is not None:
                raise ValueError("optimistic edges cannot hold a remote link id")
            if self.link_type is not None or self.heuristics is not None:
                raise ValueError("optimistic edges cannot carry a link type or heuristics")
        else:
            if self.remote_link_id is None:
                raise ValueError("confirmed edges require a remote link id")
            if self.link_type is None:
                raise ValueError("confirmed edges require a link type")
        return self

    @property
    def label(self) -> str:
        if self.is_optimistic or self.link_type is None:
            return OPTIMISTIC_LABEL
        return self.link_type.label
