"""Component models: types, subtypes and the canvas node."""

from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, Field, model_validator


class ComponentType(str, Enum):
    """Building blocks that can be dropped on the canvas."""

    DATABASE = "DATABASE"
    CACHE = "CACHE"
    API_SERVICE = "API_SERVICE"
    QUEUE = "QUEUE"
    STORAGE = "STORAGE"
    LOAD_BALANCER = "LOAD_BALANCER"
    STREAM_PROCESSOR = "STREAM_PROCESSOR"
    BATCH_PROCESSOR = "BATCH_PROCESSOR"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE"
    CLIENT = "CLIENT"


# types for which the service offers subtypes (SQL vs NOSQL, ...)
SUBTYPE_BEARING_TYPES = frozenset({
    ComponentType.DATABASE,
    ComponentType.CACHE,
    ComponentType.API_SERVICE,
    ComponentType.QUEUE,
    ComponentType.STORAGE,
    ComponentType.LOAD_BALANCER,
})

DEFAULT_SUBTYPE_DESCRIPTION = "Component subtype"

SUBTYPE_DESCRIPTIONS: dict[ComponentType, dict[str, str]] = {
    ComponentType.DATABASE: {
        "SQL": "Relational database with ACID properties",
        "NOSQL": "Non-relational database for flexible schemas",
        "IN_MEMORY": "Fast, memory-based database",
        "COLUMN_STORE": "Optimized for analytical queries",
        "DOCUMENT_DB": "Store and query JSON-like documents",
        "GRAPH_DB": "Optimized for graph relationships",
    },
    ComponentType.CACHE: {
        "IN_MEMORY": "Fast in-memory cache",
        "DISTRIBUTED": "Scalable distributed cache",
        "LOCAL": "Simple local cache",
    },
    ComponentType.API_SERVICE: {
        "REST": "RESTful API with HTTP methods",
        "GRAPHQL": "Flexible query language for APIs",
        "GRPC": "High-performance RPC framework",
        "SOAP": "XML-based web service protocol",
    },
    ComponentType.QUEUE: {
        "MESSAGE_QUEUE": "Async message queue",
        "TASK_QUEUE": "Background task processing",
        "STREAM": "Real-time event streaming",
        "EVENT_BUS": "Pub/sub event distribution",
    },
    ComponentType.STORAGE: {
        "BLOCK_STORAGE": "Raw block-level storage",
        "OBJECT_STORAGE": "Scalable object storage",
        "FILE_STORAGE": "Network file system",
    },
    ComponentType.LOAD_BALANCER: {
        "ROUND_ROBIN": "Distribute evenly across servers",
        "LEAST_CONNECTIONS": "Route to least busy server",
        "IP_HASH": "Consistent routing by client IP",
        "WEIGHTED": "Custom weight distribution",
    },
}


def has_subtypes(component_type: ComponentType) -> bool:
    """Whether drops of this type go through the subtype choice step."""
    return ComponentType(component_type) in SUBTYPE_BEARING_TYPES


def humanize(identifier: str) -> str:
    """``IN_MEMORY`` -> ``In Memory``."""
    return identifier.replace("_", " ").lower().title()


class Position(BaseModel):
    """Canvas coordinates of a node."""

    model_config = {"frozen": True}

    x: float = 0.0
    y: float = 0.0


class SubtypeOption(BaseModel):
    """A subtype offered for a component type, normalized from the service payload."""

    model_config = {"frozen": True}

    id: str
    name: str
    heuristics: dict[str, Any] | None = None
    description: str | None = None

    @property
    def label(self) -> str:
        return humanize(self.name)

    @classmethod
    def from_payload(cls, component_type: ComponentType, item: Any) -> "SubtypeOption":
        """Normalize one item of a subtype list.

        The service returns either bare identifiers or objects with
        ``id``/``name`` and optional ``heuristics``/``description``.
        """
        if isinstance(item, dict):
            subtype_id = item.get("id") or item.get("name")
            if not subtype_id:
                raise ValueError(f"subtype item has neither id nor name: {item!r}")
            subtype_id = str(subtype_id)
            name = str(item.get("name") or subtype_id)
            heuristics = item.get("heuristics")
            description = item.get("description")
        else:
            subtype_id = name = str(item)
            heuristics = None
            description = None

        if not description:
            description = SUBTYPE_DESCRIPTIONS.get(ComponentType(component_type), {}).get(
                subtype_id, DEFAULT_SUBTYPE_DESCRIPTION
            )
        return cls(id=subtype_id, name=name, heuristics=heuristics, description=description)


class ComponentNode(BaseModel):
    """A confirmed component on the canvas.

    Only ever built from a successful remote create, so
    ``remote_component_id`` is always set.
    """

    model_config = {"frozen": True}

    local_id: str
    remote_component_id: str
    component_type: ComponentType
    subtype: str | None = None
    display_name: str
    custom_name: str | None = None
    heuristics: dict[str, Any] | None = None  # opaque, computed by the service
    properties: dict[str, Any] = Field(default_factory=dict)
    position: Position = Field(default_factory=Position)

    @model_validator(mode="after")
    def validate_subtype(self) -> Self:
        if self.subtype is not None and not has_subtypes(self.component_type):
            raise ValueError(
                f"{self.component_type.value} components do not take a subtype"
            )
        return self

    @property
    def label(self) -> str:
        return self.custom_name or self.display_name
