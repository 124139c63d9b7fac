"""In-memory graph of the canvas: component nodes and link edges keyed by local id.

The store is the single source of truth for what the canvas shows. It only
performs keyed reads and writes; deciding *when* to write is the workflow
engine's job. Every mutation bumps ``version`` once and notifies subscribers
once, so observers never see an intermediate state of a single update.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from archflow.errors import StaleReferenceError
from archflow.models.component import ComponentNode
from archflow.models.link import LinkEdge

logger = logging.getLogger(__name__)

StoreListener = Callable[["GraphStore"], None]
StoreSnapshot = tuple[tuple[ComponentNode, ...], tuple[LinkEdge, ...]]


class GraphStore:
    """Nodes and edges in insertion order."""

    def __init__(self) -> None:
        self._nodes: dict[str, ComponentNode] = {}
        self._edges: dict[str, LinkEdge] = {}
        self._listeners: list[StoreListener] = []
        self.version = 0

    # -- reads ---------------------------------------------------------------

    @property
    def nodes(self) -> list[ComponentNode]:
        return list(self._nodes.values())

    @property
    def edges(self) -> list[LinkEdge]:
        return list(self._edges.values())

    def get_node(self, local_id: str) -> ComponentNode | None:
        return self._nodes.get(local_id)

    def get_edge(self, local_id: str) -> LinkEdge | None:
        return self._edges.get(local_id)

    def require_node(self, local_id: str) -> ComponentNode:
        """Look up a node, raising StaleReferenceError if it is gone."""
        node = self._nodes.get(local_id)
        if node is None:
            raise StaleReferenceError("node", local_id)
        return node

    def require_edge(self, local_id: str) -> LinkEdge:
        """Look up an edge, raising StaleReferenceError if it is gone."""
        edge = self._edges.get(local_id)
        if edge is None:
            raise StaleReferenceError("edge", local_id)
        return edge

    def edges_for_node(self, local_id: str) -> list[LinkEdge]:
        """Edges with the node as source or target."""
        return [
            edge for edge in self._edges.values()
            if local_id in (edge.source_node_id, edge.target_node_id)
        ]

    def optimistic_edges(self) -> list[LinkEdge]:
        return [edge for edge in self._edges.values() if edge.is_optimistic]

    def confirmed_edges(self) -> list[LinkEdge]:
        return [edge for edge in self._edges.values() if not edge.is_optimistic]

    def snapshot(self) -> StoreSnapshot:
        """Immutable copy of the current contents, comparable with ``==``."""
        return tuple(self._nodes.values()), tuple(self._edges.values())

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable view of the canvas."""
        return {
            "nodes": [node.model_dump(mode="json") for node in self._nodes.values()],
            "edges": [edge.model_dump(mode="json") for edge in self._edges.values()],
        }

    def __len__(self) -> int:
        return len(self._nodes) + len(self._edges)

    def __repr__(self) -> str:
        return f"GraphStore(nodes={len(self._nodes)}, edges={len(self._edges)}, version={self.version})"

    # -- observers -----------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a callback run after every mutation; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        self.version += 1
        for listener in list(self._listeners):
            listener(self)

    # -- writes --------------------------------------------------------------

    def add_node(self, node: ComponentNode) -> ComponentNode:
        if node.local_id in self._nodes:
            raise ValueError(f"node already exists: {node.local_id}")
        self._nodes[node.local_id] = node
        logger.debug("node added: %s", node.local_id)
        self._changed()
        return node

    def update_node(self, local_id: str, **changes: Any) -> ComponentNode:
        """Read-modify-write of one node by id."""
        current = self.require_node(local_id)
        # rebuilt rather than model_copy'd so the subtype rule is re-validated
        updated = ComponentNode.model_validate({**current.model_dump(), **changes})
        self._nodes[local_id] = updated
        self._changed()
        return updated

    def remove_node(self, local_id: str) -> tuple[ComponentNode, list[LinkEdge]]:
        """Remove a node together with its incident edges, as one update."""
        node = self.require_node(local_id)
        incident = self.edges_for_node(local_id)
        del self._nodes[local_id]
        for edge in incident:
            del self._edges[edge.local_id]
        logger.debug("node removed: %s (%d incident edges)", local_id, len(incident))
        self._changed()
        return node, incident

    def add_edge(self, edge: LinkEdge) -> LinkEdge:
        if edge.local_id in self._edges:
            raise ValueError(f"edge already exists: {edge.local_id}")
        self._edges[edge.local_id] = edge
        logger.debug("edge added: %s (optimistic=%s)", edge.local_id, edge.is_optimistic)
        self._changed()
        return edge

    def replace_edge(self, old_id: str, new_edge: LinkEdge) -> LinkEdge:
        """Swap one edge for another in the same slot, as one update.

        There is no observable state in which both edges, or neither, exist.
        """
        self.require_edge(old_id)
        if new_edge.local_id != old_id and new_edge.local_id in self._edges:
            raise ValueError(f"edge already exists: {new_edge.local_id}")
        self._edges = {
            (new_edge.local_id if key == old_id else key): (new_edge if key == old_id else edge)
            for key, edge in self._edges.items()
        }
        logger.debug("edge replaced: %s -> %s", old_id, new_edge.local_id)
        self._changed()
        return new_edge

    def remove_edge(self, local_id: str) -> LinkEdge:
        edge = self.require_edge(local_id)
        del self._edges[local_id]
        logger.debug("edge removed: %s", local_id)
        self._changed()
        return edge

    def discard_edge(self, local_id: str) -> LinkEdge | None:
        """Remove an edge if present; a no-op if it is already gone."""
        if local_id not in self._edges:
            return None
        return self.remove_edge(local_id)

    def clear(self) -> None:
        self._nodes.clear()
        self._edges.clear()
        self._changed()
