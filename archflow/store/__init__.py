"""Graph store for the canvas."""

from archflow.store.graph_store import GraphStore, StoreListener, StoreSnapshot

__all__ = [
    "GraphStore",
    "StoreListener",
    "StoreSnapshot",
]
