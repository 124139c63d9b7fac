"""Utility functions for archflow."""

from archflow.utils.identifiers import (
    default_component_name,
    edge_local_id,
    epoch_millis,
    generate_notification_id,
    generate_optimistic_edge_id,
    node_local_id,
    utc_timestamp,
)

__all__ = [
    "default_component_name",
    "edge_local_id",
    "epoch_millis",
    "generate_notification_id",
    "generate_optimistic_edge_id",
    "node_local_id",
    "utc_timestamp",
]
