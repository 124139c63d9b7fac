"""ID generation and timestamp utilities."""

import time
import uuid
from datetime import datetime, timezone


def generate_notification_id() -> str:
    """Generate a unique notification ID (UUID4)."""
    return str(uuid.uuid4())


def generate_optimistic_edge_id() -> str:
    """Generate a temporary id for a placeholder edge (never sent to the service)."""
    return f"pending-{uuid.uuid4().hex[:16]}"


def node_local_id(remote_component_id: str) -> str:
    """Canvas id of a component node bound to a remote component."""
    return f"node-{remote_component_id}"


def edge_local_id(remote_link_id: str) -> str:
    """Canvas id of a confirmed edge bound to a remote link."""
    return f"edge-{remote_link_id}"


def epoch_millis() -> int:
    """Milliseconds since the epoch, used to seed default component names."""
    return int(time.time() * 1000)


def default_component_name(component_type: str, timestamp: int | None = None) -> str:
    """Default name offered in the naming dialog, e.g. ``CACHE-1700000000000``."""
    return f"{component_type}-{timestamp if timestamp is not None else epoch_millis()}"


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
