"""Basic statistics over the canvas graph.

Counts what is on the canvas: components per type, connections per link
type, placeholders still being resolved and nodes with no connection.
"""

from collections import Counter
from dataclasses import asdict, dataclass, field

from archflow.models.link import OPTIMISTIC_LABEL
from archflow.store.graph_store import GraphStore


@dataclass
class ConnectionSummary:
    """One confirmed connection, by label."""

    source: str
    target: str
    link_type: str


@dataclass
class CanvasSummary:
    """Summary of a canvas with basic statistics."""

    component_count: int = 0
    connection_count: int = 0
    pending_connection_count: int = 0
    components_by_type: dict[str, int] = field(default_factory=dict)
    connections_by_type: dict[str, int] = field(default_factory=dict)
    connections: list[ConnectionSummary] = field(default_factory=list)
    isolated_components: list[str] = field(default_factory=list)


def summarize(store: GraphStore) -> CanvasSummary:
    """Extract basic statistics from the graph store.

    Args:
        store: The graph store to summarize.

    Returns:
        CanvasSummary; optimistic edges are only counted as pending, never
        as connections.
    """
    nodes = store.nodes
    confirmed = store.confirmed_edges()
    labels = {node.local_id: node.label for node in nodes}

    # a node only counts as connected through a confirmed edge
    connected: set[str] = set()
    for edge in confirmed:
        connected.add(edge.source_node_id)
        connected.add(edge.target_node_id)

    components_by_type = Counter(node.component_type.value for node in nodes)
    connections_by_type = Counter(edge.link_type.value for edge in confirmed)

    return CanvasSummary(
        component_count=len(nodes),
        connection_count=len(confirmed),
        pending_connection_count=len(store.optimistic_edges()),
        components_by_type=dict(sorted(components_by_type.items())),
        connections_by_type=dict(sorted(connections_by_type.items())),
        connections=[
            ConnectionSummary(
                source=labels.get(edge.source_node_id, edge.source_node_id),
                target=labels.get(edge.target_node_id, edge.target_node_id),
                link_type=edge.label,
            )
            for edge in confirmed
        ],
        isolated_components=[
            node.label for node in nodes if node.local_id not in connected
        ],
    )


def format_summary(summary: CanvasSummary, title: str = "CANVAS SUMMARY") -> str:
    """Format canvas summary for human-readable output."""
    lines = []
    lines.append("=" * 60)
    lines.append(title)
    lines.append("=" * 60)
    lines.append("")

    lines.append(f"Components:  {summary.component_count}")
    lines.append(f"Connections: {summary.connection_count}")
    if summary.pending_connection_count:
        lines.append(f"Pending:     {summary.pending_connection_count} ({OPTIMISTIC_LABEL})")
    lines.append("")

    lines.append("-" * 40)
    lines.append("COMPONENTS")
    lines.append("-" * 40)
    for component_type, count in summary.components_by_type.items():
        lines.append(f"  • {component_type}: {count}")
    if not summary.components_by_type:
        lines.append("  (canvas is empty)")
    lines.append("")

    if summary.connections:
        lines.append("-" * 40)
        lines.append("CONNECTIONS")
        lines.append("-" * 40)
        for connection in summary.connections:
            lines.append(f"  {connection.source} → {connection.target} ({connection.link_type})")
        lines.append("")

    if summary.isolated_components:
        lines.append("-" * 40)
        lines.append("UNCONNECTED COMPONENTS")
        lines.append("-" * 40)
        for label in summary.isolated_components:
            lines.append(f"  • {label}")
        lines.append("")

    return "\n".join(lines)


def summary_to_dict(summary: CanvasSummary) -> dict:
    """Convert CanvasSummary to a JSON-serializable dict."""
    return asdict(summary)
