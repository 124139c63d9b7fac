"""Deleting components and links, remote first.

The local entity is only removed once the service has confirmed the delete,
so a vanished node on the canvas always means a deleted remote component.
"""

from __future__ import annotations

import logging

from archflow.engine.base import WorkflowContext
from archflow.errors import GraphServiceError
from archflow.models.notification import NotificationLevel
from archflow.models.workflow import WorkflowOutcome, WorkflowResult

logger = logging.getLogger(__name__)


def _result(
    ctx: WorkflowContext,
    operation: str,
    outcome: WorkflowOutcome,
    level: NotificationLevel,
    message: str,
    **extra,
) -> WorkflowResult:
    ctx.notifier.notify(level, operation, message, outcome=outcome.value)
    return WorkflowResult(operation=operation, outcome=outcome, message=message, **extra)


async def delete_component(ctx: WorkflowContext, local_id: str) -> WorkflowResult:
    """Delete a component remotely, then drop it and its edges from the store."""
    operation = "delete_component"
    node = ctx.store.get_node(local_id)
    if node is None:
        return _result(
            ctx, operation, WorkflowOutcome.stale, NotificationLevel.error,
            f"Component not found: {local_id}",
        )

    try:
        await ctx.client.delete_component(node.remote_component_id)
    except GraphServiceError as exc:
        return _result(ctx, operation, WorkflowOutcome.failed, NotificationLevel.error, exc.user_message)

    # another workflow may have removed it while the delete was in flight
    if ctx.store.get_node(local_id) is not None:
        _, incident = ctx.store.remove_node(local_id)
        logger.debug("removed %s with %d incident edges", local_id, len(incident))
    return _result(
        ctx, operation, WorkflowOutcome.succeeded, NotificationLevel.success,
        "Component deleted", node=node,
    )


async def delete_link(ctx: WorkflowContext, local_id: str) -> WorkflowResult:
    """Delete a confirmed link remotely, then drop its edge from the store."""
    operation = "delete_link"
    edge = ctx.store.get_edge(local_id)
    if edge is None:
        return _result(
            ctx, operation, WorkflowOutcome.stale, NotificationLevel.error,
            f"Connection not found: {local_id}",
        )
    if edge.is_optimistic:
        # owned by its connection workflow, which removes it on any outcome
        return _result(
            ctx, operation, WorkflowOutcome.busy, NotificationLevel.warning,
            "Connection is still being created",
        )

    try:
        await ctx.client.delete_link(edge.remote_link_id)
    except GraphServiceError as exc:
        return _result(ctx, operation, WorkflowOutcome.failed, NotificationLevel.error, exc.user_message)

    ctx.store.discard_edge(local_id)
    return _result(
        ctx, operation, WorkflowOutcome.succeeded, NotificationLevel.success,
        "Connection deleted", edge=edge,
    )
