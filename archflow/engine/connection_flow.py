"""Connection creation: connect -> suggest -> (disambiguate) -> validate -> commit.

An optimistic edge is placed as soon as the gesture completes, before any
network round-trip. From then on the edge is either swapped for the confirmed
edge in one store update, or removed. Both endpoints (and the optimistic edge
itself) are looked up again before every remote call, since another workflow
may have deleted them while this one was suspended.
"""

from __future__ import annotations

import logging
from enum import Enum

from archflow.engine.base import Workflow, WorkflowContext
from archflow.errors import GraphServiceError, StaleReferenceError
from archflow.models.component import ComponentNode
from archflow.models.link import ConnectionParams, LinkEdge, LinkType
from archflow.models.notification import NotificationLevel
from archflow.models.pending import PendingConnection
from archflow.models.workflow import WorkflowOutcome
from archflow.utils.identifiers import edge_local_id, generate_optimistic_edge_id

logger = logging.getLogger(__name__)

NO_CANDIDATES_MESSAGE = "No valid link types for this connection"
INVALID_MESSAGE = "Invalid connection"


class ConnectionFlowState(str, Enum):
    IDLE = "IDLE"
    OPTIMISTIC_PLACED = "OPTIMISTIC_PLACED"
    SUGGESTION_PENDING = "SUGGESTION_PENDING"
    RESOLVED_SINGLE = "RESOLVED_SINGLE"
    AWAITING_DISAMBIGUATION = "AWAITING_DISAMBIGUATION"
    VALIDATING = "VALIDATING"
    COMMITTING = "COMMITTING"


class ConnectionWorkflow(Workflow):
    """State machine for one connection attempt between two canvas nodes."""

    State = ConnectionFlowState
    operation = "create_link"
    cancel_message = "Connection cancelled"
    failure_message = "Failed to create connection"

    def __init__(self, ctx: WorkflowContext, params: ConnectionParams) -> None:
        super().__init__(ctx)
        self.params = params
        self.pending: PendingConnection | None = None
        self.candidates: list[LinkType] = []
        self.link_type: LinkType | None = None
        self.used_fallback = False

    def handlers(self):
        return {
            ConnectionFlowState.IDLE: self._place_optimistic_edge,
            ConnectionFlowState.OPTIMISTIC_PLACED: self._check_endpoints,
            ConnectionFlowState.SUGGESTION_PENDING: self._suggest,
            ConnectionFlowState.RESOLVED_SINGLE: self._resolved_single,
            ConnectionFlowState.AWAITING_DISAMBIGUATION: self._disambiguate,
            ConnectionFlowState.VALIDATING: self._validate,
            ConnectionFlowState.COMMITTING: self._commit,
        }

    @property
    def optimistic_edge_id(self) -> str | None:
        return self.pending.optimistic_edge_id if self.pending else None

    def rollback(self) -> None:
        edge_id = self.optimistic_edge_id
        if edge_id is not None and self.ctx.store.discard_edge(edge_id) is not None:
            logger.debug("discarded optimistic edge %s", edge_id)

    def on_stale(self, exc: StaleReferenceError) -> ConnectionFlowState:
        return self._abort(WorkflowOutcome.stale, f"Connection aborted: {exc}")

    def _endpoints(self) -> tuple[ComponentNode, ComponentNode]:
        """Re-resolve both endpoints; raises StaleReferenceError if anything is gone."""
        store = self.ctx.store
        store.require_edge(self.pending.optimistic_edge_id)
        return (
            store.require_node(self.pending.source_node_id),
            store.require_node(self.pending.target_node_id),
        )

    def _abort(self, outcome: WorkflowOutcome, message: str) -> ConnectionFlowState:
        self.rollback()
        return self.finish(outcome, NotificationLevel.error, message)

    async def _place_optimistic_edge(self) -> ConnectionFlowState:
        edge_id = generate_optimistic_edge_id()
        self.pending = PendingConnection(
            source_node_id=self.params.source,
            target_node_id=self.params.target,
            connection_params=self.params,
            optimistic_edge_id=edge_id,
        )
        self.ctx.store.add_edge(LinkEdge(
            local_id=edge_id,
            source_node_id=self.params.source,
            target_node_id=self.params.target,
            is_optimistic=True,
        ))
        return ConnectionFlowState.OPTIMISTIC_PLACED

    async def _check_endpoints(self) -> ConnectionFlowState:
        # only real handles should be connectable, but the store is the authority
        self._endpoints()
        return ConnectionFlowState.SUGGESTION_PENDING

    async def _suggest(self) -> ConnectionFlowState:
        source, target = self._endpoints()
        try:
            suggestions = await self.ctx.client.suggest_link_types(
                source.remote_component_id, target.remote_component_id
            )
        except GraphServiceError as exc:
            logger.warning("link suggestion failed, falling back to all link types: %s", exc.user_message)
            suggestions = None

        if suggestions is None:
            # not re-checked against the endpoint types here; validation still gates creation
            self.used_fallback = True
            suggestions = await self.ctx.session.known_link_types()

        if not suggestions:
            return self._abort(WorkflowOutcome.no_candidates, NO_CANDIDATES_MESSAGE)

        self.candidates = list(suggestions)
        if len(self.candidates) == 1:
            self.link_type = self.candidates[0]
            return ConnectionFlowState.RESOLVED_SINGLE
        return ConnectionFlowState.AWAITING_DISAMBIGUATION

    async def _resolved_single(self) -> ConnectionFlowState:
        return ConnectionFlowState.VALIDATING

    async def _disambiguate(self) -> ConnectionFlowState:
        async with self.ctx.dialog_lock:
            source, target = self._endpoints()
            choice = await self.ctx.surface.present_link_type_choice(
                list(self.candidates), source.label, target.label
            )
        link_type = self._offered(choice)
        if link_type is None:
            return self.cancel()
        self.link_type = link_type
        return ConnectionFlowState.VALIDATING

    def _offered(self, choice: LinkType | str | None) -> LinkType | None:
        """The chosen link type, or None if nothing was chosen or it was never offered."""
        if choice is None:
            return None
        try:
            link_type = LinkType(choice)
        except ValueError:
            link_type = None
        if link_type not in self.candidates:
            logger.warning("ignoring link type %r, offered %s", choice, [c.value for c in self.candidates])
            return None
        return link_type

    async def _validate(self) -> ConnectionFlowState:
        source, target = self._endpoints()
        try:
            verdict = await self.ctx.client.validate_link(
                source.remote_component_id, target.remote_component_id, self.link_type
            )
        except GraphServiceError as exc:
            return self._abort(WorkflowOutcome.failed, exc.user_message)

        if not verdict.valid:
            return self._abort(WorkflowOutcome.rejected, verdict.message or INVALID_MESSAGE)
        return ConnectionFlowState.COMMITTING

    async def _commit(self) -> ConnectionFlowState:
        source, target = self._endpoints()
        try:
            remote = await self.create_remote(
                self.ctx.client.create_link(
                    source.remote_component_id, target.remote_component_id, self.link_type
                ),
                lambda orphan: self._delete_orphan(orphan.id),
            )
        except GraphServiceError as exc:
            return self._abort(WorkflowOutcome.failed, exc.user_message)

        confirmed = LinkEdge(
            local_id=edge_local_id(remote.id),
            remote_link_id=remote.id,
            source_node_id=source.local_id,
            target_node_id=target.local_id,
            link_type=self.link_type,
            heuristics=remote.heuristics,
        )
        try:
            self._endpoints()
            self.ctx.store.replace_edge(self.pending.optimistic_edge_id, confirmed)
        except StaleReferenceError as exc:
            await self._delete_orphan(remote.id)
            return self._abort(WorkflowOutcome.stale, f"Connection aborted: {exc}")

        return await self.finish_committed("link", remote.id, "Connection created successfully", edge=confirmed)

    async def _delete_orphan(self, link_id: str) -> None:
        """Best-effort removal of a link created for an attempt that did not keep it."""
        try:
            await self.ctx.client.delete_link(link_id)
        except GraphServiceError as exc:
            logger.warning("could not delete orphaned link %s: %s", link_id, exc.user_message)
