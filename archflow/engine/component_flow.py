"""Component creation: drop -> (subtype choice) -> naming -> commit.

No node exists in the graph store until the remote create has succeeded,
so cancelling or failing at any point leaves nothing behind.
"""

from __future__ import annotations

import logging
from enum import Enum

from archflow.engine.base import Workflow, WorkflowContext
from archflow.errors import GraphServiceError
from archflow.models.component import ComponentNode, ComponentType, Position, SubtypeOption, has_subtypes
from archflow.models.notification import NotificationLevel
from archflow.models.pending import PendingComponent, PendingComponentCreation, PendingComponentWithSubtype
from archflow.models.workflow import WorkflowOutcome
from archflow.utils.identifiers import default_component_name, node_local_id

logger = logging.getLogger(__name__)

# offered when the subtype list cannot be fetched
FALLBACK_SUBTYPE = "default"


class ComponentFlowState(str, Enum):
    IDLE = "IDLE"
    AWAITING_SUBTYPE_CHOICE = "AWAITING_SUBTYPE_CHOICE"
    AWAITING_NAME = "AWAITING_NAME"
    COMMITTING = "COMMITTING"


class ComponentCreationWorkflow(Workflow):
    """State machine for adding one component to the canvas."""

    State = ComponentFlowState
    operation = "create_component"
    cancel_message = "Component creation cancelled"
    failure_message = "Failed to add component"

    def __init__(
        self,
        ctx: WorkflowContext,
        component_type: ComponentType,
        position: Position,
        subtype: str | None = None,
    ) -> None:
        super().__init__(ctx)
        self.pending: PendingComponent = PendingComponentCreation(
            component_type=component_type,
            position=position,
            subtype=subtype,
        )
        self.name: str | None = None
        self.custom_name: str | None = None

    def handlers(self):
        return {
            ComponentFlowState.IDLE: self._start,
            ComponentFlowState.AWAITING_SUBTYPE_CHOICE: self._choose_subtype,
            ComponentFlowState.AWAITING_NAME: self._enter_name,
            ComponentFlowState.COMMITTING: self._commit,
        }

    @property
    def subtype(self) -> str | None:
        return self.pending.subtype

    async def _start(self) -> ComponentFlowState:
        pending = self.pending
        if not has_subtypes(pending.component_type):
            if pending.subtype is not None:
                logger.debug("ignoring subtype %r for %s", pending.subtype, pending.component_type.value)
                self.pending = pending.model_copy(update={"subtype": None})
            return ComponentFlowState.AWAITING_NAME
        if pending.subtype:
            # pinned from a palette preview: the subtype dialog is skipped
            self.pending = PendingComponentWithSubtype(
                component_type=pending.component_type,
                position=pending.position,
                subtype=pending.subtype,
            )
            return ComponentFlowState.AWAITING_NAME
        return ComponentFlowState.AWAITING_SUBTYPE_CHOICE

    async def _choose_subtype(self) -> ComponentFlowState:
        component_type = self.pending.component_type
        try:
            options = await self.ctx.session.subtypes_for(component_type)
        except GraphServiceError as exc:
            logger.warning(
                "subtype lookup for %s failed, offering %r: %s",
                component_type.value, FALLBACK_SUBTYPE, exc.user_message,
            )
            options = [SubtypeOption.from_payload(component_type, FALLBACK_SUBTYPE)]

        if not options:
            return self.finish(
                WorkflowOutcome.no_candidates,
                NotificationLevel.error,
                f"No subtypes available for {component_type.value}",
            )

        choice = await self.ctx.surface.present_subtype_choice(component_type, options)
        if choice is None:
            return self.cancel()

        self.pending = PendingComponentWithSubtype(
            component_type=component_type,
            position=self.pending.position,
            subtype=choice,
        )
        return ComponentFlowState.AWAITING_NAME

    async def _enter_name(self) -> ComponentFlowState:
        component_type = self.pending.component_type
        default_name = default_component_name(component_type.value)
        name = await self.ctx.surface.present_name_entry(component_type, self.subtype, default_name)
        if name is None:
            return self.cancel()

        name = name.strip()
        self.custom_name = name or None
        self.name = name or default_name
        return ComponentFlowState.COMMITTING

    async def _commit(self) -> ComponentFlowState:
        pending = self.pending
        properties = {"subtype": pending.subtype} if pending.subtype else {}
        try:
            remote = await self.create_remote(
                self.ctx.client.create_component(pending.component_type, self.name, properties),
                lambda orphan: self._delete_orphan(orphan.id),
            )
        except GraphServiceError as exc:
            return self.finish(WorkflowOutcome.failed, NotificationLevel.error, exc.user_message)

        node = ComponentNode(
            local_id=node_local_id(remote.id),
            remote_component_id=remote.id,
            component_type=pending.component_type,
            subtype=pending.subtype,
            display_name=remote.name or self.name,
            custom_name=self.custom_name,
            heuristics=remote.heuristics,
            properties=remote.properties or properties,
            position=pending.position,
        )
        self.ctx.store.add_node(node)

        subtype_label = f" ({pending.subtype.replace('_', ' ')})" if pending.subtype else ""
        message = f"Component added successfully{subtype_label}"
        return await self.finish_committed("component", remote.id, message, node=node)

    async def _delete_orphan(self, component_id: str) -> None:
        """Best-effort removal of a component created after its workflow was cancelled."""
        try:
            await self.ctx.client.delete_component(component_id)
        except GraphServiceError as exc:
            logger.warning("could not delete orphaned component %s: %s", component_id, exc.user_message)
