"""The workflow engine: entry point for every gesture that changes the graph.

All graph store mutations go through here. The engine owns the session
context, the store, the selection state and the set of in-flight workflows.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from archflow.adapters.sinks import NotificationSink, Notifier
from archflow.config import DEFAULT_ARCHITECTURE_NAME
from archflow.engine.base import WorkflowContext
from archflow.engine.component_flow import ComponentCreationWorkflow
from archflow.engine.connection_flow import ConnectionWorkflow
from archflow.engine.deletion import delete_component, delete_link
from archflow.engine.selection import SelectionState
from archflow.errors import GraphServiceError
from archflow.models.architecture import Architecture, ArchitectureValidation, EvaluationReport
from archflow.models.component import ComponentNode, ComponentType, Position, SubtypeOption, has_subtypes
from archflow.models.link import ConnectionParams
from archflow.models.notification import NotificationLevel
from archflow.models.pending import PendingComponent, PendingConnection
from archflow.models.selection import DragPayload, PreviewSelection, Selection
from archflow.models.workflow import WorkflowOutcome, WorkflowResult
from archflow.sdk.client import GraphServiceClient
from archflow.sdk.confirmation import ConfirmationSurface
from archflow.sdk.session import SessionContext
from archflow.store.graph_store import GraphStore

logger = logging.getLogger(__name__)


class WorkflowEngine:
    """Coordinates component and connection workflows over one graph store.

    Usage:
        async with GraphServiceClient(base_url) as client:
            engine = WorkflowEngine(client, surface, ListSink())
            await engine.start()
            result = await engine.drop(DragPayload(component_type="CACHE"), Position(x=10, y=20))
    """

    def __init__(
        self,
        client: GraphServiceClient,
        surface: ConfirmationSurface,
        sink: NotificationSink,
        store: GraphStore | None = None,
        architecture_name: str = DEFAULT_ARCHITECTURE_NAME,
    ) -> None:
        self.store = store if store is not None else GraphStore()
        self.session = SessionContext(client=client, architecture_name=architecture_name)
        self.surface = surface
        self.notifier = Notifier(sink)
        self.selection = SelectionState(self.store, self.session)
        self._ctx = WorkflowContext(
            store=self.store,
            session=self.session,
            surface=surface,
            notifier=self.notifier,
            dialog_lock=asyncio.Lock(),
        )
        self._component_flow: ComponentCreationWorkflow | None = None
        self._connection_flows: list[ConnectionWorkflow] = []

    def __repr__(self) -> str:
        return (
            f"WorkflowEngine(architecture={self.session.architecture_id!r}, "
            f"store={self.store!r})"
        )

    # -- session ---------------------------------------------------------------

    async def start(self) -> Architecture | None:
        """Load the global link types and open the session's architecture."""
        await self.session.load_link_types()
        return await self.new_architecture()

    async def new_architecture(self, name: str | None = None) -> Architecture | None:
        operation = "create_architecture"
        try:
            architecture = await self.session.open_architecture(name)
        except GraphServiceError as exc:
            self.notifier.error(operation, exc.user_message)
            return None
        self.notifier.success(operation, "Architecture created successfully")
        return architecture

    def rename_architecture(self, name: str) -> None:
        """Rename the session's architecture locally (the service keeps its name)."""
        self.session.architecture_name = name
        if self.session.architecture is not None:
            self.session.architecture = self.session.architecture.model_copy(update={"name": name})

    async def aclose(self) -> None:
        await self.session.client.aclose()

    # -- in-flight state -------------------------------------------------------

    @property
    def pending_component(self) -> PendingComponent | None:
        return self._component_flow.pending if self._component_flow else None

    @property
    def pending_connections(self) -> list[PendingConnection]:
        return [flow.pending for flow in self._connection_flows if flow.pending is not None]

    # -- component creation ----------------------------------------------------

    async def begin_drag(self, component_type: ComponentType) -> DragPayload:
        """Build the payload for a palette drag, loading subtypes if none are cached."""
        component_type = ComponentType(component_type)
        pinned = self.selection.pinned
        pinned_here = pinned is not None and pinned.component_type == component_type and pinned.subtype
        if (
            has_subtypes(component_type)
            and not pinned_here
            and self.session.cached_subtypes(component_type) is None
        ):
            try:
                await self.session.subtypes_for(component_type)
            except GraphServiceError as exc:
                logger.debug("subtypes for %s unavailable at drag start: %s", component_type.value, exc.user_message)
        return self.selection.drag_payload(component_type)

    async def drop(
        self,
        payload: DragPayload | ComponentType | str,
        position: Position | None = None,
    ) -> WorkflowResult:
        """Handle a drop on the canvas: run the component creation workflow."""
        if not isinstance(payload, DragPayload):
            payload = DragPayload(component_type=payload)
        position = position or Position()

        if self._component_flow is not None:
            message = "Another component is still being added"
            self.notifier.warning("create_component", message, outcome=WorkflowOutcome.busy.value)
            return WorkflowResult(
                operation="create_component", outcome=WorkflowOutcome.busy, message=message
            )

        flow = ComponentCreationWorkflow(
            self._ctx, payload.component_type, position, subtype=payload.subtype
        )
        self._component_flow = flow
        try:
            return await flow.run()
        finally:
            self._component_flow = None

    # -- connection creation ---------------------------------------------------

    async def connect(
        self,
        params: ConnectionParams | None = None,
        *,
        source: str | None = None,
        target: str | None = None,
    ) -> WorkflowResult:
        """Handle a connect gesture between two canvas nodes."""
        if params is None:
            if source is None or target is None:
                raise ValueError("connect() needs params or both source and target")
            params = ConnectionParams(source=source, target=target)

        flow = ConnectionWorkflow(self._ctx, params)
        self._connection_flows.append(flow)
        try:
            return await flow.run()
        finally:
            self._connection_flows.remove(flow)

    # -- edits and deletion ----------------------------------------------------

    async def delete_node(self, local_id: str) -> WorkflowResult:
        result = await delete_component(self._ctx, local_id)
        if result.succeeded:
            self.selection.forget(local_id)
        return result

    async def delete_edge(self, local_id: str) -> WorkflowResult:
        result = await delete_link(self._ctx, local_id)
        if result.succeeded:
            self.selection.forget(local_id)
        return result

    async def rename_component(self, local_id: str, name: str) -> WorkflowResult:
        """Give a component a custom name; the service is updated first.

        A blank name clears the custom name and the node falls back to its
        display name.
        """
        return await self._update_component(local_id, name=name.strip(), rename=True)

    async def update_component_properties(
        self,
        local_id: str,
        properties: dict[str, Any],
    ) -> WorkflowResult:
        """Merge properties into a component; the service is updated first."""
        return await self._update_component(local_id, properties=properties)

    async def _update_component(
        self,
        local_id: str,
        name: str = "",
        properties: dict[str, Any] | None = None,
        rename: bool = False,
    ) -> WorkflowResult:
        operation = "update_component"
        node = self.store.get_node(local_id)
        if node is None:
            message = f"Component not found: {local_id}"
            self.notifier.error(operation, message, outcome=WorkflowOutcome.stale.value)
            return WorkflowResult(operation=operation, outcome=WorkflowOutcome.stale, message=message)

        if rename:
            new_name = name or node.display_name
        else:
            new_name = node.label
        new_properties = {**node.properties, **(properties or {})}
        try:
            remote = await self.session.client.update_component(
                node.remote_component_id, node.component_type, new_name, new_properties
            )
        except GraphServiceError as exc:
            self.notifier.error(operation, exc.user_message, outcome=WorkflowOutcome.failed.value)
            return WorkflowResult(operation=operation, outcome=WorkflowOutcome.failed, message=exc.user_message)

        changes: dict[str, Any] = {"properties": remote.properties or new_properties}
        if rename:
            changes["custom_name"] = name or None
        if remote.heuristics is not None:
            changes["heuristics"] = remote.heuristics
        if properties and "subtype" in properties and has_subtypes(node.component_type):
            changes["subtype"] = properties["subtype"]
        if self.store.get_node(local_id) is None:
            message = f"Component not found: {local_id}"
            self.notifier.error(operation, message, outcome=WorkflowOutcome.stale.value)
            return WorkflowResult(operation=operation, outcome=WorkflowOutcome.stale, message=message)
        updated = self.store.update_node(local_id, **changes)

        message = "Component renamed" if rename else "Component updated"
        self.notifier.success(operation, message, outcome=WorkflowOutcome.succeeded.value)
        return WorkflowResult(
            operation=operation, outcome=WorkflowOutcome.succeeded, message=message, node=updated
        )

    def move_component(self, local_id: str, position: Position) -> ComponentNode:
        """Move a node on the canvas; layout is local only."""
        return self.store.update_node(local_id, position=position)

    def clear_canvas_locally(self) -> None:
        self.store.clear()
        self.selection.clear()

    async def clear_canvas(self) -> Architecture | None:
        """Empty the canvas and start a fresh architecture.

        Remote components and links are left in place; in-flight connections
        notice their optimistic edge is gone and abort.
        """
        self.clear_canvas_locally()
        return await self.new_architecture()

    # -- selection -------------------------------------------------------------

    @property
    def current_selection(self) -> Selection:
        return self.selection.current

    def select_node(self, local_id: str) -> bool:
        return self.selection.select_node(local_id)

    def select_edge(self, local_id: str) -> bool:
        return self.selection.select_edge(local_id)

    async def hover_palette(
        self,
        component_type: ComponentType,
        subtype: SubtypeOption | None = None,
    ) -> PreviewSelection:
        return await self.selection.hover(component_type, subtype)

    async def pin_palette(
        self,
        component_type: ComponentType,
        subtype: SubtypeOption | None = None,
    ) -> PreviewSelection:
        return await self.selection.pin(component_type, subtype)

    # -- architecture reports --------------------------------------------------

    async def evaluate_architecture(self) -> EvaluationReport | None:
        operation = "evaluate_architecture"
        architecture_id = self.session.architecture_id
        if architecture_id is None:
            self.notifier.error(operation, "No architecture to evaluate")
            return None
        try:
            report = await self.session.client.evaluate_architecture(architecture_id)
        except GraphServiceError as exc:
            self.notifier.error(operation, exc.user_message)
            return None
        self.notifier.success(operation, "Architecture evaluated successfully")
        return report

    async def validate_architecture(self) -> ArchitectureValidation | None:
        operation = "validate_architecture"
        architecture_id = self.session.architecture_id
        if architecture_id is None:
            self.notifier.error(operation, "No architecture to validate")
            return None
        try:
            validation = await self.session.client.validate_architecture(architecture_id)
        except GraphServiceError as exc:
            self.notifier.error(operation, exc.user_message)
            return None
        if validation.valid:
            self.notifier.success(operation, "Architecture is valid!")
        else:
            self.notifier.notify(
                NotificationLevel.warning,
                operation,
                f"Architecture has {len(validation.violations)} violations",
            )
        return validation
