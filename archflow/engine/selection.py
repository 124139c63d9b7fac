"""Selection and palette preview arbitration.

Real selections are held by id and resolved against the graph store on every
read, so a deleted entity can never stay "selected". Real selection always
wins over previews:

- hovering a palette item shows a transient preview, unless a real node or
  edge is selected;
- clicking a palette item pins its preview and clears the real selection;
- selecting a real node or edge clears both the hover and the pinned preview.
"""

from __future__ import annotations

import logging

from archflow.errors import GraphServiceError
from archflow.models.component import ComponentType, SubtypeOption, has_subtypes
from archflow.models.selection import (
    DragPayload,
    EdgeSelection,
    NodeSelection,
    NoSelection,
    PreviewSelection,
    Selection,
)
from archflow.sdk.session import SessionContext
from archflow.store.graph_store import GraphStore

logger = logging.getLogger(__name__)


class SelectionState:
    """What the inspection panel shows."""

    def __init__(self, store: GraphStore, session: SessionContext) -> None:
        self.store = store
        self.session = session
        self._node_id: str | None = None
        self._edge_id: str | None = None
        self._hover: PreviewSelection | None = None
        self._pinned: PreviewSelection | None = None
        self._hover_token = 0

    @property
    def current(self) -> Selection:
        if self._node_id is not None:
            node = self.store.get_node(self._node_id)
            if node is not None:
                return NodeSelection(node=node)
        if self._edge_id is not None:
            edge = self.store.get_edge(self._edge_id)
            if edge is not None:
                return EdgeSelection(edge=edge)
        if self._hover is not None:
            return self._hover
        if self._pinned is not None:
            return self._pinned
        return NoSelection()

    @property
    def pinned(self) -> PreviewSelection | None:
        return self._pinned

    def _has_real_selection(self) -> bool:
        return isinstance(self.current, (NodeSelection, EdgeSelection))

    # -- real selection --------------------------------------------------------

    def select_node(self, local_id: str) -> bool:
        """Select a canvas node; returns False if it is not in the store."""
        if self.store.get_node(local_id) is None:
            return False
        self._node_id, self._edge_id = local_id, None
        self._hover = self._pinned = None
        return True

    def select_edge(self, local_id: str) -> bool:
        """Select a canvas edge; returns False if it is not in the store."""
        if self.store.get_edge(local_id) is None:
            return False
        self._node_id, self._edge_id = None, local_id
        self._hover = self._pinned = None
        return True

    def forget(self, local_id: str) -> None:
        """Drop a real selection that points at ``local_id``."""
        if self._node_id == local_id:
            self._node_id = None
        if self._edge_id == local_id:
            self._edge_id = None

    def clear(self) -> None:
        self._node_id = self._edge_id = None
        self._hover = self._pinned = None

    # -- previews --------------------------------------------------------------

    async def _build_preview(
        self,
        component_type: ComponentType,
        subtype: SubtypeOption | None,
        pinned: bool,
    ) -> PreviewSelection:
        heuristics = subtype.heuristics if subtype else None
        if subtype is not None:
            try:
                fetched = await self.session.client.get_subtype_heuristics(component_type, subtype.id)
            except GraphServiceError as exc:
                logger.debug("no heuristics for %s/%s: %s", component_type.value, subtype.id, exc.user_message)
                fetched = None
            if fetched is not None:
                heuristics = fetched
        return PreviewSelection(
            component_type=component_type,
            subtype=subtype,
            heuristics=heuristics,
            pinned=pinned,
        )

    async def hover(
        self,
        component_type: ComponentType,
        subtype: SubtypeOption | None = None,
    ) -> PreviewSelection:
        """Show a transient preview for a palette item."""
        self._hover_token += 1
        token = self._hover_token
        preview = await self._build_preview(ComponentType(component_type), subtype, pinned=False)
        # a later hover (or end_hover) supersedes this one
        if token == self._hover_token and not self._has_real_selection():
            self._hover = preview
        return preview

    def end_hover(self) -> None:
        self._hover_token += 1
        self._hover = None

    async def pin(
        self,
        component_type: ComponentType,
        subtype: SubtypeOption | None = None,
    ) -> PreviewSelection:
        """Pin a palette preview; it stays until another pin or a real selection."""
        preview = await self._build_preview(ComponentType(component_type), subtype, pinned=True)
        self._hover_token += 1
        self._node_id = self._edge_id = None
        self._hover = None
        self._pinned = preview
        return preview

    def unpin(self) -> None:
        self._pinned = None

    def drag_payload(self, component_type: ComponentType) -> DragPayload:
        """Payload for a palette drag: the pinned subtype, else the first known one."""
        component_type = ComponentType(component_type)
        if not has_subtypes(component_type):
            return DragPayload(component_type=component_type)

        pinned = self._pinned
        if pinned is not None and pinned.component_type == component_type and pinned.subtype:
            return DragPayload(component_type=component_type, subtype=pinned.subtype.id)

        options = self.session.cached_subtypes(component_type) or []
        return DragPayload(
            component_type=component_type,
            subtype=options[0].id if options else None,
        )
