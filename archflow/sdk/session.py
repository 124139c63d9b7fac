"""Per-session state shared by the workflows of one engine.

Holds the architecture bound at startup, the global link type list, and the
per-type subtype cache. Several sessions can live in one process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from archflow.config import DEFAULT_ARCHITECTURE_NAME
from archflow.errors import GraphServiceError
from archflow.models.architecture import Architecture
from archflow.models.component import ComponentType, SubtypeOption
from archflow.models.link import LinkType
from archflow.sdk.client import GraphServiceClient

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Session state owned by a WorkflowEngine."""

    client: GraphServiceClient
    architecture_name: str = DEFAULT_ARCHITECTURE_NAME
    architecture: Architecture | None = None
    link_types: list[LinkType] = field(default_factory=list)
    _subtype_cache: dict[ComponentType, list[SubtypeOption]] = field(default_factory=dict)

    @property
    def architecture_id(self) -> str | None:
        return self.architecture.remote_architecture_id if self.architecture else None

    async def load_link_types(self) -> list[LinkType]:
        """Fetch the global link type list; keeps the previous list on failure."""
        try:
            self.link_types = await self.client.get_link_types()
        except GraphServiceError as exc:
            logger.warning("failed to load link types: %s", exc.user_message)
        return self.link_types

    async def known_link_types(self) -> list[LinkType]:
        """Global link types, loading them on first use."""
        if not self.link_types:
            await self.load_link_types()
        return list(self.link_types)

    def cached_subtypes(self, component_type: ComponentType) -> list[SubtypeOption] | None:
        return self._subtype_cache.get(ComponentType(component_type))

    async def subtypes_for(self, component_type: ComponentType) -> list[SubtypeOption]:
        """Subtypes for a type, fetched once per session.

        Raises GraphServiceError if the fetch fails; failures are not cached.
        """
        component_type = ComponentType(component_type)
        cached = self._subtype_cache.get(component_type)
        if cached is not None:
            return list(cached)
        options = await self.client.get_subtypes(component_type)
        self._subtype_cache[component_type] = options
        logger.debug("cached %d subtypes for %s", len(options), component_type.value)
        return list(options)

    async def open_architecture(self, name: str | None = None) -> Architecture:
        """Create a fresh remote architecture and bind it to the session.

        On failure the previous binding is dropped, so later creations skip
        attachment rather than attaching to a discarded architecture.
        """
        self.architecture = None
        architecture = await self.client.create_architecture(name or self.architecture_name)
        self.architecture = architecture
        self.architecture_name = architecture.name
        logger.info("architecture %s bound to session", architecture.remote_architecture_id)
        return architecture
