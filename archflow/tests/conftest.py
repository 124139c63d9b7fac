"""Shared fixtures: an in-memory graph service behind httpx.MockTransport."""

import asyncio
import json
from typing import Any, Awaitable, Callable

import httpx
import pytest

from archflow.adapters.sinks import ListSink
from archflow.engine.engine import WorkflowEngine
from archflow.models.component import SUBTYPE_DESCRIPTIONS, ComponentNode, ComponentType, Position
from archflow.models.link import LinkType
from archflow.sdk.client import GraphServiceClient
from archflow.sdk.confirmation import ScriptedConfirmation
from archflow.utils.identifiers import node_local_id

BASE_URL = "http://graph.test/api"

Hook = Callable[[httpx.Request], Awaitable[None]]


class FakeGraphService:
    """Minimal stand-in for the graph service's JSON API.

    Routes are named after the client operation that calls them, so
    failures and hooks can be attached per operation.
    """

    def __init__(self) -> None:
        self.components: dict[str, dict] = {}
        self.links: dict[str, dict] = {}
        self.architectures: dict[str, dict] = {}
        self.subtypes: dict[str, list[Any]] = {
            component_type.value: list(descriptions)
            for component_type, descriptions in SUBTYPE_DESCRIPTIONS.items()
        }
        self.heuristics: dict[tuple[str, str], dict] = {}
        self.suggestions: dict[tuple[str, str], list[str]] = {}
        self.default_suggestions: list[str] = [LinkType.API_CALL.value]
        self.omit_suggestions = False
        self.next_link_ids: list[str] = []
        self.link_types: list[str] = [link_type.value for link_type in LinkType]
        self.invalid_reason: str | None = None
        self.reject_links = False
        self.violations: list[str] = []
        self.evaluation: dict = {
            "overallScore": 7.5,
            "componentScores": {},
            "linkScores": {},
            "recommendations": ["Add a cache in front of the database"],
        }
        self.failures: dict[str, tuple[int | None, dict | None]] = {}
        self.hooks: dict[str, Hook] = {}
        self.calls: list[tuple[str, dict | None]] = []
        self._next_id = 0

    # -- test controls -------------------------------------------------------

    def fail(self, operation: str, status: int | None = 500, body: dict | None = None) -> None:
        """Make an operation fail; ``status=None`` simulates a connection error."""
        self.failures[operation] = (status, body)

    def on(self, operation: str, hook: Hook) -> None:
        """Await ``hook`` before answering an operation."""
        self.hooks[operation] = hook

    def called(self, operation: str) -> list[dict | None]:
        return [body for name, body in self.calls if name == operation]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> GraphServiceClient:
        return GraphServiceClient(BASE_URL, timeout=1.0, transport=self.transport())

    def add_component(self, component_type: ComponentType, name: str, subtype: str | None = None) -> str:
        """Create a component directly on the service side."""
        component_id = self._id("c")
        self.components[component_id] = {
            "id": component_id,
            "type": ComponentType(component_type).value,
            "name": name,
            "properties": {"subtype": subtype} if subtype else {},
        }
        return component_id

    # -- request handling ----------------------------------------------------

    def _id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}{self._next_id}"

    def _route(self, method: str, parts: list[str]) -> str:
        match (method, parts):
            case ("POST", ["components"]):
                return "create_component"
            case ("PUT", ["components", _]):
                return "update_component"
            case ("DELETE", ["components", _]):
                return "delete_component"
            case ("GET", ["components", "subtypes", _]):
                return "get_subtypes"
            case ("GET", ["components", "subtypes", _, _, "heuristics"]):
                return "get_subtype_heuristics"
            case ("POST", ["links", "suggest"]):
                return "suggest_link_types"
            case ("POST", ["links", "validate"]):
                return "validate_link"
            case ("GET", ["links", "types"]):
                return "get_link_types"
            case ("POST", ["links"]):
                return "create_link"
            case ("DELETE", ["links", _]):
                return "delete_link"
            case ("POST", ["architecture"]):
                return "create_architecture"
            case ("POST", ["architecture", "evaluate"]):
                return "evaluate_architecture"
            case ("POST", ["architecture", _, "components"]):
                return "attach_component"
            case ("POST", ["architecture", _, "links"]):
                return "attach_link"
            case ("POST", ["architecture", _, "validate"]):
                return "validate_architecture"
        return "unknown"

    async def handle(self, request: httpx.Request) -> httpx.Response:
        parts = request.url.path.removeprefix("/api").strip("/").split("/")
        body = json.loads(request.content) if request.content else None
        operation = self._route(request.method, parts)
        self.calls.append((operation, body))

        hook = self.hooks.get(operation)
        if hook is not None:
            await hook(request)

        if operation in self.failures:
            status, error_body = self.failures[operation]
            if status is None:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(status, json=error_body or {})

        return getattr(self, f"_{operation}")(parts, body)

    def _unknown(self, parts, body):
        return httpx.Response(404, json={"error": "Not found"})

    def _create_component(self, parts, body):
        component_id = self._id("c")
        self.components[component_id] = {
            "id": component_id,
            "type": body["type"],
            "name": body["name"],
            "properties": body.get("properties", {}),
            "heuristics": {"latency": 10, "throughput": 100},
        }
        return httpx.Response(201, json=self.components[component_id])

    def _update_component(self, parts, body):
        component = self.components.get(parts[1])
        if component is None:
            return httpx.Response(404, json={"error": "Component not found"})
        component.update(name=body["name"], properties=body.get("properties", {}))
        return httpx.Response(200, json=component)

    def _delete_component(self, parts, body):
        if self.components.pop(parts[1], None) is None:
            return httpx.Response(404, json={"error": "Component not found"})
        return httpx.Response(204)

    def _get_subtypes(self, parts, body):
        return httpx.Response(200, json={"subtypes": self.subtypes.get(parts[2], [])})

    def _get_subtype_heuristics(self, parts, body):
        heuristics = self.heuristics.get((parts[2], parts[3]))
        if heuristics is None:
            return httpx.Response(404, json={"error": "No heuristics"})
        return httpx.Response(200, json=heuristics)

    def _suggest_link_types(self, parts, body):
        if self.omit_suggestions:
            return httpx.Response(200, json={})
        source = self.components.get(body["sourceId"], {}).get("type")
        target = self.components.get(body["targetId"], {}).get("type")
        suggested = self.suggestions.get((source, target), self.default_suggestions)
        return httpx.Response(200, json={"validLinkTypes": suggested})

    def _validate_link(self, parts, body):
        if self.reject_links:
            return httpx.Response(200, json={"valid": False, "message": self.invalid_reason})
        return httpx.Response(200, json={"valid": True})

    def _get_link_types(self, parts, body):
        return httpx.Response(200, json=self.link_types)

    def _create_link(self, parts, body):
        link_id = self.next_link_ids.pop(0) if self.next_link_ids else self._id("l")
        self.links[link_id] = {**body, "id": link_id, "heuristics": {"latency": 2}}
        return httpx.Response(201, json=self.links[link_id])

    def _delete_link(self, parts, body):
        if self.links.pop(parts[1], None) is None:
            return httpx.Response(404, json={"error": "Link not found"})
        return httpx.Response(204)

    def _create_architecture(self, parts, body):
        architecture_id = self._id("a")
        self.architectures[architecture_id] = {
            "id": architecture_id, "name": body["name"], "components": [], "links": [],
        }
        return httpx.Response(201, json={"id": architecture_id, "name": body["name"]})

    def _attach_component(self, parts, body):
        self.architectures[parts[1]]["components"].append(body["componentId"])
        return httpx.Response(200, json={"id": parts[1]})

    def _attach_link(self, parts, body):
        self.architectures[parts[1]]["links"].append(body["linkId"])
        return httpx.Response(200, json={"id": parts[1]})

    def _evaluate_architecture(self, parts, body):
        return httpx.Response(200, json=self.evaluation)

    def _validate_architecture(self, parts, body):
        return httpx.Response(200, json={"valid": not self.violations, "violations": self.violations})


class GatedConfirmation(ScriptedConfirmation):
    """ScriptedConfirmation whose dialogs stay open until released.

    ``opened`` is set when a dialog is shown; ``release`` lets it answer.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.opened = asyncio.Event()
        self.release = asyncio.Event()
        self.open_dialogs = 0
        self.max_open_dialogs = 0

    async def _gate(self) -> None:
        self.open_dialogs += 1
        self.max_open_dialogs = max(self.max_open_dialogs, self.open_dialogs)
        self.opened.set()
        try:
            await self.release.wait()
        finally:
            self.open_dialogs -= 1

    async def present_subtype_choice(self, *args):
        await self._gate()
        return await super().present_subtype_choice(*args)

    async def present_name_entry(self, *args):
        await self._gate()
        return await super().present_name_entry(*args)

    async def present_link_type_choice(self, *args):
        await self._gate()
        return await super().present_link_type_choice(*args)


def seed_node(
    engine: WorkflowEngine,
    service: FakeGraphService,
    component_type: ComponentType,
    name: str,
    subtype: str | None = None,
    position: Position | None = None,
) -> ComponentNode:
    """Put a confirmed node on the canvas that also exists remotely."""
    remote_id = service.add_component(component_type, name, subtype)
    return engine.store.add_node(ComponentNode(
        local_id=node_local_id(remote_id),
        remote_component_id=remote_id,
        component_type=component_type,
        subtype=subtype,
        display_name=name,
        position=position or Position(),
    ))


@pytest.fixture
def service() -> FakeGraphService:
    return FakeGraphService()


@pytest.fixture
def sink() -> ListSink:
    return ListSink()


@pytest.fixture
def surface() -> ScriptedConfirmation:
    return ScriptedConfirmation()


@pytest.fixture
def engine(service, surface, sink) -> WorkflowEngine:
    return WorkflowEngine(service.client(), surface, sink)


@pytest.fixture
def seed(engine, service):
    """Factory fixture: ``seed(ComponentType.DATABASE, "Users DB")``."""

    def _seed(component_type, name, subtype=None, position=None):
        return seed_node(engine, service, component_type, name, subtype, position)

    return _seed


@pytest.fixture
def gated_engine(service, sink):
    """Factory fixture: an engine whose dialogs wait for ``surface.release``."""

    def _make(**answers):
        surface = GatedConfirmation(**answers)
        return WorkflowEngine(service.client(), surface, sink), surface

    return _make


@pytest.fixture
def seed_into(service):
    """Like ``seed`` but for an engine built inside the test."""

    def _seed(engine, component_type, name, subtype=None, position=None):
        return seed_node(engine, service, component_type, name, subtype, position)

    return _seed
