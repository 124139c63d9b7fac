"""Tests for the graph service client's request shapes and error mapping."""

import asyncio
import json

import httpx
import pytest

from archflow.errors import GraphServiceError
from archflow.models.component import ComponentType
from archflow.models.link import LinkType
from archflow.sdk.client import GraphServiceClient

BASE_URL = "http://graph.test/api"


def client_for(handler) -> GraphServiceClient:
    return GraphServiceClient(BASE_URL, timeout=1.0, transport=httpx.MockTransport(handler))


class TestRequests:
    """Test what the client sends."""

    def test_create_component_payload(self):
        """create_component posts type, name and properties."""
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": "c1", "name": "Users DB", "heuristics": {"latency": 5}})

        remote = asyncio.run(client_for(handler).create_component(
            ComponentType.DATABASE, "Users DB", {"subtype": "SQL"}
        ))

        assert seen["method"] == "POST"
        assert seen["url"] == f"{BASE_URL}/components"
        assert seen["body"] == {"type": "DATABASE", "name": "Users DB", "properties": {"subtype": "SQL"}}
        assert remote.id == "c1"
        assert remote.heuristics == {"latency": 5}

    def test_link_payloads_use_camel_case(self):
        bodies = []

        def handler(request):
            bodies.append((request.url.path, json.loads(request.content)))
            if request.url.path.endswith("/validate"):
                return httpx.Response(200, json={"valid": True})
            return httpx.Response(201, json={"id": "l1"})

        async def run():
            client = client_for(handler)
            await client.validate_link("c1", "c2", LinkType.CACHE_LOOKUP)
            return await client.create_link("c1", "c2", LinkType.CACHE_LOOKUP)

        link = asyncio.run(run())
        expected = {"sourceId": "c1", "targetId": "c2", "linkType": "CACHE_LOOKUP"}
        assert bodies == [("/api/links/validate", expected), ("/api/links", expected)]
        assert link.id == "l1"

    def test_attach_paths(self):
        seen = []

        def handler(request):
            seen.append((request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={})

        async def run():
            client = client_for(handler)
            await client.attach_component("a1", "c1")
            await client.attach_link("a1", "l1")

        asyncio.run(run())
        assert seen == [
            ("/api/architecture/a1/components", {"componentId": "c1"}),
            ("/api/architecture/a1/links", {"linkId": "l1"}),
        ]

    def test_delete_with_empty_body(self):
        def handler(request):
            assert request.method == "DELETE"
            assert request.url.path == "/api/links/l9"
            return httpx.Response(204)

        assert asyncio.run(client_for(handler).delete_link("l9")) is None


class TestResponses:
    """Test normalization of service responses."""

    def test_subtypes_wrapped_or_bare(self):
        def wrapped(request):
            return httpx.Response(200, json={"subtypes": ["SQL", {"id": "NOSQL", "heuristics": {"a": 1}}]})

        def bare(request):
            return httpx.Response(200, json=["IN_MEMORY"])

        options = asyncio.run(client_for(wrapped).get_subtypes(ComponentType.DATABASE))
        assert [o.id for o in options] == ["SQL", "NOSQL"]
        assert options[1].heuristics == {"a": 1}

        options = asyncio.run(client_for(bare).get_subtypes(ComponentType.CACHE))
        assert [o.id for o in options] == ["IN_MEMORY"]

    def test_malformed_subtype_item(self):
        def handler(request):
            return httpx.Response(200, json={"subtypes": [{"description": "nameless"}]})

        with pytest.raises(GraphServiceError) as exc_info:
            asyncio.run(client_for(handler).get_subtypes(ComponentType.QUEUE))
        assert exc_info.value.user_message == "Failed to load subtypes"

    def test_suggestions_drop_unknown_types(self):
        def handler(request):
            return httpx.Response(200, json={"validLinkTypes": ["API_CALL", "TELEPATHY", "API_CALL", "STREAM"]})

        suggested = asyncio.run(client_for(handler).suggest_link_types("c1", "c2"))
        assert suggested == [LinkType.API_CALL, LinkType.STREAM]

    def test_missing_suggestion_key(self):
        """A response without validLinkTypes is reported as None."""
        def handler(request):
            return httpx.Response(200, json={"message": "no opinion"})

        assert asyncio.run(client_for(handler).suggest_link_types("c1", "c2")) is None

    def test_empty_suggestion_list(self):
        def handler(request):
            return httpx.Response(200, json={"validLinkTypes": []})

        assert asyncio.run(client_for(handler).suggest_link_types("c1", "c2")) == []

    def test_link_types_list_or_object(self):
        def as_object(request):
            return httpx.Response(200, json={"linkTypes": [{"type": "STREAM"}, "REPLICATION"]})

        assert asyncio.run(client_for(as_object).get_link_types()) == [LinkType.STREAM, LinkType.REPLICATION]

    def test_heuristics_not_found(self):
        def handler(request):
            return httpx.Response(404, json={"error": "unknown subtype"})

        assert asyncio.run(client_for(handler).get_subtype_heuristics(ComponentType.CACHE, "LOCAL")) is None

    def test_architecture_requires_id(self):
        def handler(request):
            return httpx.Response(200, json={"name": "No id"})

        with pytest.raises(GraphServiceError) as exc_info:
            asyncio.run(client_for(handler).create_architecture("No id"))
        assert exc_info.value.operation == "create_architecture"

    def test_architecture_id_coerced_to_string(self):
        def handler(request):
            return httpx.Response(201, json={"id": 17})

        architecture = asyncio.run(client_for(handler).create_architecture("Shop"))
        assert architecture.remote_architecture_id == "17"
        assert architecture.name == "Shop"

    def test_validate_architecture(self):
        def handler(request):
            assert request.url.path == "/api/architecture/a1/validate"
            return httpx.Response(200, json={"valid": False, "violations": ["CLIENT cannot query DATABASE"]})

        validation = asyncio.run(client_for(handler).validate_architecture("a1"))
        assert validation.valid is False
        assert validation.violations == ["CLIENT cannot query DATABASE"]


class TestErrors:
    """Test that every failure surfaces as GraphServiceError."""

    def test_service_message_is_kept(self):
        def handler(request):
            return httpx.Response(400, json={"error": "Name already taken"})

        with pytest.raises(GraphServiceError) as exc_info:
            asyncio.run(client_for(handler).create_component(ComponentType.CLIENT, "Web", {}))
        error = exc_info.value
        assert error.status_code == 400
        assert error.user_message == "Name already taken"
        assert error.generic_message == "Failed to add component"

    def test_generic_message_without_body(self):
        def handler(request):
            return httpx.Response(500, text="Internal Server Error")

        with pytest.raises(GraphServiceError) as exc_info:
            asyncio.run(client_for(handler).create_link("c1", "c2", LinkType.API_CALL))
        assert exc_info.value.user_message == "Failed to create connection"
        assert exc_info.value.service_message is None

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(GraphServiceError) as exc_info:
            asyncio.run(client_for(handler).delete_component("c1"))
        assert exc_info.value.user_message == "Failed to delete component"
        assert exc_info.value.status_code is None

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(GraphServiceError) as exc_info:
            asyncio.run(client_for(handler).suggest_link_types("c1", "c2"))
        assert exc_info.value.user_message == "Failed to get link type suggestions"

    def test_unexpected_payload(self):
        def handler(request):
            return httpx.Response(201, json={"name": "missing id"})

        with pytest.raises(GraphServiceError):
            asyncio.run(client_for(handler).create_link("c1", "c2", LinkType.API_CALL))

    def test_non_json_success_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>")

        with pytest.raises(GraphServiceError):
            asyncio.run(client_for(handler).validate_link("c1", "c2", LinkType.API_CALL))
