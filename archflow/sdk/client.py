"""Async client for the remote graph service.

Pure I/O boundary: every method issues one request and returns a normalized
model. Whatever goes wrong on the wire (connection errors, timeouts, non-2xx
responses, malformed bodies) surfaces as a single exception type,
``GraphServiceError``, carrying the service's own message when it sent one.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from archflow.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, ServiceConfig
from archflow.errors import GraphServiceError
from archflow.models.architecture import Architecture, ArchitectureValidation, EvaluationReport
from archflow.models.component import ComponentType, SubtypeOption
from archflow.models.link import LinkType
from archflow.models.remote import LinkValidation, RemoteComponent, RemoteLink

logger = logging.getLogger(__name__)

# shown when the service does not explain a failure itself
GENERIC_MESSAGES = {
    "create_component": "Failed to add component",
    "update_component": "Failed to update component",
    "delete_component": "Failed to delete component",
    "get_subtypes": "Failed to load subtypes",
    "get_subtype_heuristics": "Failed to load subtype heuristics",
    "suggest_link_types": "Failed to get link type suggestions",
    "validate_link": "Failed to validate connection",
    "create_link": "Failed to create connection",
    "delete_link": "Failed to delete connection",
    "get_link_types": "Failed to load link types",
    "create_architecture": "Failed to create architecture",
    "attach_component": "Failed to attach component to architecture",
    "attach_link": "Failed to attach connection to architecture",
    "evaluate_architecture": "Failed to evaluate architecture",
    "validate_architecture": "Failed to validate architecture",
}


def _service_message(response: httpx.Response) -> str | None:
    """Pull the error text out of an error response body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def _coerce_link_types(items: Any) -> list[LinkType]:
    """Normalize a list of link types; unknown entries are dropped."""
    link_types: list[LinkType] = []
    for item in items or []:
        raw = item
        if isinstance(item, dict):
            raw = item.get("linkType") or item.get("type") or item.get("id") or item.get("name")
        try:
            link_type = LinkType(raw)
        except ValueError:
            logger.warning("ignoring unknown link type from service: %r", item)
            continue
        if link_type not in link_types:
            link_types.append(link_type)
    return link_types


class GraphServiceClient:
    """Typed operations against the graph service's JSON API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Base URL of the service API, e.g. ``http://localhost:8080/api``
            timeout: Bound on every request in seconds; expiry is a failed call
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def from_config(
        cls,
        config: ServiceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> GraphServiceClient:
        return cls(base_url=config.base_url, timeout=config.timeout, transport=transport)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> GraphServiceClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"GraphServiceClient(base_url={self.base_url!r}, timeout={self.timeout})"

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: dict | None = None,
        allow_missing: bool = False,
    ) -> Any:
        """Issue one request and return the decoded JSON body (None if empty)."""
        generic = GENERIC_MESSAGES[operation]
        try:
            response = await self._http.request(method, path, json=json)
            if allow_missing and response.status_code == 404:
                return None
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            message = _service_message(exc.response)
            logger.debug("%s failed with HTTP %s: %s", operation, exc.response.status_code, message)
            raise GraphServiceError(
                operation, generic, service_message=message,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            # includes timeouts
            logger.debug("%s failed to reach %s: %r", operation, self.base_url, exc)
            raise GraphServiceError(operation, generic) from exc

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise GraphServiceError(operation, generic) from exc

    def _parse(self, operation: str, model, data: Any):
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.debug("%s returned an unexpected payload: %s", operation, exc)
            raise GraphServiceError(operation, GENERIC_MESSAGES[operation]) from exc

    # -- components ------------------------------------------------------------

    async def create_component(
        self,
        component_type: ComponentType,
        name: str,
        properties: dict[str, Any] | None = None,
    ) -> RemoteComponent:
        data = await self._request("create_component", "POST", "/components", json={
            "type": ComponentType(component_type).value,
            "name": name,
            "properties": properties or {},
        })
        return self._parse("create_component", RemoteComponent, data)

    async def update_component(
        self,
        component_id: str,
        component_type: ComponentType,
        name: str,
        properties: dict[str, Any] | None = None,
    ) -> RemoteComponent:
        data = await self._request("update_component", "PUT", f"/components/{component_id}", json={
            "id": component_id,
            "type": ComponentType(component_type).value,
            "name": name,
            "properties": properties or {},
        })
        if data is None:
            return RemoteComponent(id=component_id, name=name, properties=properties or {})
        return self._parse("update_component", RemoteComponent, data)

    async def delete_component(self, component_id: str) -> None:
        await self._request("delete_component", "DELETE", f"/components/{component_id}")

    async def get_subtypes(self, component_type: ComponentType) -> list[SubtypeOption]:
        """Subtypes offered for a component type.

        Accepts ``{"subtypes": [...]}`` or a bare list, with items either
        identifiers or objects.
        """
        component_type = ComponentType(component_type)
        data = await self._request(
            "get_subtypes", "GET", f"/components/subtypes/{component_type.value}"
        )
        items = data.get("subtypes", []) if isinstance(data, dict) else data or []
        try:
            return [SubtypeOption.from_payload(component_type, item) for item in items]
        except (ValueError, ValidationError) as exc:
            raise GraphServiceError("get_subtypes", GENERIC_MESSAGES["get_subtypes"]) from exc

    async def get_subtype_heuristics(
        self,
        component_type: ComponentType,
        subtype_id: str,
    ) -> dict[str, Any] | None:
        """Heuristics for a type/subtype pair; None when the service has none."""
        data = await self._request(
            "get_subtype_heuristics",
            "GET",
            f"/components/subtypes/{ComponentType(component_type).value}/{subtype_id}/heuristics",
            allow_missing=True,
        )
        return data if isinstance(data, dict) else None

    # -- links -----------------------------------------------------------------

    async def suggest_link_types(self, source_id: str, target_id: str) -> list[LinkType] | None:
        """Link types the service considers valid between two components.

        Returns None when the response carries no suggestion list at all,
        which callers treat like a failed suggestion.
        """
        data = await self._request("suggest_link_types", "POST", "/links/suggest", json={
            "sourceId": source_id,
            "targetId": target_id,
        })
        if not isinstance(data, dict) or data.get("validLinkTypes") is None:
            return None
        return _coerce_link_types(data["validLinkTypes"])

    async def validate_link(
        self,
        source_id: str,
        target_id: str,
        link_type: LinkType,
    ) -> LinkValidation:
        data = await self._request("validate_link", "POST", "/links/validate", json={
            "sourceId": source_id,
            "targetId": target_id,
            "linkType": LinkType(link_type).value,
        })
        return self._parse("validate_link", LinkValidation, data)

    async def create_link(self, source_id: str, target_id: str, link_type: LinkType) -> RemoteLink:
        data = await self._request("create_link", "POST", "/links", json={
            "sourceId": source_id,
            "targetId": target_id,
            "linkType": LinkType(link_type).value,
        })
        return self._parse("create_link", RemoteLink, data)

    async def delete_link(self, link_id: str) -> None:
        await self._request("delete_link", "DELETE", f"/links/{link_id}")

    async def get_link_types(self) -> list[LinkType]:
        data = await self._request("get_link_types", "GET", "/links/types")
        if isinstance(data, dict):
            data = data.get("linkTypes") or data.get("types") or []
        return _coerce_link_types(data)

    # -- architecture ----------------------------------------------------------

    async def create_architecture(self, name: str) -> Architecture:
        data = await self._request("create_architecture", "POST", "/architecture", json={"name": name})
        if not isinstance(data, dict) or not data.get("id"):
            raise GraphServiceError("create_architecture", GENERIC_MESSAGES["create_architecture"])
        return Architecture(remote_architecture_id=str(data["id"]), name=data.get("name") or name)

    async def attach_component(self, architecture_id: str, component_id: str) -> None:
        await self._request(
            "attach_component", "POST", f"/architecture/{architecture_id}/components",
            json={"componentId": component_id},
        )

    async def attach_link(self, architecture_id: str, link_id: str) -> None:
        await self._request(
            "attach_link", "POST", f"/architecture/{architecture_id}/links",
            json={"linkId": link_id},
        )

    async def evaluate_architecture(self, architecture_id: str) -> EvaluationReport:
        data = await self._request(
            "evaluate_architecture", "POST", "/architecture/evaluate",
            json={"architectureId": architecture_id},
        )
        return self._parse("evaluate_architecture", EvaluationReport, data or {})

    async def validate_architecture(self, architecture_id: str) -> ArchitectureValidation:
        data = await self._request(
            "validate_architecture", "POST", f"/architecture/{architecture_id}/validate"
        )
        return self._parse("validate_architecture", ArchitectureValidation, data)
