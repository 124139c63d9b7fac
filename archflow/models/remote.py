"""Normalized shapes of the remote graph service's responses."""

from typing import Any

from pydantic import AliasChoices, BaseModel, Field


class RemoteComponent(BaseModel):
    """A component as returned by create/update."""

    id: str
    name: str = ""
    heuristics: dict[str, Any] | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class RemoteLink(BaseModel):
    """A link as returned by create."""

    id: str
    heuristics: dict[str, Any] | None = None


class LinkValidation(BaseModel):
    """Verdict on a proposed link."""

    valid: bool
    message: str | None = Field(
        default=None, validation_alias=AliasChoices("message", "reason")
    )
