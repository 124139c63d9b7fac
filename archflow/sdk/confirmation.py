"""Confirmation surface: the dialogs a workflow suspends on.

Every method resolves to the operator's choice, or ``None`` when the dialog
was cancelled.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Protocol

from archflow.models.component import ComponentType, SubtypeOption
from archflow.models.link import LinkType


class ConfirmationSurface(Protocol):
    """Protocol for presenting choices to the operator."""

    async def present_subtype_choice(
        self,
        component_type: ComponentType,
        options: list[SubtypeOption],
    ) -> str | None:
        """Ask for a subtype; resolves to the chosen subtype id."""
        ...

    async def present_name_entry(
        self,
        component_type: ComponentType,
        subtype: str | None,
        default_name: str,
    ) -> str | None:
        """Ask for a display name, seeded with ``default_name``."""
        ...

    async def present_link_type_choice(
        self,
        options: list[LinkType],
        source_label: str,
        target_label: str,
    ) -> LinkType | None:
        """Ask which link type to create; an answer outside ``options`` counts as cancelled."""
        ...


# answer meaning "accept what the dialog proposes"
ACCEPT_DEFAULT = object()


@dataclass
class Presentation:
    """A record of one dialog shown through a ScriptedConfirmation."""

    dialog: str  # "subtype", "name" or "link_type"
    args: dict[str, Any] = field(default_factory=dict)


class ScriptedConfirmation:
    """Answers dialogs from queued responses and records what was shown.

    Used for headless automation and tests. Each dialog kind has its own
    queue; an answer of ``None`` cancels, ``ACCEPT_DEFAULT`` takes the first
    option (or the default name). When a queue is empty the dialog accepts
    its default if ``accept_defaults`` is set, else it cancels.
    """

    def __init__(
        self,
        subtypes: list[Any] | None = None,
        names: list[Any] | None = None,
        link_types: list[Any] | None = None,
        accept_defaults: bool = False,
    ) -> None:
        self._subtypes: deque = deque(subtypes or [])
        self._names: deque = deque(names or [])
        self._link_types: deque = deque(link_types or [])
        self.accept_defaults = accept_defaults
        self.presentations: list[Presentation] = []

    def queue_subtype(self, answer: Any) -> None:
        self._subtypes.append(answer)

    def queue_name(self, answer: Any) -> None:
        self._names.append(answer)

    def queue_link_type(self, answer: Any) -> None:
        self._link_types.append(answer)

    def shown(self, dialog: str) -> list[Presentation]:
        """Presentations of one dialog kind, in order."""
        return [p for p in self.presentations if p.dialog == dialog]

    def _next(self, queue: deque) -> Any:
        if queue:
            return queue.popleft()
        return ACCEPT_DEFAULT if self.accept_defaults else None

    async def present_subtype_choice(
        self,
        component_type: ComponentType,
        options: list[SubtypeOption],
    ) -> str | None:
        self.presentations.append(Presentation("subtype", {
            "component_type": component_type,
            "options": list(options),
        }))
        answer = self._next(self._subtypes)
        if answer is ACCEPT_DEFAULT:
            return options[0].id if options else None
        if isinstance(answer, SubtypeOption):
            return answer.id
        return answer

    async def present_name_entry(
        self,
        component_type: ComponentType,
        subtype: str | None,
        default_name: str,
    ) -> str | None:
        self.presentations.append(Presentation("name", {
            "component_type": component_type,
            "subtype": subtype,
            "default_name": default_name,
        }))
        answer = self._next(self._names)
        if answer is ACCEPT_DEFAULT:
            return default_name
        return answer

    async def present_link_type_choice(
        self,
        options: list[LinkType],
        source_label: str,
        target_label: str,
    ) -> LinkType | None:
        self.presentations.append(Presentation("link_type", {
            "options": list(options),
            "source_label": source_label,
            "target_label": target_label,
        }))
        answer = self._next(self._link_types)
        if answer is ACCEPT_DEFAULT:
            return options[0] if options else None
        return answer
