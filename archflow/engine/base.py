"""Shared machinery for the workflow state machines.

A workflow is an enum state plus the pending record it is building. ``run``
repeatedly calls ``dispatch``, which executes the handler for the current
state and returns the next state. Every path ends by returning to ``IDLE``
through ``finish``, which records the result and emits exactly one
notification.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, TypeVar

from archflow.adapters.sinks import Notifier
from archflow.errors import GraphServiceError, StaleReferenceError
from archflow.models.notification import NotificationLevel
from archflow.models.workflow import WorkflowOutcome, WorkflowResult
from archflow.sdk.client import GraphServiceClient
from archflow.sdk.confirmation import ConfirmationSurface
from archflow.sdk.session import SessionContext
from archflow.store.graph_store import GraphStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class WorkflowContext:
    """Collaborators every workflow step may use."""

    store: GraphStore
    session: SessionContext
    surface: ConfirmationSurface
    notifier: Notifier
    dialog_lock: asyncio.Lock  # one link type dialog on screen at a time

    @property
    def client(self) -> GraphServiceClient:
        return self.session.client


async def attach_to_architecture(
    ctx: WorkflowContext,
    kind: str,
    remote_id: str,
) -> str | None:
    """Attach a freshly created component or link to the session's architecture.

    Never raises: a failure is returned as a note for the caller's
    notification. The entity already exists remotely, so nothing is undone.
    """
    architecture_id = ctx.session.architecture_id
    if architecture_id is None:
        logger.warning("no active architecture, %s %s not attached", kind, remote_id)
        return "not attached: no active architecture"
    try:
        if kind == "component":
            await ctx.client.attach_component(architecture_id, remote_id)
        else:
            await ctx.client.attach_link(architecture_id, remote_id)
    except GraphServiceError as exc:
        logger.warning("attaching %s %s failed: %s", kind, remote_id, exc.user_message)
        return f"attaching to the architecture failed: {exc.user_message}"
    return None


class Workflow:
    """Base class: subclasses define ``State``, ``operation`` and the handlers."""

    State: type[Enum]
    operation: str = "workflow"
    cancel_message: str = "Operation cancelled"
    failure_message: str = "Operation failed"

    def __init__(self, ctx: WorkflowContext) -> None:
        self.ctx = ctx
        self.state = self.State.IDLE
        self.states: list[str] = [self.state.value]
        self.result: WorkflowResult | None = None

    def handlers(self) -> dict[Enum, Callable[[], Awaitable[Enum]]]:
        raise NotImplementedError

    def rollback(self) -> None:
        """Undo any optimistic state; must be safe to call more than once."""

    def on_stale(self, exc: StaleReferenceError) -> Enum:
        self.rollback()
        return self.finish(WorkflowOutcome.stale, NotificationLevel.error, str(exc))

    async def dispatch(self) -> Enum:
        """Run the handler for the current state and return the next state."""
        handler = self.handlers()[self.state]
        try:
            return await handler()
        except StaleReferenceError as exc:
            logger.debug("%s aborted in %s: %s", self.operation, self.state.value, exc)
            return self.on_stale(exc)

    def transition(self, state: Enum) -> None:
        logger.debug("%s: %s -> %s", self.operation, self.state.value, state.value)
        self.state = state
        self.states.append(state.value)

    async def run(self) -> WorkflowResult:
        try:
            while True:
                next_state = await self.dispatch()
                self.transition(next_state)
                if next_state is self.State.IDLE:
                    break
        except asyncio.CancelledError:
            self._abandon(WorkflowOutcome.cancelled, NotificationLevel.info, self.cancel_message)
            raise
        except Exception:
            logger.exception("%s failed in %s", self.operation, self.state.value)
            self._abandon(WorkflowOutcome.failed, NotificationLevel.error, self.failure_message)
            raise
        assert self.result is not None
        self.result.states = list(self.states)
        return self.result

    def _abandon(self, outcome: WorkflowOutcome, level: NotificationLevel, message: str) -> None:
        """Roll back after an exception escaped a step; a result already recorded stands."""
        self.rollback()
        if self.result is None:
            self.finish(outcome, level, message)
        if self.state is not self.State.IDLE:
            self.transition(self.State.IDLE)
        self.result.states = list(self.states)

    async def create_remote(
        self,
        request: Awaitable[T],
        discard: Callable[[T], Awaitable[None]],
    ) -> T:
        """Await a remote create that is not abandoned half way.

        If the workflow is cancelled meanwhile, the request still completes and
        whatever it created is handed to ``discard`` before the cancellation
        propagates.
        """
        task = asyncio.ensure_future(request)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            try:
                created = await task
            except (GraphServiceError, asyncio.CancelledError):
                created = None
            if created is not None:
                await discard(created)
            raise

    async def finish_committed(self, kind: str, remote_id: str, message: str, **extra) -> Enum:
        """Attach a committed entity to the architecture and finish as succeeded.

        The store already holds the entity, so a cancellation from here on still
        reports success.
        """
        try:
            note = await attach_to_architecture(self.ctx, kind, remote_id)
        except asyncio.CancelledError:
            self.finish(
                WorkflowOutcome.succeeded,
                NotificationLevel.warning,
                f"{message}, but attaching to the architecture was cancelled",
                **extra,
            )
            raise
        if note:
            return self.finish(WorkflowOutcome.succeeded, NotificationLevel.warning, f"{message}, but {note}", **extra)
        return self.finish(WorkflowOutcome.succeeded, NotificationLevel.success, message, **extra)

    def finish(
        self,
        outcome: WorkflowOutcome,
        level: NotificationLevel,
        message: str,
        **extra,
    ) -> Enum:
        """Record the terminal result, notify once, and return IDLE."""
        self.result = WorkflowResult(
            operation=self.operation,
            outcome=outcome,
            message=message,
            states=self.states,
            **extra,
        )
        self.ctx.notifier.notify(level, self.operation, message, outcome=outcome.value)
        return self.State.IDLE

    def cancel(self) -> Enum:
        self.rollback()
        return self.finish(WorkflowOutcome.cancelled, NotificationLevel.info, self.cancel_message)
