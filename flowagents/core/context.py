"""Run Context - per-run emission queue, resource access and short-term state."""

from __future__ import annotations

from collections import deque
from dataclasses import replace
import logging
from typing import TYPE_CHECKING, Any

from flowagents.core.events.base import BaseEvent

if TYPE_CHECKING:
    from uuid import UUID

    from flowagents.core.config import AgentsConfig
    from flowagents.core.resources import Resource, ResourceCache, ResourceType

logger = logging.getLogger(__name__)


class RunContext:
    """
    Object actions use to emit events and reach resources during one run.

    A context is owned by exactly one run and never shared.

    Attributes:
        run_id: Identity of the run
        state: Run-scoped key/value store (short-term memory)
        config: Runtime configuration
    """

    def __init__(
        self,
        run_id: UUID,
        resources: ResourceCache,
        config: AgentsConfig,
    ) -> None:
        self.run_id = run_id
        self.config = config
        self.state: dict[str, Any] = {}
        self._resources = resources
        self._queue: deque[BaseEvent] = deque()
        self._emitted = 0

    def send_event(self, event: BaseEvent) -> BaseEvent:
        """
        Append an event to this run's queue.

        Events without a correlation id are stamped with the run id.

        Returns:
            The event as queued
        """
        if not isinstance(event, BaseEvent):
            raise TypeError(f"Expected BaseEvent, got {type(event).__name__}")
        if event.correlation_id is None:
            event = replace(event, correlation_id=self.run_id)

        self._queue.append(event)
        self._emitted += 1
        logger.debug(f"Run {self.run_id}: queued {event.event_type} ({event.event_id})")
        return event

    emit = send_event

    def get_resource(self, name: str, resource_type: ResourceType | None = None) -> Resource:
        """
        Resolve a declared resource, constructing it on first use.

        Raises:
            UnknownResourceError: If the name was never declared
        """
        return self._resources.get(name, resource_type)

    resolve = get_resource

    def next_event(self) -> BaseEvent:
        return self._queue.popleft()

    def has_pending(self) -> bool:
        return bool(self._queue)

    @property
    def pending(self) -> tuple[BaseEvent, ...]:
        return tuple(self._queue)

    @property
    def emitted_count(self) -> int:
        return self._emitted

    def __repr__(self) -> str:
        return f"RunContext(run_id={self.run_id}, pending={len(self._queue)})"
