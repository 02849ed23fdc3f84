"""
Agent Environment - binds agents to process-level resources and a source stream.

Usage:
    env = AgentEnvironment(config)
    env.add_resource(
        "ollamaChatModelConnection",
        ResourceType.CHAT_MODEL_CONNECTION,
        ResourceDescriptor.of("ollama_connection", base_url="http://localhost:11434"),
    )
    async for result in env.process(lines, SentimentAgent()):
        print(result.output)
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import AsyncIterable, AsyncIterator, Iterable
import logging
from typing import TYPE_CHECKING, Any

from flowagents.core.config import AgentsConfig, FloatConfig
from flowagents.core.dispatcher import Dispatcher, RunResult
from flowagents.core.events import BaseEvent, InputEvent
from flowagents.core.resources import ResourceDeclarations
from flowagents.toolkit.float_controller import FloatController

if TYPE_CHECKING:
    from flowagents.core.agent import Agent
    from flowagents.core.resources import Resource, ResourceDescriptor, ResourceType

logger = logging.getLogger(__name__)


async def _iterate(source: Iterable[Any] | AsyncIterable[Any]) -> AsyncIterator[Any]:
    if isinstance(source, AsyncIterable):
        async for item in source:
            yield item
    else:
        for item in source:
            yield item


class AgentEnvironment:
    """
    Process-level runtime configuration.

    Resources declared here are visible to every agent applied to this
    environment. Declarations must be complete before `apply`.
    """

    def __init__(
        self,
        config: AgentsConfig | None = None,
        float_config: FloatConfig | None = None,
    ) -> None:
        self.config = config or AgentsConfig()
        self._resources = ResourceDeclarations()
        self._dispatchers: list[Dispatcher] = []

        if float_config is not None:
            controller = FloatController.get_instance(enabled=float_config.enabled)
            controller.max_events = float_config.max_events

    def add_resource(
        self,
        name: str,
        resource_type: ResourceType,
        resource: ResourceDescriptor | Resource,
    ) -> AgentEnvironment:
        """Declare a resource shared by all agents of this environment."""
        self._resources.declare(name, resource_type, resource)
        logger.info(f"Environment resource declared: {name} ({resource_type.value})")
        return self

    def apply(self, agent: Agent) -> Dispatcher:
        """
        Build a dispatcher for `agent`.

        Raises:
            DuplicateResourceError: If the agent redeclares an environment resource
        """
        declarations = self._resources.merged(agent.resources)
        dispatcher = Dispatcher(agent.build_registry(), declarations, self.config)
        self._dispatchers.append(dispatcher)
        logger.info(f"Applied {agent!r}")
        return dispatcher

    async def process(
        self,
        source: Iterable[Any] | AsyncIterable[Any],
        agent: Agent | Dispatcher,
    ) -> AsyncIterator[RunResult]:
        """
        Run every source item through the agent.

        Items that are not events are wrapped in InputEvent. Up to
        `max_concurrent_runs` runs execute at once; results are yielded in
        source order, one per item.
        """
        dispatcher = agent if isinstance(agent, Dispatcher) else self.apply(agent)
        limit = self.config.max_concurrent_runs
        window: deque[asyncio.Task[RunResult]] = deque()

        try:
            async for item in _iterate(source):
                event = item if isinstance(item, BaseEvent) else InputEvent(input=item)
                window.append(asyncio.create_task(dispatcher.run_safe(event)))
                if len(window) >= limit:
                    yield await window.popleft()

            while window:
                yield await window.popleft()
        finally:
            for task in window:
                task.cancel()

    async def aclose(self) -> None:
        """Close shared resources of every dispatcher built here."""
        for dispatcher in self._dispatchers:
            await dispatcher.aclose()
        self._dispatchers.clear()
