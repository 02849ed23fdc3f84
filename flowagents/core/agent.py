"""Agent - explicit declaration of actions and resources."""

from __future__ import annotations

from collections.abc import Iterable
import logging
from typing import TYPE_CHECKING

from flowagents.core.events.base import BaseEvent, event_type_of
from flowagents.core.registry import ActionRegistry
from flowagents.core.resources import ResourceDeclarations

if TYPE_CHECKING:
    from flowagents.core.registry import ActionFunc
    from flowagents.core.resources import Resource, ResourceDescriptor, ResourceType

logger = logging.getLogger(__name__)

EventTypes = str | type[BaseEvent] | Iterable[str | type[BaseEvent]]


class Agent:
    """
    A set of actions and the resources they use.

    Subclasses declare everything in `__init__`:

        class EchoAgent(Agent):
            def __init__(self):
                super().__init__()
                self.add_action(InputEvent, self.echo)

            @staticmethod
            def echo(event, ctx):
                ctx.send_event(OutputEvent(output=event.input))
    """

    def __init__(self) -> None:
        self._actions: list[tuple[str, ActionFunc, str | None]] = []
        self._resources = ResourceDeclarations()

    def add_action(
        self,
        listen_events: EventTypes,
        func: ActionFunc,
        name: str | None = None,
    ) -> Agent:
        """Bind `func` to one or more event types. Order of calls is dispatch order."""
        if isinstance(listen_events, (str, type)):
            listen_events = [listen_events]
        for event_type in listen_events:
            self._actions.append((event_type_of(event_type), func, name))
        return self

    def add_resource(
        self,
        name: str,
        resource_type: ResourceType,
        resource: ResourceDescriptor | Resource,
    ) -> Agent:
        """Declare a resource actions can resolve by name."""
        self._resources.declare(name, resource_type, resource)
        return self

    @property
    def actions(self) -> list[tuple[str, ActionFunc, str | None]]:
        return list(self._actions)

    @property
    def resources(self) -> ResourceDeclarations:
        return self._resources

    def build_registry(self, include_builtins: bool = True) -> ActionRegistry:
        """
        Build the action registry for this agent.

        Built-in chat/tool actions come first, then the agent's actions in
        declaration order.
        """
        registry = ActionRegistry()
        if include_builtins:
            from flowagents.chat.actions import register_builtin_actions

            register_builtin_actions(registry)

        for event_type, func, name in self._actions:
            registry.register(event_type, func, name=name)

        logger.debug(f"Built registry for {type(self).__name__}: {registry.get_stats()}")
        return registry

    def __repr__(self) -> str:
        return f"{type(self).__name__}(actions={len(self._actions)}, resources={len(self._resources)})"
