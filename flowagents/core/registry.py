"""
Action Registry - maps event types to the ordered actions that handle them.

Registration happens at startup; the dispatcher freezes the registry before
the first run, after which it is read-only and safe to share between
concurrent runs.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any

from flowagents.core.events.base import BaseEvent, event_type_of
from flowagents.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from flowagents.core.context import RunContext

logger = logging.getLogger(__name__)

ActionFunc = Callable[[BaseEvent, "RunContext"], Awaitable[None] | None]


@dataclass(frozen=True)
class Action:
    """
    A handler bound to one event type.

    Attributes:
        name: Human-readable name for logging
        event_type: Discriminant the action listens to
        func: Callable taking (event, ctx); may be sync or async
    """

    name: str
    event_type: str
    func: ActionFunc

    def __call__(self, event: BaseEvent, ctx: RunContext) -> Any:
        return self.func(event, ctx)


class ActionRegistry:
    """
    Ordered event type -> actions table.

    Usage:
        registry = ActionRegistry()
        registry.register(InputEvent, process_input)
        registry.register("chat.response", process_chat_response)
        registry.freeze()
    """

    def __init__(self) -> None:
        self._actions: dict[str, list[Action]] = defaultdict(list)
        self._frozen = False

    def register(
        self,
        event_type: str | type[BaseEvent],
        handler: ActionFunc | Action,
        name: str | None = None,
    ) -> Action:
        """
        Append a handler to the list for `event_type`.

        Registration order is dispatch order.

        Raises:
            ConfigurationError: If the registry is frozen
        """
        if self._frozen:
            raise ConfigurationError("Cannot register actions: registry is frozen")

        type_name = event_type_of(event_type)
        if isinstance(handler, Action):
            action = Action(name=name or handler.name, event_type=type_name, func=handler.func)
        else:
            if not callable(handler):
                raise ConfigurationError(f"Action handler for '{type_name}' is not callable")
            action_name = name or getattr(handler, "__name__", type(handler).__name__)
            action = Action(name=action_name, event_type=type_name, func=handler)

        self._actions[type_name].append(action)
        logger.info(f"Registered action {action.name} for event type '{type_name}'")
        return action

    def lookup(self, event_type: str | type[BaseEvent]) -> tuple[Action, ...]:
        """Actions for `event_type` in registration order (empty if none)."""
        return tuple(self._actions.get(event_type_of(event_type), ()))

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get_handler_count(self, event_type: str | type[BaseEvent]) -> int:
        return len(self._actions.get(event_type_of(event_type), ()))

    def get_stats(self) -> dict[str, Any]:
        """Registry statistics for monitoring."""
        return {
            "total_event_types": len(self._actions),
            "total_actions": sum(len(actions) for actions in self._actions.values()),
            "actions_by_type": {
                event_type: [action.name for action in actions]
                for event_type, actions in self._actions.items()
            },
        }
