"""Core module for flowagents - events, registry, run context, dispatcher."""

from flowagents.core.config import AgentsConfig, FloatConfig
from flowagents.core.exceptions import (
    AgentRunError,
    ChatModelError,
    ConfigurationError,
    DuplicateResourceError,
    FlowAgentsError,
    HandlerError,
    IncompleteRunError,
    MaxStepsExceededError,
    RunTimeoutError,
    ToolError,
    UnknownResourceError,
)
from flowagents.core.events import (
    BaseEvent,
    ChatRequestEvent,
    ChatResponseEvent,
    InputEvent,
    OutputEvent,
    ToolRequestEvent,
    ToolResponseEvent,
)
from flowagents.core.resources import (
    Resource,
    ResourceCache,
    ResourceDeclarations,
    ResourceDescriptor,
    ResourceType,
)
from flowagents.core.registry import Action, ActionRegistry
from flowagents.core.context import RunContext
from flowagents.core.dispatcher import Dispatcher, RunResult
from flowagents.core.agent import Agent
from flowagents.core.environment import AgentEnvironment

__all__ = [
    "Action",
    "ActionRegistry",
    "Agent",
    "AgentEnvironment",
    "AgentRunError",
    "AgentsConfig",
    "BaseEvent",
    "ChatModelError",
    "ChatRequestEvent",
    "ChatResponseEvent",
    "ConfigurationError",
    "Dispatcher",
    "DuplicateResourceError",
    "FloatConfig",
    "FlowAgentsError",
    "HandlerError",
    "IncompleteRunError",
    "InputEvent",
    "MaxStepsExceededError",
    "OutputEvent",
    "Resource",
    "ResourceCache",
    "ResourceDeclarations",
    "ResourceDescriptor",
    "ResourceType",
    "RunContext",
    "RunResult",
    "RunTimeoutError",
    "ToolError",
    "ToolRequestEvent",
    "ToolResponseEvent",
    "UnknownResourceError",
]
