"""
flowagents - event-driven agent runtime with local LLM chat models.

Main Features:
- Typed immutable events routed to ordered actions
- Per-run FIFO dispatch with step and deadline guards
- Named, lazily resolved resources (chat model connections, setups, prompts, tools)
- Ollama chat model provider with tool calling
- Sentiment analysis demo agent

Quick Start:
    >>> from flowagents import AgentEnvironment
    >>> from flowagents.demo.sentiment import SentimentAgent
    >>> env = AgentEnvironment()
    >>> dispatcher = env.apply(SentimentAgent())
    >>> result = await dispatcher.run(InputEvent(input="I love this!"))

Architecture:
    Source → InputEvent → Dispatcher → actions → ChatRequestEvent → chat model → ... → OutputEvent → Sink
"""

__version__ = "0.1.0"

from flowagents.chat import ChatMessage, FunctionTool, MessageRole, Prompt, ToolParameter
from flowagents.core import (
    Agent,
    AgentEnvironment,
    AgentRunError,
    AgentsConfig,
    ActionRegistry,
    ChatRequestEvent,
    ChatResponseEvent,
    Dispatcher,
    FlowAgentsError,
    HandlerError,
    IncompleteRunError,
    InputEvent,
    OutputEvent,
    ResourceDescriptor,
    ResourceType,
    RunContext,
    UnknownResourceError,
)

__all__ = [
    "ActionRegistry",
    "Agent",
    "AgentEnvironment",
    "AgentRunError",
    "AgentsConfig",
    "ChatMessage",
    "ChatRequestEvent",
    "ChatResponseEvent",
    "Dispatcher",
    "FlowAgentsError",
    "FunctionTool",
    "HandlerError",
    "IncompleteRunError",
    "InputEvent",
    "MessageRole",
    "OutputEvent",
    "Prompt",
    "ResourceDescriptor",
    "ResourceType",
    "RunContext",
    "ToolParameter",
    "UnknownResourceError",
    "__version__",
]
