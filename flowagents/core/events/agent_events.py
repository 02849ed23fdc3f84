"""
Agent Events - the event kinds a run moves through.

Event Flow:
    InputEvent
        ↓ (agent action)
    ChatRequestEvent
        ↓ (built-in chat action)
    ToolRequestEvent ⇄ ToolResponseEvent   (only when the model calls tools)
        ↓
    ChatResponseEvent
        ↓ (agent action)
    OutputEvent   ← terminal, ends the run

Each event is immutable and carries all context needed for actions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from flowagents.chat.messages import ChatMessage, MessageRole, ToolCall

from .base import BaseEvent

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(frozen=True)
class InputEvent(BaseEvent):
    """
    Emitted by the environment for each item of the source stream.

    Attributes:
        input: The raw source item (text in the sentiment demo)
    """

    type_name = "input"

    input: Any


@dataclass(frozen=True)
class ChatRequestEvent(BaseEvent):
    """
    Asks the chat model bound to `model` to answer `messages`.

    Attributes:
        model: Name of a CHAT_MODEL_SETUP resource
        messages: Conversation in order
    """

    type_name = "chat.request"

    model: str
    messages: tuple[ChatMessage, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.messages, tuple):
            object.__setattr__(self, "messages", tuple(self.messages))


@dataclass(frozen=True)
class ChatResponseEvent(BaseEvent):
    """
    Final model answer for a chat request.

    Attributes:
        request_id: event_id of the ChatRequestEvent being answered
        response: Assistant message
    """

    type_name = "chat.response"

    request_id: UUID
    response: ChatMessage

    def __post_init__(self) -> None:
        if self.response.role is not MessageRole.ASSISTANT:
            raise ValueError(f"Chat response must be an assistant message, got {self.response.role}")


@dataclass(frozen=True)
class ToolRequestEvent(BaseEvent):
    """
    Tool calls the model asked for while answering a chat request.

    Attributes:
        model: Chat model setup that produced the calls
        request_id: event_id of the originating ChatRequestEvent
        tool_calls: Calls to execute, in order
    """

    type_name = "tool.request"

    model: str
    request_id: UUID
    tool_calls: tuple[ToolCall, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.tool_calls, tuple):
            object.__setattr__(self, "tool_calls", tuple(self.tool_calls))


@dataclass(frozen=True)
class ToolResponseEvent(BaseEvent):
    """
    Results of executing the calls of one ToolRequestEvent.

    Attributes:
        request_id: event_id of the ToolRequestEvent being answered
        responses: Tool output text by call id
    """

    type_name = "tool.response"

    request_id: UUID
    responses: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class OutputEvent(BaseEvent):
    """
    Terminal event: its payload is the result of the run.

    Attributes:
        output: Run result handed to the sink
    """

    type_name = "output"

    output: Any
