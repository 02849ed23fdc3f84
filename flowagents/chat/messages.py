"""Chat message models shared by events, prompts and chat model connections."""

from __future__ import annotations

from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """Conversation role of a chat message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolCall(BaseModel):
    """A tool invocation requested by the model."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()), description="Call identifier")
    name: str = Field(..., description="Name of the declared tool")
    arguments: dict[str, Any] = Field(default_factory=dict, description="Arguments by name")


class ChatMessage(BaseModel):
    """One message of a conversation."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole = Field(..., description="Who produced the message")
    content: str = Field("", description="Message text")
    tool_calls: tuple[ToolCall, ...] = Field(default=(), description="Tools the model asked for")
    tool_call_id: str | None = Field(None, description="Call this TOOL message answers")
    extra_args: dict[str, Any] = Field(default_factory=dict, description="Provider extras")

    def to_ollama(self) -> dict[str, Any]:
        """Render the message in Ollama /api/chat format."""
        payload: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.tool_calls:
            payload["tool_calls"] = [
                {"function": {"name": call.name, "arguments": call.arguments}}
                for call in self.tool_calls
            ]
        if self.role is MessageRole.TOOL and "tool_name" in self.extra_args:
            payload["tool_name"] = self.extra_args["tool_name"]
        return payload

    @classmethod
    def from_ollama(cls, payload: dict[str, Any]) -> ChatMessage:
        """Build a message from an Ollama response `message` object."""
        tool_calls = []
        for raw in payload.get("tool_calls") or []:
            function = raw.get("function", {})
            arguments = function.get("arguments") or {}
            if not isinstance(arguments, dict):
                arguments = {}
            call_id = raw.get("id") or str(uuid4())
            tool_calls.append(ToolCall(id=call_id, name=function.get("name", ""), arguments=arguments))

        extra_args = {}
        if payload.get("thinking"):
            extra_args["reasoning"] = payload["thinking"]

        return cls(
            role=MessageRole(payload.get("role", MessageRole.ASSISTANT.value)),
            content=payload.get("content") or "",
            tool_calls=tuple(tool_calls),
            extra_args=extra_args,
        )

    @classmethod
    def user(cls, content: str) -> ChatMessage:
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def system(cls, content: str) -> ChatMessage:
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def assistant(cls, content: str) -> ChatMessage:
        return cls(role=MessageRole.ASSISTANT, content=content)
