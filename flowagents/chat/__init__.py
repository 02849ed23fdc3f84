"""Chat layer - messages, prompts, tools, and chat model providers."""

from flowagents.chat.messages import ChatMessage, MessageRole, ToolCall
from flowagents.chat.prompt import Prompt
from flowagents.chat.tools import FunctionTool, ToolMetadata, ToolParameter

__all__ = [
    "ChatMessage",
    "FunctionTool",
    "MessageRole",
    "Prompt",
    "ToolCall",
    "ToolMetadata",
    "ToolParameter",
]
