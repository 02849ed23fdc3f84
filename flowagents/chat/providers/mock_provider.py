"""Scripted chat model connection for tests and offline runs."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from flowagents.chat.messages import ChatMessage, MessageRole
from flowagents.chat.providers.base import BaseChatModelConnection

if TYPE_CHECKING:
    from flowagents.chat.tools import ToolMetadata
    from flowagents.core.resources import GetResource


class ScriptedChatModelConnection(BaseChatModelConnection):
    """
    Connection that replays predefined replies instead of calling a model.

    Replies are consumed in order; strings become assistant messages and
    exceptions are raised. When the script runs out, `default_reply` is
    returned. Every request is recorded in `requests`.
    """

    def __init__(
        self,
        replies: Sequence[str | ChatMessage | Exception] | None = None,
        default_reply: str = "SENTIMENT: NEUTRAL\nSCORE: 0.5\nREASON: scripted reply",
        get_resource: GetResource | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(get_resource=get_resource, **kwargs)
        self.replies: list[str | ChatMessage | Exception] = list(replies or [])
        self.default_reply = default_reply
        self.requests: list[dict[str, Any]] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def queue_reply(self, reply: str | ChatMessage | Exception) -> None:
        """Append a reply to the script."""
        self.replies.append(reply)

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        tools: Sequence[ToolMetadata] | None = None,
        *,
        model: str,
        **options: Any,
    ) -> ChatMessage:
        self.requests.append(
            {
                "model": model,
                "messages": list(messages),
                "tools": list(tools or []),
                "options": options,
            }
        )

        reply = self.replies.pop(0) if self.replies else self.default_reply
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, ChatMessage):
            return reply
        return ChatMessage(role=MessageRole.ASSISTANT, content=reply)

    def get_provider_name(self) -> str:
        return "scripted"

    def reset(self) -> None:
        """Reset mock state."""
        self.replies.clear()
        self.requests.clear()
