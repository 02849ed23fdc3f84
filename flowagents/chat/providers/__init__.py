"""Chat model providers for flowagents."""

from flowagents.chat.providers.base import BaseChatModelConnection, BaseChatModelSetup
from flowagents.chat.providers.mock_provider import ScriptedChatModelConnection
from flowagents.chat.providers.ollama import OllamaChatModelConnection, OllamaChatModelSetup

__all__ = [
    "BaseChatModelConnection",
    "BaseChatModelSetup",
    "OllamaChatModelConnection",
    "OllamaChatModelSetup",
    "ScriptedChatModelConnection",
]
