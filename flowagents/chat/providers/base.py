"""Abstract base classes for chat model connections and setups."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
import logging
from typing import Any

from flowagents.chat.messages import ChatMessage
from flowagents.chat.prompt import Prompt
from flowagents.chat.tools import FunctionTool, ToolMetadata
from flowagents.core.exceptions import ConfigurationError, UnknownResourceError
from flowagents.core.resources import GetResource, Resource, ResourceType

logger = logging.getLogger(__name__)


class BaseChatModelConnection(Resource, ABC):
    """
    Transport to a chat model service.

    A connection knows where the service lives and how to talk to it; it does
    not know which model, prompt or tools a given agent uses.
    """

    resource_type = ResourceType.CHAT_MODEL_CONNECTION

    @abstractmethod
    async def chat(
        self,
        messages: Sequence[ChatMessage],
        tools: Sequence[ToolMetadata] | None = None,
        *,
        model: str,
        **options: Any,
    ) -> ChatMessage:
        """
        Send a conversation and return the assistant reply.

        Args:
            messages: Conversation in order
            tools: Tools the model may call
            model: Model name on the service
            **options: Sampling options (temperature, etc.)

        Returns:
            Assistant message, possibly carrying tool calls

        Raises:
            ChatModelError: If the service fails or returns an unusable payload
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get the provider name."""


class BaseChatModelSetup(Resource, ABC):
    """
    Binds a connection to a model, an optional prompt and a set of tools.

    ChatRequestEvent.model names a setup resource.
    """

    resource_type = ResourceType.CHAT_MODEL_SETUP

    def __init__(
        self,
        connection: str,
        model: str,
        prompt: str | None = None,
        tools: list[str] | None = None,
        get_resource: GetResource | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(get_resource=get_resource, **kwargs)
        self.connection = connection
        self.model = model
        self.prompt = prompt
        self.tools = list(tools or [])

    @abstractmethod
    def model_options(self) -> dict[str, Any]:
        """Provider specific options sent with each request."""

    def get_connection(self) -> BaseChatModelConnection:
        connection = self.get_resource(self.connection, ResourceType.CHAT_MODEL_CONNECTION)
        if not isinstance(connection, BaseChatModelConnection):
            raise ConfigurationError(
                f"Resource '{self.connection}' is not a chat model connection"
            )
        return connection

    def prompt_messages(self, **variables: Any) -> list[ChatMessage]:
        """
        Leading messages from the configured prompt.

        `prompt` is the name of a PROMPT resource; a value that names no
        declared prompt is used as literal system text.
        """
        if not self.prompt:
            return []
        try:
            prompt = self.get_resource(self.prompt, ResourceType.PROMPT)
        except UnknownResourceError:
            prompt = Prompt.from_text(self.prompt)
        return prompt.format_messages(**variables)

    def tool_metadata(self) -> list[ToolMetadata]:
        metadata = []
        for name in self.tools:
            tool = self.get_resource(name, ResourceType.TOOL)
            if not isinstance(tool, FunctionTool):
                raise ConfigurationError(f"Resource '{name}' is not a tool")
            metadata.append(tool.metadata)
        return metadata

    async def chat(self, messages: Sequence[ChatMessage], **prompt_variables: Any) -> ChatMessage:
        """Prepend the prompt, attach tools and ask the connection."""
        conversation = [*self.prompt_messages(**prompt_variables), *messages]
        tools = self.tool_metadata()

        logger.debug(
            f"Chat via setup model={self.model} messages={len(conversation)} tools={len(tools)}"
        )
        return await self.get_connection().chat(
            conversation,
            tools or None,
            model=self.model,
            **self.model_options(),
        )
