"""Prompt resources."""

from __future__ import annotations

import logging
import string
from typing import Any

from flowagents.chat.messages import ChatMessage, MessageRole
from flowagents.core.resources import Resource, ResourceType

logger = logging.getLogger(__name__)


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_template(template: str, variables: dict[str, Any]) -> str:
    """
    Fill `{name}` placeholders in the template.

    Placeholders without a value are left untouched. Templates that are not
    valid format strings (stray braces) are returned unchanged.
    """
    if not variables:
        return template
    try:
        return string.Formatter().vformat(template, (), _KeepMissing(variables))
    except (ValueError, IndexError) as e:
        logger.warning(f"Prompt template not formattable ({e}), using it verbatim")
        return template


class Prompt(Resource):
    """
    Prompt text or message list used as the leading messages of a chat.

    Example:
        >>> prompt = Prompt.from_text("Classify the sentiment of: {text}")
        >>> prompt.format_string(text="great!")
        'Classify the sentiment of: great!'
    """

    resource_type = ResourceType.PROMPT

    def __init__(
        self,
        template: str | None = None,
        messages: list[ChatMessage] | tuple[ChatMessage, ...] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        if (template is None) == (messages is None):
            raise ValueError("Prompt needs exactly one of template or messages")
        self.template = template
        self.messages = tuple(messages) if messages is not None else None

    @classmethod
    def from_text(cls, text: str) -> Prompt:
        return cls(template=text)

    @classmethod
    def from_messages(cls, messages: list[ChatMessage]) -> Prompt:
        return cls(messages=messages)

    def format_string(self, **variables: Any) -> str:
        """Render the prompt as a single string."""
        if self.template is not None:
            return render_template(self.template, variables)
        return "\n".join(
            f"{message.role.value}: {render_template(message.content, variables)}"
            for message in self.messages
        )

    def format_messages(
        self, role: MessageRole = MessageRole.SYSTEM, **variables: Any
    ) -> list[ChatMessage]:
        """Render the prompt as chat messages. Text templates become one `role` message."""
        if self.template is not None:
            return [ChatMessage(role=role, content=render_template(self.template, variables))]
        return [
            message.model_copy(update={"content": render_template(message.content, variables)})
            for message in self.messages
        ]

    def __repr__(self) -> str:
        kind = "text" if self.template is not None else f"{len(self.messages)} messages"
        return f"Prompt({kind})"
