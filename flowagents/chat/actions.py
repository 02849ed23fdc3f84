"""
Built-in actions that connect chat requests to chat models and tools.

    ChatRequestEvent ──▶ process_chat_request ──▶ ChatResponseEvent
                               │  ▲
             ToolRequestEvent  ▼  │  ToolResponseEvent
                         process_tool_request

The chat action parks the conversation in the run state while tools run,
then continues it with the tool results until the model answers without
calling a tool.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from flowagents.chat.messages import ChatMessage, MessageRole
from flowagents.chat.providers.base import BaseChatModelSetup
from flowagents.chat.tools import FunctionTool
from flowagents.core.events import (
    ChatRequestEvent,
    ChatResponseEvent,
    ToolRequestEvent,
    ToolResponseEvent,
)
from flowagents.core.exceptions import ConfigurationError, UnknownResourceError
from flowagents.core.resources import ResourceType

if TYPE_CHECKING:
    from uuid import UUID

    from flowagents.core.context import RunContext
    from flowagents.core.registry import ActionRegistry

logger = logging.getLogger(__name__)

PENDING_TOOL_CALLS_KEY = "_flowagents.pending_tool_calls"


def _render_tool_result(result: Any) -> str:
    if result is None:
        return ""
    if isinstance(result, str):
        return result
    try:
        return json.dumps(result, default=str)
    except (TypeError, ValueError):
        return str(result)


async def _continue_chat(
    ctx: RunContext,
    model: str,
    request_id: UUID,
    messages: list[ChatMessage],
) -> None:
    setup = ctx.get_resource(model, ResourceType.CHAT_MODEL_SETUP)
    if not isinstance(setup, BaseChatModelSetup):
        raise ConfigurationError(f"Resource '{model}' is not a chat model setup")

    response = await setup.chat(messages)

    if response.tool_calls:
        tool_request = ToolRequestEvent(
            model=model,
            request_id=request_id,
            tool_calls=response.tool_calls,
        )
        pending = ctx.state.setdefault(PENDING_TOOL_CALLS_KEY, {})
        pending[tool_request.event_id] = (model, request_id, [*messages, response])
        logger.debug(
            f"Run {ctx.run_id}: model {model} requested tools "
            f"{[call.name for call in response.tool_calls]}"
        )
        ctx.send_event(tool_request)
        return

    ctx.send_event(ChatResponseEvent(request_id=request_id, response=response))


async def process_chat_request(event: ChatRequestEvent, ctx: RunContext) -> None:
    """Send the request to the named chat model setup."""
    await _continue_chat(ctx, event.model, event.event_id, list(event.messages))


async def process_tool_response(event: ToolResponseEvent, ctx: RunContext) -> None:
    """Feed tool results back to the model that asked for them."""
    pending = ctx.state.get(PENDING_TOOL_CALLS_KEY, {})
    parked = pending.pop(event.request_id, None)
    if parked is None:
        logger.warning(f"Run {ctx.run_id}: no chat waiting on tool request {event.request_id}")
        return

    model, request_id, messages = parked
    tool_messages = [
        ChatMessage(
            role=MessageRole.TOOL,
            content=event.responses.get(call.id, ""),
            tool_call_id=call.id,
            extra_args={"tool_name": call.name},
        )
        for call in messages[-1].tool_calls
    ]
    await _continue_chat(ctx, model, request_id, [*messages, *tool_messages])


def _advertised_tools(ctx: RunContext, model: str) -> set[str]:
    setup = ctx.get_resource(model, ResourceType.CHAT_MODEL_SETUP)
    return set(setup.tools) if isinstance(setup, BaseChatModelSetup) else set()


async def process_tool_request(event: ToolRequestEvent, ctx: RunContext) -> None:
    """
    Execute requested tools in order.

    A failing tool does not abort the run: the model receives the error text
    as the tool result. A tool the setup advertises but nobody declared is a
    configuration fault and aborts the run.
    """
    advertised = _advertised_tools(ctx, event.model)
    responses: dict[str, str] = {}
    for call in event.tool_calls:
        try:
            tool = ctx.get_resource(call.name, ResourceType.TOOL)
        except UnknownResourceError as e:
            if call.name in advertised:
                raise
            logger.warning(f"Run {ctx.run_id}: model called undeclared tool {call.name}")
            responses[call.id] = f"Error: {e}"
            continue

        try:
            if not isinstance(tool, FunctionTool):
                raise ConfigurationError(f"Resource '{call.name}' is not a tool")
            result = await tool.call(**call.arguments)
            responses[call.id] = _render_tool_result(result)
        except Exception as e:
            logger.warning(f"Run {ctx.run_id}: tool {call.name} failed: {e}", exc_info=True)
            responses[call.id] = f"Error: {e}"

    ctx.send_event(ToolResponseEvent(request_id=event.event_id, responses=responses))


def register_builtin_actions(registry: ActionRegistry) -> None:
    """Register the chat and tool actions."""
    registry.register(ChatRequestEvent, process_chat_request, name="chat_model_action")
    registry.register(ToolResponseEvent, process_tool_response, name="chat_model_action")
    registry.register(ToolRequestEvent, process_tool_request, name="tool_call_action")
