"""Sentiment agent end to end with a scripted chat model."""

import logging

import pytest

from flowagents.chat.messages import ChatMessage, MessageRole, ToolCall
from flowagents.chat.providers.mock_provider import ScriptedChatModelConnection
from flowagents.core.environment import AgentEnvironment
from flowagents.core.events import InputEvent
from flowagents.core.exceptions import ChatModelError, HandlerError, UnknownResourceError
from flowagents.core.resources import ResourceDescriptor, ResourceType
from flowagents.demo.sentiment import CONNECTION_RESOURCE, Sentiment, SentimentAgent, SentimentResult


def _dispatcher(config, connection, **agent_kwargs):
    env = AgentEnvironment(config)
    env.add_resource(CONNECTION_RESOURCE, ResourceType.CHAT_MODEL_CONNECTION, connection)
    return env.apply(SentimentAgent(**agent_kwargs))


async def test_positive_text(config, floats):
    connection = ScriptedChatModelConnection(
        replies=["SENTIMENT: POSITIVE\nSCORE: 0.9\nREASON: enthusiastic tone"]
    )

    result = await _dispatcher(config, connection).run(InputEvent(input="I love this!"))

    assert result == SentimentResult(sentiment=Sentiment.POSITIVE, score=0.9, reason="enthusiastic tone")
    dispatched = [f["event_type"] for f in floats.get_floats("event.dispatched")]
    assert dispatched == ["input", "chat.request", "chat.response", "output"]


async def test_request_carries_prompt_model_and_tools(config):
    connection = ScriptedChatModelConnection()

    await _dispatcher(config, connection, model="qwen2.5:7b").run(InputEvent(input="The package arrived."))

    request = connection.requests[0]
    assert request["model"] == "qwen2.5:7b"
    system, user = request["messages"]
    assert system.role is MessageRole.SYSTEM
    assert "SENTIMENT: [POSITIVE/NEGATIVE/NEUTRAL]" in system.content
    assert user == ChatMessage.user("Analyze this text: The package arrived.")
    assert [tool.name for tool in request["tools"]] == ["logEmotion"]


async def test_free_form_reply_falls_back_to_defaults(config):
    connection = ScriptedChatModelConnection(replies=["It is hard to say."])

    result = await _dispatcher(config, connection).run(InputEvent(input="Meh."))

    assert result == SentimentResult(sentiment=Sentiment.NEUTRAL, score=0.5, reason="It is hard to say.")


async def test_tool_call_round_trip(config, floats, caplog):
    caplog.set_level(logging.INFO, logger="flowagents.demo.sentiment.agent")
    tool_call = ToolCall(
        id="call-1",
        name="logEmotion",
        arguments={"emotion": "JOY", "intensity": "9", "keywords": "love, perfect"},
    )
    connection = ScriptedChatModelConnection(
        replies=[
            ChatMessage(role=MessageRole.ASSISTANT, content="", tool_calls=(tool_call,)),
            "SENTIMENT: POSITIVE\nSCORE: 0.95\nREASON: strong joy",
        ]
    )

    result = await _dispatcher(config, connection).run(InputEvent(input="I love it, perfect!"))

    assert result.sentiment is Sentiment.POSITIVE
    assert result.score == pytest.approx(0.95)
    assert "[EMOTION DETECTED] Type: JOY, Intensity: 9, Keywords: love, perfect" in caplog.text

    assert connection.call_count == 2
    follow_up = connection.requests[1]["messages"]
    assert follow_up[-2].tool_calls == (tool_call,)
    assert follow_up[-1].role is MessageRole.TOOL
    assert follow_up[-1].tool_call_id == "call-1"
    assert follow_up[-1].extra_args == {"tool_name": "logEmotion"}

    dispatched = [f["event_type"] for f in floats.get_floats("event.dispatched")]
    assert dispatched == ["input", "chat.request", "tool.request", "tool.response", "chat.response", "output"]


async def test_failing_tool_reports_error_to_model(config):
    bad_call = ToolCall(id="call-1", name="logEmotion", arguments={"emotion": "JOY"})
    unknown_call = ToolCall(id="call-2", name="sendEmail", arguments={})
    connection = ScriptedChatModelConnection(
        replies=[
            ChatMessage(role=MessageRole.ASSISTANT, tool_calls=(bad_call, unknown_call)),
            "SENTIMENT: POSITIVE\nSCORE: 0.6\nREASON: fine",
        ]
    )

    result = await _dispatcher(config, connection).run(InputEvent(input="Nice."))

    assert result.sentiment is Sentiment.POSITIVE
    tool_messages = [m for m in connection.requests[1]["messages"] if m.role is MessageRole.TOOL]
    assert [m.tool_call_id for m in tool_messages] == ["call-1", "call-2"]
    assert all(m.content.startswith("Error: ") for m in tool_messages)


async def test_chat_model_failure_aborts_run(config):
    connection = ScriptedChatModelConnection(replies=[ChatModelError("Ollama unreachable")])

    with pytest.raises(HandlerError) as exc_info:
        await _dispatcher(config, connection).run(InputEvent(input="I love this!"))

    assert exc_info.value.event_type == "chat.request"
    assert exc_info.value.action_name == "chat_model_action"
    assert isinstance(exc_info.value.__cause__, ChatModelError)


async def test_missing_connection_is_unknown_resource(config):
    env = AgentEnvironment(config)
    dispatcher = env.apply(SentimentAgent())

    with pytest.raises(UnknownResourceError) as exc_info:
        await dispatcher.run(InputEvent(input="hello"))

    assert exc_info.value.resource_name == CONNECTION_RESOURCE
    assert exc_info.value.event_type == "chat.request"


async def test_connection_declared_by_descriptor(config):
    env = AgentEnvironment(config)
    env.add_resource(
        CONNECTION_RESOURCE,
        ResourceType.CHAT_MODEL_CONNECTION,
        ResourceDescriptor.of("scripted_connection", default_reply="SENTIMENT: NEGATIVE\nSCORE: 0.8\nREASON: bad"),
    )

    result = await env.apply(SentimentAgent()).run(InputEvent(input="Terrible service."))

    assert result.sentiment is Sentiment.NEGATIVE
