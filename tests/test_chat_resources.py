"""Messages, prompts and function tools."""

import pytest

from flowagents.chat.messages import ChatMessage, MessageRole, ToolCall
from flowagents.chat.prompt import Prompt, render_template
from flowagents.chat.tools import FunctionTool, ToolParameter
from flowagents.core.exceptions import ToolError


def test_render_template_keeps_unknown_placeholders():
    assert render_template("Hello {name}, you are {age}", {"name": "Ada"}) == "Hello Ada, you are {age}"


def test_render_template_with_stray_braces_is_verbatim():
    template = "JSON looks like {\"a\": 1"

    assert render_template(template, {"a": "x"}) == template


def test_text_prompt_becomes_system_message():
    prompt = Prompt.from_text("Classify: {text}")

    messages = prompt.format_messages(text="great!")

    assert messages == [ChatMessage(role=MessageRole.SYSTEM, content="Classify: great!")]


def test_message_prompt_formats_each_message():
    prompt = Prompt.from_messages(
        [ChatMessage.system("You judge {topic}."), ChatMessage.user("Rate {item}")]
    )

    assert prompt.format_string(topic="films", item="Alien") == "system: You judge films.\nuser: Rate Alien"
    assert [m.content for m in prompt.format_messages(topic="films", item="Alien")] == [
        "You judge films.",
        "Rate Alien",
    ]


def test_prompt_needs_exactly_one_source():
    with pytest.raises(ValueError):
        Prompt()
    with pytest.raises(ValueError):
        Prompt(template="a", messages=[ChatMessage.user("b")])


def test_message_to_ollama_includes_tool_fields():
    call = ToolCall(id="c1", name="logEmotion", arguments={"emotion": "JOY"})
    assistant = ChatMessage(role=MessageRole.ASSISTANT, content="", tool_calls=(call,))
    tool_reply = ChatMessage(
        role=MessageRole.TOOL, content="ok", tool_call_id="c1", extra_args={"tool_name": "logEmotion"}
    )

    assert assistant.to_ollama() == {
        "role": "assistant",
        "content": "",
        "tool_calls": [{"function": {"name": "logEmotion", "arguments": {"emotion": "JOY"}}}],
    }
    assert tool_reply.to_ollama() == {"role": "tool", "content": "ok", "tool_name": "logEmotion"}


def test_message_from_ollama_assigns_call_ids_and_reasoning():
    message = ChatMessage.from_ollama(
        {
            "role": "assistant",
            "content": None,
            "thinking": "hmm",
            "tool_calls": [
                {"function": {"name": "logEmotion", "arguments": {"emotion": "ANGER"}}},
                {"function": {"name": "logEmotion", "arguments": "not a dict"}},
            ],
        }
    )

    assert message.content == ""
    assert message.extra_args == {"reasoning": "hmm"}
    assert [call.arguments for call in message.tool_calls] == [{"emotion": "ANGER"}, {}]
    assert message.tool_calls[0].id != message.tool_calls[1].id


def _emotion_tool(func):
    return FunctionTool(
        func,
        name="logEmotion",
        description="Log strong emotions",
        parameters=[
            ToolParameter(name="emotion", type="string"),
            ToolParameter(name="intensity", type="integer"),
            ToolParameter(name="confident", type="boolean", required=False),
        ],
    )


async def test_tool_coerces_arguments():
    received = {}

    def record(emotion, intensity, confident=None):
        received.update(emotion=emotion, intensity=intensity, confident=confident)
        return "logged"

    tool = _emotion_tool(record)

    assert await tool.call(emotion="JOY", intensity="8", confident="yes") == "logged"
    assert received == {"emotion": "JOY", "intensity": 8, "confident": True}


async def test_async_tool_is_awaited():
    async def record(emotion, intensity):
        return f"{emotion}:{intensity}"

    assert await _emotion_tool(record).call(emotion="FEAR", intensity=3.0) == "FEAR:3"


@pytest.mark.parametrize(
    "arguments",
    [
        {"emotion": "JOY"},
        {"emotion": "JOY", "intensity": 2, "colour": "red"},
        {"emotion": "JOY", "intensity": "very"},
        {"emotion": "JOY", "intensity": 2.5},
        {"emotion": "JOY", "intensity": 2, "confident": "perhaps"},
    ],
)
async def test_tool_rejects_mismatched_arguments(arguments):
    tool = _emotion_tool(lambda **kwargs: None)

    with pytest.raises(ToolError):
        await tool.call(**arguments)


def test_tool_metadata_schema():
    schema = _emotion_tool(lambda **kwargs: None).metadata.to_ollama()

    assert schema["type"] == "function"
    assert schema["function"]["name"] == "logEmotion"
    assert schema["function"]["parameters"]["properties"]["intensity"] == {"type": "integer", "description": ""}
    assert schema["function"]["parameters"]["required"] == ["emotion", "intensity"]


def test_tool_description_defaults_to_docstring():
    def shout(text):
        """Say it loudly."""

    tool = FunctionTool(shout, parameters=[ToolParameter(name="text")])

    assert tool.name == "shout"
    assert tool.metadata.description == "Say it loudly."
