"""Sentiment analysis agent: text in, SentimentResult out."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flowagents.chat.messages import ChatMessage
from flowagents.chat.prompt import Prompt
from flowagents.chat.tools import FunctionTool, ToolParameter
from flowagents.core.agent import Agent
from flowagents.core.events import ChatRequestEvent, ChatResponseEvent, InputEvent, OutputEvent
from flowagents.core.resources import ResourceDescriptor, ResourceType
from flowagents.demo.sentiment.parser import parse_sentiment

if TYPE_CHECKING:
    from flowagents.core.context import RunContext

logger = logging.getLogger(__name__)

CONNECTION_RESOURCE = "ollamaChatModelConnection"
MODEL_RESOURCE = "sentimentModel"
PROMPT_RESOURCE = "sentimentPrompt"
EMOTION_TOOL = "logEmotion"

DEFAULT_MODEL = "llama3.2:latest"

SENTIMENT_PROMPT = Prompt.from_text(
    "You are a sentiment analysis assistant. Analyze the given text and determine its sentiment.\n"
    "Classify the sentiment as POSITIVE, NEGATIVE, or NEUTRAL.\n"
    "Provide a confidence score between 0 and 1.\n"
    "If you detect strong emotions, use the logEmotion tool to record them.\n\n"
    "Always respond with your final answer in this exact format:\n"
    "SENTIMENT: [POSITIVE/NEGATIVE/NEUTRAL]\n"
    "SCORE: [0.0-1.0]\n"
    "REASON: [brief explanation]"
)


def log_emotion(emotion: str, intensity: int, keywords: str) -> None:
    logger.info(
        "[EMOTION DETECTED] Type: %s, Intensity: %d, Keywords: %s",
        emotion,
        intensity,
        keywords,
    )


EMOTION_TOOL_PARAMETERS = [
    ToolParameter(name="emotion", type="string", description="The type of emotion: ANGER, JOY, SADNESS, FEAR"),
    ToolParameter(name="intensity", type="integer", description="Intensity from 1-10"),
    ToolParameter(name="keywords", type="string", description="Keywords that indicate this emotion"),
]


def process_input(event: InputEvent, ctx: RunContext) -> None:
    """Turn input text into a chat request for the sentiment model."""
    input_text = str(event.input)
    logger.info(f"[SentimentAgent] Processing text: {input_text}")

    ctx.send_event(
        ChatRequestEvent(
            model=MODEL_RESOURCE,
            messages=[ChatMessage.user(f"Analyze this text: {input_text}")],
        )
    )


def process_chat_response(event: ChatResponseEvent, ctx: RunContext) -> None:
    """Parse the model's answer and emit it as the run output."""
    content = event.response.content
    logger.info(f"[SentimentAgent] LLM Response: {content}")

    ctx.send_event(OutputEvent(output=parse_sentiment(content)))


class SentimentAgent(Agent):
    """
    Classifies text as POSITIVE, NEGATIVE or NEUTRAL with a score.

    Expects a CHAT_MODEL_CONNECTION named `ollamaChatModelConnection` to be
    declared on the environment (or pass another name as `connection`).
    """

    def __init__(self, model: str = DEFAULT_MODEL, connection: str = CONNECTION_RESOURCE) -> None:
        super().__init__()

        self.add_resource(PROMPT_RESOURCE, ResourceType.PROMPT, SENTIMENT_PROMPT)
        self.add_resource(
            EMOTION_TOOL,
            ResourceType.TOOL,
            FunctionTool(
                log_emotion,
                name=EMOTION_TOOL,
                description=(
                    "Log strong emotions detected in the text. "
                    "Use this when you detect anger, joy, sadness, or fear."
                ),
                parameters=EMOTION_TOOL_PARAMETERS,
            ),
        )
        self.add_resource(
            MODEL_RESOURCE,
            ResourceType.CHAT_MODEL_SETUP,
            ResourceDescriptor.of(
                "ollama_setup",
                connection=connection,
                model=model,
                prompt=PROMPT_RESOURCE,
                tools=[EMOTION_TOOL],
            ),
        )

        self.add_action(InputEvent, process_input)
        self.add_action(ChatResponseEvent, process_chat_response)
