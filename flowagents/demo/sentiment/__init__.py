"""Sentiment analysis demo agent."""

from flowagents.demo.sentiment.agent import (
    CONNECTION_RESOURCE,
    MODEL_RESOURCE,
    SentimentAgent,
    log_emotion,
    process_chat_response,
    process_input,
)
from flowagents.demo.sentiment.parser import Sentiment, SentimentResult, parse_sentiment

__all__ = [
    "CONNECTION_RESOURCE",
    "MODEL_RESOURCE",
    "Sentiment",
    "SentimentAgent",
    "SentimentResult",
    "log_emotion",
    "parse_sentiment",
    "process_chat_response",
    "process_input",
]
