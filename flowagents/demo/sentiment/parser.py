"""
Sentiment reply parser.

The model is asked to answer in a line-tagged format:

    SENTIMENT: POSITIVE
    SCORE: 0.9
    REASON: enthusiastic tone

Parsing never fails: missing or malformed fields fall back to defaults.
"""

from __future__ import annotations

from enum import Enum
import math

from pydantic import BaseModel, ConfigDict, Field

SENTIMENT_TAG = "SENTIMENT:"
SCORE_TAG = "SCORE:"
REASON_TAG = "REASON:"

DEFAULT_SCORE = 0.5
LABEL_DECORATION = "[]*.!"


class Sentiment(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


DEFAULT_SENTIMENT = Sentiment.NEUTRAL


class SentimentResult(BaseModel):
    """Classification of one text."""

    model_config = ConfigDict(frozen=True)

    sentiment: Sentiment = Field(DEFAULT_SENTIMENT, description="Sentiment label")
    score: float = Field(DEFAULT_SCORE, description="Confidence, nominally in [0, 1]")
    reason: str = Field("", description="Model's explanation")

    def __str__(self) -> str:
        return (
            f"SentimentResult{{sentiment='{self.sentiment.value}', "
            f"score={self.score:.2f}, reason='{self.reason}'}}"
        )


def _parse_label(raw: str) -> Sentiment | None:
    label = raw.strip().strip(LABEL_DECORATION).strip().upper()
    try:
        return Sentiment(label)
    except ValueError:
        return None


def _parse_score(raw: str) -> float:
    try:
        score = float(raw)
    except ValueError:
        return DEFAULT_SCORE
    return score if math.isfinite(score) else DEFAULT_SCORE


def parse_sentiment(text: str) -> SentimentResult:
    """
    Extract sentiment, score and reason from a tagged model reply.

    Tags are matched case-sensitively at the start of a line; the last
    occurrence of a tag wins. Label values are matched case-insensitively
    once surrounding brackets, asterisks and punctuation are removed; a
    value naming no label leaves the sentiment unchanged. Defaults: NEUTRAL,
    0.5, and the whole text as the reason.
    """
    sentiment = DEFAULT_SENTIMENT
    score = DEFAULT_SCORE
    reason = text

    for line in text.split("\n"):
        if line.startswith(SENTIMENT_TAG):
            sentiment = _parse_label(line[len(SENTIMENT_TAG):]) or sentiment
        elif line.startswith(SCORE_TAG):
            score = _parse_score(line[len(SCORE_TAG):].strip())
        elif line.startswith(REASON_TAG):
            reason = line[len(REASON_TAG):].strip()

    return SentimentResult(sentiment=sentiment, score=score, reason=reason)
