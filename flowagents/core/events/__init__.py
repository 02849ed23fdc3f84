"""
Event System - typed, immutable messages routed to actions.

Quick Start:
    from dataclasses import dataclass
    from flowagents.core.events import BaseEvent

    @dataclass(frozen=True)
    class ReviewFlaggedEvent(BaseEvent):
        type_name = "review.flagged"

        review_id: str

    registry.register(ReviewFlaggedEvent, on_flagged)
"""

from .agent_events import (
    ChatRequestEvent,
    ChatResponseEvent,
    InputEvent,
    OutputEvent,
    ToolRequestEvent,
    ToolResponseEvent,
)
from .base import BaseEvent, EventT, event_type_of

__all__ = [
    "BaseEvent",
    "ChatRequestEvent",
    "ChatResponseEvent",
    "EventT",
    "InputEvent",
    "OutputEvent",
    "ToolRequestEvent",
    "ToolResponseEvent",
    "event_type_of",
]
