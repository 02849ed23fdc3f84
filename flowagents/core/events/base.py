"""
Base Event System - immutable typed messages exchanged between actions.

Core Concepts:
- BaseEvent: Immutable event with id, timestamp and correlation id
- type_name: Discriminant each concrete event declares
- event_type_of: Normalizes an event class or string to its discriminant
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, ClassVar, TypeVar
from uuid import UUID, uuid4

EventT = TypeVar("EventT", bound="BaseEvent")


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, kw_only=True)
class BaseEvent(ABC):
    """
    Base class for all events flowing through a run.

    Events are immutable records of something that happened.
    They contain all necessary context for actions to process them.

    Attributes:
        event_id: Unique identifier for this event instance
        timestamp: When the event was created
        correlation_id: Run id the event was emitted under
        metadata: Additional context (tracing, debugging)
    """

    type_name: ClassVar[str] = ""

    event_id: UUID = field(default_factory=uuid4)
    timestamp: datetime = field(default_factory=_utcnow)
    correlation_id: UUID | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def event_type(self) -> str:
        """
        Event type identifier (e.g., 'input', 'chat.request').
        Used for action registration and routing.
        """
        return type(self).type_name

    def to_float_data(self) -> dict[str, Any]:
        """Convert event to float tracking data."""
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "timestamp": self.timestamp.isoformat(),
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            **self.metadata,
        }

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.__dict__.get("type_name"):
            cls.type_name = cls.__name__


def event_type_of(event_type: str | type[BaseEvent]) -> str:
    """Return the discriminant for an event class or an event type string."""
    if isinstance(event_type, str):
        return event_type
    if isinstance(event_type, type) and issubclass(event_type, BaseEvent):
        return event_type.type_name
    raise TypeError(f"Expected event type name or BaseEvent subclass, got {event_type!r}")


__all__ = [
    "BaseEvent",
    "EventT",
    "event_type_of",
]
