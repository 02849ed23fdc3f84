"""
Float Controller - execution markers for tracing agent runs.

The dispatcher drops a float at each step of a run (run started, event
dispatched, action completed/failed, run finished). Tests enable the
controller and assert on the recorded sequence; production leaves it
disabled and pays nothing but a flag check.

Usage:
    >>> from flowagents.toolkit.float_controller import FloatContext
    >>>
    >>> with FloatContext() as fc:
    ...     await dispatcher.run(InputEvent(input="hello"))
    ...     assert fc.has_float("run.completed")
"""

from __future__ import annotations

from collections import defaultdict
from contextvars import ContextVar
from datetime import UTC, datetime
import logging
from typing import Any
from uuid import uuid4

logger = logging.getLogger(__name__)

_current_trace_id: ContextVar[str | None] = ContextVar("flowagents_trace_id", default=None)


class FloatEvent:
    """
    Single float marker.

    Attributes:
        float_id: Unique float identifier
        name: Float name (e.g., "action.completed")
        timestamp: When the float was dropped
        data: Attached key/values
        trace_id: Run id active in the emitting task, if any
    """

    def __init__(self, name: str, data: dict[str, Any] | None = None, trace_id: str | None = None):
        self.float_id = str(uuid4())
        self.name = name
        self.timestamp = datetime.now(UTC)
        self.data = data or {}
        self.trace_id = trace_id

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __repr__(self) -> str:
        return f"FloatEvent(name={self.name!r}, trace_id={self.trace_id!r}, data={self.data})"


class FloatController:
    """
    Collects float markers when enabled.

    Trace ids live in a context variable, so concurrent runs executing in
    separate asyncio tasks each tag their own floats.
    """

    _instance: FloatController | None = None

    def __init__(self, enabled: bool = False, max_events: int = 10000):
        self.enabled = enabled
        self.max_events = max_events
        self._floats: list[FloatEvent] = []
        self._floats_by_name: dict[str, list[FloatEvent]] = defaultdict(list)

    @classmethod
    def get_instance(cls, enabled: bool | None = None) -> FloatController:
        """Get the process-wide controller, optionally overriding its enabled state."""
        if cls._instance is None:
            cls._instance = cls(enabled=enabled if enabled is not None else False)
        elif enabled is not None:
            cls._instance.enabled = enabled

        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset singleton (for tests)."""
        cls._instance = None

    def enable(self) -> None:
        self.enabled = True
        logger.info("FloatController: ENABLED")

    def disable(self) -> None:
        self.enabled = False
        logger.info("FloatController: DISABLED")

    @staticmethod
    def set_trace_id(trace_id: str | None) -> Any:
        """Set the trace id for the current task. Returns a token for `reset_trace_id`."""
        return _current_trace_id.set(trace_id)

    @staticmethod
    def reset_trace_id(token: Any) -> None:
        _current_trace_id.reset(token)

    def float(self, event_name: str, **data: Any) -> FloatEvent | None:
        """
        Record a float marker.

        Returns:
            FloatEvent if enabled, None otherwise
        """
        if not self.enabled:
            return None

        event = FloatEvent(name=event_name, data=data, trace_id=_current_trace_id.get())

        self._floats.append(event)
        self._floats_by_name[event_name].append(event)

        if self.max_events and len(self._floats) > self.max_events:
            dropped = self._floats.pop(0)
            self._floats_by_name[dropped.name].remove(dropped)

        logger.debug(f"FLOAT[{event_name}] {data if data else ''} (trace={event.trace_id})")

        return event

    def has_float(self, name: str) -> bool:
        return bool(self._floats_by_name.get(name))

    def get_floats(self, pattern: str | None = None, trace_id: str | None = None) -> list[FloatEvent]:
        """
        Get floats, optionally filtered by name pattern and trace id.

        Args:
            pattern: Exact name or prefix pattern ("action.*")
            trace_id: Only floats recorded under this trace id
        """
        if pattern is None:
            events = list(self._floats)
        elif "*" in pattern:
            prefix = pattern.replace("*", "")
            events = [event for event in self._floats if event.name.startswith(prefix)]
        else:
            events = list(self._floats_by_name.get(pattern, []))

        if trace_id is not None:
            events = [event for event in events if event.trace_id == trace_id]
        return events

    def count_floats(self, pattern: str | None = None) -> int:
        return len(self.get_floats(pattern))

    def clear(self) -> None:
        """Clear all collected floats."""
        self._floats.clear()
        self._floats_by_name.clear()

    def get_report(self) -> dict[str, Any]:
        """Summary of collected floats."""
        return {
            "enabled": self.enabled,
            "total_floats": len(self._floats),
            "unique_names": len(self._floats_by_name),
            "float_counts": {name: len(events) for name, events in self._floats_by_name.items()},
        }

    def __repr__(self) -> str:
        return f"FloatController(enabled={self.enabled}, floats={len(self._floats)})"


def get_float_controller(enabled: bool | None = None) -> FloatController:
    """Get global float controller instance."""
    return FloatController.get_instance(enabled=enabled)


def float_event(event_name: str, **data: Any) -> FloatEvent | None:
    """Record a float on the global controller."""
    return FloatController.get_instance().float(event_name, **data)


class FloatContext:
    """
    Context manager for float collection in tests.

    Usage:
        >>> with FloatContext() as fc:
        ...     await dispatcher.run(event)
        ...     assert fc.has_float("run.completed")
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.fc = FloatController.get_instance()
        self._old_enabled = self.fc.enabled

    def __enter__(self) -> FloatController:
        self.fc.enabled = self.enabled
        self.fc.clear()
        return self.fc

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.fc.enabled = self._old_enabled
        return False
