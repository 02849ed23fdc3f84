"""Custom exceptions for flowagents."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


class FlowAgentsError(Exception):
    """Base exception for all flowagents errors."""


class ConfigurationError(FlowAgentsError):
    """Raised when configuration or startup declarations are invalid."""


class DuplicateResourceError(ConfigurationError):
    """Raised when a resource name is declared twice for the same resource type."""

    def __init__(self, name: str, resource_type: str) -> None:
        super().__init__(f"Resource '{name}' already declared as {resource_type}")
        self.resource_name = name
        self.resource_type = resource_type


class AgentRunError(FlowAgentsError):
    """Base class for failures that end a single run."""

    def __init__(self, message: str, run_id: UUID | None = None) -> None:
        super().__init__(message)
        self.run_id = run_id


class HandlerError(AgentRunError):
    """Raised when an action fails. Aborts the current run only."""

    def __init__(
        self,
        message: str,
        run_id: UUID | None = None,
        event_type: str | None = None,
        action_name: str | None = None,
    ) -> None:
        super().__init__(message, run_id=run_id)
        self.event_type = event_type
        self.action_name = action_name

    def bind(self, run_id: UUID, event_type: str, action_name: str) -> HandlerError:
        """Fill in run identity for errors raised before the dispatcher saw them."""
        if self.run_id is None:
            self.run_id = run_id
        if self.event_type is None:
            self.event_type = event_type
        if self.action_name is None:
            self.action_name = action_name
        return self


class UnknownResourceError(HandlerError):
    """Raised when a handler references a resource name that was never declared."""

    def __init__(self, message: str, resource_name: str) -> None:
        super().__init__(message)
        self.resource_name = resource_name


class IncompleteRunError(AgentRunError):
    """Raised when the event queue empties without a terminal event."""


class MaxStepsExceededError(AgentRunError):
    """Raised when a run dispatches more events than the configured step limit."""

    def __init__(self, max_steps: int, run_id: UUID | None = None) -> None:
        super().__init__(f"Run exceeded max_steps={max_steps}", run_id=run_id)
        self.max_steps = max_steps


class RunTimeoutError(AgentRunError, TimeoutError):
    """Raised when a run does not finish before its deadline."""

    def __init__(self, timeout: float, run_id: UUID | None = None) -> None:
        super().__init__(f"Run did not finish within {timeout:.2f}s", run_id=run_id)
        self.timeout = timeout


class ChatModelError(FlowAgentsError):
    """Raised when the chat model service fails or returns an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ToolError(FlowAgentsError):
    """Raised when a tool is called with arguments that do not match its declaration."""
