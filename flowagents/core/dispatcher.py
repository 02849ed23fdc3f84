"""
Dispatcher - drives runs to completion.

One run:
    InputEvent → queue → pop → actions (registration order) → emitted events
    appended to the queue → ... → terminal event popped → payload returned

Scheduling:
- A run is a single cooperative task; actions execute one after another and
  each one is awaited before the next starts.
- Independent runs may execute concurrently (`run_many`); they share only
  the frozen ActionRegistry and, with resource_scope="process", the
  resource cache.
- Failures are scoped to their run.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
import inspect
import logging
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from flowagents.core.config import AgentsConfig
from flowagents.core.context import RunContext
from flowagents.core.exceptions import (
    AgentRunError,
    HandlerError,
    IncompleteRunError,
    MaxStepsExceededError,
    RunTimeoutError,
)
from flowagents.core.resources import ResourceCache, ResourceDeclarations
from flowagents.toolkit.float_controller import FloatController, float_event

if TYPE_CHECKING:
    from flowagents.core.events.base import BaseEvent
    from flowagents.core.registry import Action, ActionRegistry

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of one run: either `output` or `error` is set."""

    run_id: UUID
    input: Any
    output: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Dispatcher:
    """
    Runtime core: executes runs against a frozen action registry.

    Usage:
        dispatcher = Dispatcher(registry, declarations, config)
        result = await dispatcher.run(InputEvent(input="I love this!"))
    """

    def __init__(
        self,
        registry: ActionRegistry,
        declarations: ResourceDeclarations | None = None,
        config: AgentsConfig | None = None,
    ) -> None:
        self.registry = registry
        self.declarations = declarations if declarations is not None else ResourceDeclarations()
        self.config = config or AgentsConfig()

        self.registry.freeze()
        self.declarations.freeze()

        self._shared_resources: ResourceCache | None = None
        if self.config.resource_scope == "process":
            self._shared_resources = ResourceCache(self.declarations)

        logger.info(
            f"Dispatcher ready: {self.registry.get_stats()['total_actions']} actions, "
            f"{len(self.declarations)} resources, scope={self.config.resource_scope}, "
            f"max_steps={self.config.max_steps}, run_timeout={self.config.run_timeout}"
        )

    @property
    def terminal_event_type(self) -> str:
        return self.config.terminal_event_type

    async def run(self, initial_event: BaseEvent, run_id: UUID | None = None) -> Any:
        """
        Process one input to completion.

        Args:
            initial_event: Event seeding the run (usually an InputEvent)
            run_id: Identity to use for the run (generated if omitted)

        Returns:
            Payload of the terminal event

        Raises:
            HandlerError: An action failed
            IncompleteRunError: The queue emptied without a terminal event
            MaxStepsExceededError: The run dispatched more than max_steps events
            RunTimeoutError: The run exceeded run_timeout
        """
        run_id = run_id or uuid4()
        timeout = self.config.run_timeout

        if timeout is None:
            return await self._run(run_id, initial_event)

        try:
            async with asyncio.timeout(timeout) as deadline:
                return await self._run(run_id, initial_event)
        except TimeoutError as e:
            if not deadline.expired():
                raise
            logger.error(f"Run {run_id} timed out after {timeout:.2f}s")
            float_event("run.failed", run_id=str(run_id), error="timeout")
            raise RunTimeoutError(timeout, run_id=run_id) from e

    async def run_safe(self, initial_event: BaseEvent, run_id: UUID | None = None) -> RunResult:
        """Run and capture the outcome instead of raising."""
        run_id = run_id or uuid4()
        source_item = getattr(initial_event, "input", initial_event)
        try:
            output = await self.run(initial_event, run_id=run_id)
        except AgentRunError as e:
            return RunResult(run_id=run_id, input=source_item, error=e)
        except Exception as e:
            logger.exception(f"Run {run_id} crashed: {e}")
            return RunResult(run_id=run_id, input=source_item, error=e)
        return RunResult(run_id=run_id, input=source_item, output=output)

    async def run_many(
        self,
        events: Iterable[BaseEvent],
        max_concurrency: int | None = None,
    ) -> list[RunResult]:
        """
        Execute independent runs concurrently.

        Args:
            events: One seeding event per run
            max_concurrency: Limit on simultaneous runs (config default)

        Returns:
            RunResults in the order of `events`
        """
        semaphore = asyncio.Semaphore(max_concurrency or self.config.max_concurrent_runs)

        async def _guarded(event: BaseEvent) -> RunResult:
            async with semaphore:
                return await self.run_safe(event)

        return list(await asyncio.gather(*(_guarded(event) for event in events)))

    async def _run(self, run_id: UUID, initial_event: BaseEvent) -> Any:
        resources = self._shared_resources or ResourceCache(self.declarations)
        ctx = RunContext(run_id, resources, self.config)
        trace_token = FloatController.set_trace_id(str(run_id))
        max_steps = self.config.max_steps
        terminal = self.terminal_event_type
        steps = 0

        logger.info(f"Run {run_id} started with {initial_event.event_type} event")
        float_event("run.started", run_id=str(run_id), event_type=initial_event.event_type)

        try:
            ctx.send_event(initial_event)

            while True:
                if not ctx.has_pending():
                    raise IncompleteRunError(
                        f"Run {run_id} ended after {steps} steps without a '{terminal}' event",
                        run_id=run_id,
                    )

                event = ctx.next_event()
                steps += 1
                if max_steps is not None and steps > max_steps:
                    raise MaxStepsExceededError(max_steps, run_id=run_id)

                actions = self.registry.lookup(event.event_type)
                is_terminal = event.event_type == terminal

                if not actions and not is_terminal:
                    logger.debug(f"Run {run_id}: no actions for '{event.event_type}', dropped")
                    continue

                float_event(
                    "event.dispatched",
                    run_id=str(run_id),
                    event_type=event.event_type,
                    action_count=len(actions),
                )

                for action in actions:
                    await self._execute_action(action, event, ctx)

                if is_terminal:
                    if ctx.has_pending():
                        logger.debug(
                            f"Run {run_id}: discarding {len(ctx.pending)} pending events after '{terminal}'"
                        )
                    logger.info(f"Run {run_id} completed in {steps} steps")
                    float_event("run.completed", run_id=str(run_id), steps=steps)
                    return getattr(event, "output", event)

        except AgentRunError as e:
            if not isinstance(e, HandlerError):
                logger.warning(f"Run {run_id} failed: {e}")
            float_event("run.failed", run_id=str(run_id), error=type(e).__name__)
            raise

        finally:
            if self._shared_resources is None:
                await resources.aclose()
            FloatController.reset_trace_id(trace_token)

    async def _execute_action(self, action: Action, event: BaseEvent, ctx: RunContext) -> None:
        """
        Execute a single action, converting any failure into a HandlerError.

        Raises:
            HandlerError: Carrying run id, event type and action name
        """
        try:
            result = action(event, ctx)
            if inspect.isawaitable(result):
                await result
        except HandlerError as e:
            e.bind(ctx.run_id, event.event_type, action.name)
            self._report_failure(e, e, action, event, ctx)
            raise
        except Exception as e:
            error = HandlerError(
                f"Action {action.name} failed on '{event.event_type}': {e}",
                run_id=ctx.run_id,
                event_type=event.event_type,
                action_name=action.name,
            )
            self._report_failure(error, e, action, event, ctx)
            raise error from e

        float_event(
            "action.completed",
            run_id=str(ctx.run_id),
            event_type=event.event_type,
            action=action.name,
        )

    @staticmethod
    def _report_failure(
        error: HandlerError,
        cause: BaseException,
        action: Action,
        event: BaseEvent,
        ctx: RunContext,
    ) -> None:
        logger.error(
            f"Run {ctx.run_id}: action {action.name} failed on '{event.event_type}' "
            f"({event.event_id}): {error}",
            exc_info=cause,
        )
        float_event(
            "action.failed",
            run_id=str(ctx.run_id),
            event_type=event.event_type,
            action=action.name,
            error=str(error),
        )

    async def aclose(self) -> None:
        """Close resources shared across runs."""
        if self._shared_resources is not None:
            await self._shared_resources.aclose()
