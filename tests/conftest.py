"""Shared fixtures for flowagents tests."""

from dataclasses import dataclass

import pytest

from flowagents.core.config import AgentsConfig
from flowagents.core.events import BaseEvent
from flowagents.toolkit.float_controller import FloatContext, FloatController


@dataclass(frozen=True)
class PingEvent(BaseEvent):
    type_name = "test.ping"

    hops: int = 0


@dataclass(frozen=True)
class PongEvent(BaseEvent):
    type_name = "test.pong"

    label: str = ""


@pytest.fixture
def config():
    """Config isolated from the developer's environment defaults."""
    return AgentsConfig(max_steps=100, run_timeout=None, resource_scope="run", max_concurrent_runs=1)


@pytest.fixture
def floats():
    """Enabled float controller, cleared for each test."""
    with FloatContext() as fc:
        yield fc
    fc.clear()


@pytest.fixture(autouse=True)
def _reset_float_controller():
    yield
    FloatController.reset_instance()
