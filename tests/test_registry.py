"""ActionRegistry and Agent declaration tests."""

import pytest

from flowagents.core.agent import Agent
from flowagents.core.events import ChatRequestEvent, InputEvent, OutputEvent
from flowagents.core.exceptions import ConfigurationError
from flowagents.core.registry import Action, ActionRegistry

from conftest import PingEvent


def _noop(event, ctx):
    return None


def _other(event, ctx):
    return None


def test_lookup_preserves_registration_order():
    registry = ActionRegistry()
    registry.register(InputEvent, _noop, name="first")
    registry.register("input", _other, name="second")
    registry.register(InputEvent, _noop, name="third")

    names = [action.name for action in registry.lookup(InputEvent)]
    assert names == ["first", "second", "third"]


def test_same_handler_may_be_registered_twice():
    registry = ActionRegistry()
    registry.register(InputEvent, _noop)
    registry.register(InputEvent, _noop)

    assert registry.get_handler_count("input") == 2


def test_lookup_unknown_type_is_empty():
    registry = ActionRegistry()
    registry.register(InputEvent, _noop)

    assert registry.lookup("never.registered") == ()
    assert registry.lookup(PingEvent) == ()


def test_default_action_name_is_function_name():
    registry = ActionRegistry()
    action = registry.register(PingEvent, _noop)

    assert action.name == "_noop"
    assert action.event_type == "test.ping"


def test_register_existing_action_rebinds_event_type():
    registry = ActionRegistry()
    action = Action(name="shared", event_type="input", func=_noop)
    rebound = registry.register(OutputEvent, action)

    assert rebound.event_type == "output"
    assert rebound.name == "shared"
    assert registry.lookup("input") == ()


def test_frozen_registry_rejects_registration():
    registry = ActionRegistry()
    registry.register(InputEvent, _noop)
    registry.freeze()

    with pytest.raises(ConfigurationError):
        registry.register(InputEvent, _other)
    assert registry.frozen
    assert registry.get_handler_count(InputEvent) == 1


def test_non_callable_handler_rejected():
    registry = ActionRegistry()

    with pytest.raises(ConfigurationError):
        registry.register(InputEvent, "not a function")


def test_event_type_must_be_name_or_event_class():
    registry = ActionRegistry()

    with pytest.raises(TypeError):
        registry.register(int, _noop)


def test_stats_list_actions_by_type():
    registry = ActionRegistry()
    registry.register(InputEvent, _noop, name="a")
    registry.register(ChatRequestEvent, _other, name="b")
    registry.register(ChatRequestEvent, _noop, name="c")

    stats = registry.get_stats()
    assert stats["total_event_types"] == 2
    assert stats["total_actions"] == 3
    assert stats["actions_by_type"] == {"input": ["a"], "chat.request": ["b", "c"]}


def test_agent_registry_puts_builtins_before_agent_actions():
    agent = Agent()
    agent.add_action([InputEvent, ChatRequestEvent], _noop, name="mine")

    registry = agent.build_registry()

    names = [action.name for action in registry.lookup(ChatRequestEvent)]
    assert names == ["chat_model_action", "mine"]
    assert [action.name for action in registry.lookup(InputEvent)] == ["mine"]


def test_agent_registry_without_builtins():
    agent = Agent().add_action(InputEvent, _noop)

    registry = agent.build_registry(include_builtins=False)

    assert registry.lookup(ChatRequestEvent) == ()
    assert registry.get_stats()["total_actions"] == 1
