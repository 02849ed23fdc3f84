"""Resource declarations, lazy resolution and provider factory."""

import pytest

from flowagents.chat.prompt import Prompt
from flowagents.chat.providers.mock_provider import ScriptedChatModelConnection
from flowagents.chat.providers.ollama import OllamaChatModelConnection
from flowagents.core.config import AgentsConfig
from flowagents.core.dispatcher import Dispatcher
from flowagents.core.events import InputEvent, OutputEvent
from flowagents.core.exceptions import (
    ConfigurationError,
    DuplicateResourceError,
    HandlerError,
    UnknownResourceError,
)
from flowagents.core.factory import create_resource, register_resource_provider, resolve_provider_class
from flowagents.core.registry import ActionRegistry
from flowagents.core.resources import (
    Resource,
    ResourceCache,
    ResourceDeclarations,
    ResourceDescriptor,
    ResourceType,
    parse_duration,
)


class CountingResource(Resource):
    resource_type = ResourceType.TOOL

    created = 0

    def __init__(self, label="counter", **kwargs):
        super().__init__(**kwargs)
        CountingResource.created += 1
        self.label = label
        self.closed = False

    async def close(self):
        self.closed = True


register_resource_provider("counting", CountingResource)


@pytest.fixture(autouse=True)
def _reset_counter():
    CountingResource.created = 0
    yield


def _grabbing_dispatcher(config, seen):
    declarations = ResourceDeclarations()
    declarations.declare("counter", ResourceType.TOOL, ResourceDescriptor.of("counting"))
    registry = ActionRegistry()

    def grab(event, ctx):
        seen.append(ctx.get_resource("counter"))
        seen.append(ctx.get_resource("counter", ResourceType.TOOL))
        ctx.send_event(OutputEvent(output=None))

    registry.register(InputEvent, grab)
    return Dispatcher(registry, declarations, config)


def test_duplicate_name_for_same_type_rejected():
    declarations = ResourceDeclarations()
    declarations.declare("shared", ResourceType.PROMPT, Prompt.from_text("a"))

    with pytest.raises(DuplicateResourceError) as exc_info:
        declarations.declare("shared", ResourceType.PROMPT, Prompt.from_text("b"))

    assert exc_info.value.resource_name == "shared"
    assert exc_info.value.resource_type == "prompt"


def test_same_name_allowed_across_types():
    declarations = ResourceDeclarations()
    declarations.declare("shared", ResourceType.PROMPT, Prompt.from_text("a"))
    declarations.declare("shared", ResourceType.TOOL, ResourceDescriptor.of("counting"))

    assert len(declarations) == 2
    assert declarations.lookup("shared", ResourceType.PROMPT).resource_type is ResourceType.PROMPT

    with pytest.raises(UnknownResourceError):
        declarations.lookup("shared")


def test_instance_type_must_match_declaration():
    declarations = ResourceDeclarations()

    with pytest.raises(ConfigurationError):
        declarations.declare("p", ResourceType.TOOL, Prompt.from_text("a"))


def test_frozen_declarations_reject_new_resources():
    declarations = ResourceDeclarations()
    declarations.freeze()

    with pytest.raises(ConfigurationError):
        declarations.declare("late", ResourceType.PROMPT, Prompt.from_text("a"))


def test_unknown_resource_names_the_resource():
    cache = ResourceCache(ResourceDeclarations())

    with pytest.raises(UnknownResourceError) as exc_info:
        cache.get("missing")

    assert exc_info.value.resource_name == "missing"
    assert isinstance(exc_info.value, HandlerError)


def test_merged_detects_conflicts():
    left = ResourceDeclarations()
    left.declare("conn", ResourceType.CHAT_MODEL_CONNECTION, ScriptedChatModelConnection())
    right = ResourceDeclarations()
    right.declare("prompt", ResourceType.PROMPT, Prompt.from_text("hi"))

    merged = left.merged(right)
    assert sorted(d.name for d in merged) == ["conn", "prompt"]

    with pytest.raises(DuplicateResourceError):
        merged.merged(left)


def test_cache_builds_descriptor_once():
    declarations = ResourceDeclarations()
    declarations.declare("counter", ResourceType.TOOL, ResourceDescriptor.of("counting", label="x"))
    cache = ResourceCache(declarations)

    first = cache.get("counter")
    second = cache.get("counter", ResourceType.TOOL)

    assert first is second
    assert first.label == "x"
    assert CountingResource.created == 1


def test_cache_returns_declared_instances_as_is():
    prompt = Prompt.from_text("hello")
    declarations = ResourceDeclarations()
    declarations.declare("greeting", ResourceType.PROMPT, prompt)

    assert ResourceCache(declarations).get("greeting") is prompt


def test_built_resource_type_is_checked():
    declarations = ResourceDeclarations()
    declarations.declare("conn", ResourceType.CHAT_MODEL_CONNECTION, ResourceDescriptor.of("counting"))

    with pytest.raises(ConfigurationError):
        ResourceCache(declarations).get("conn")


def test_built_resources_resolve_their_dependencies():
    declarations = ResourceDeclarations()
    declarations.declare("conn", ResourceType.CHAT_MODEL_CONNECTION, ScriptedChatModelConnection())
    declarations.declare(
        "model",
        ResourceType.CHAT_MODEL_SETUP,
        ResourceDescriptor.of("ollama_setup", connection="conn", model="tiny"),
    )
    cache = ResourceCache(declarations)

    setup = cache.get("model")

    assert setup.get_connection() is cache.get("conn")


async def test_same_handle_within_a_run(config):
    seen = []

    await _grabbing_dispatcher(config, seen).run(InputEvent(input=None))

    assert seen[0] is seen[1]
    assert CountingResource.created == 1


async def test_run_scope_builds_per_run_and_closes(config):
    seen = []
    dispatcher = _grabbing_dispatcher(config, seen)

    await dispatcher.run(InputEvent(input=1))
    await dispatcher.run(InputEvent(input=2))

    assert seen[0] is not seen[2]
    assert CountingResource.created == 2
    assert seen[0].closed and seen[2].closed


async def test_process_scope_shares_handles_across_runs():
    config = AgentsConfig(resource_scope="process")
    seen = []
    dispatcher = _grabbing_dispatcher(config, seen)

    await dispatcher.run(InputEvent(input=1))
    await dispatcher.run(InputEvent(input=2))

    assert seen[0] is seen[2]
    assert CountingResource.created == 1
    assert not seen[0].closed

    await dispatcher.aclose()
    assert seen[0].closed


async def test_unknown_resource_in_action_aborts_run(config):
    registry = ActionRegistry()
    registry.register(InputEvent, lambda event, ctx: ctx.get_resource("nope"), name="lookup")

    with pytest.raises(UnknownResourceError) as exc_info:
        await Dispatcher(registry, config=config).run(InputEvent(input=None))

    assert exc_info.value.action_name == "lookup"
    assert exc_info.value.event_type == "input"


def test_resolve_builtin_and_import_path_providers():
    assert resolve_provider_class("ollama_connection") is OllamaChatModelConnection
    assert resolve_provider_class("OLLAMA_CONNECTION") is OllamaChatModelConnection
    assert (
        resolve_provider_class("flowagents.chat.providers.mock_provider:ScriptedChatModelConnection")
        is ScriptedChatModelConnection
    )
    assert resolve_provider_class("flowagents.chat.prompt.Prompt") is Prompt


@pytest.mark.parametrize(
    "clazz",
    ["no_such_provider", "flowagents.core.nothing:Missing", "flowagents.core.config:AgentsConfig"],
)
def test_resolve_rejects_bad_providers(clazz):
    with pytest.raises(ConfigurationError):
        resolve_provider_class(clazz)


def test_create_resource_rejects_bad_arguments():
    descriptor = ResourceDescriptor.of("ollama_setup", model="tiny")

    with pytest.raises(ConfigurationError):
        create_resource(descriptor, get_resource=lambda name, resource_type=None: None)


def test_register_provider_requires_resource_subclass():
    with pytest.raises(ConfigurationError):
        register_resource_provider("bogus", dict)


@pytest.mark.parametrize(
    ("value", "seconds"),
    [("120s", 120.0), ("2m", 120.0), ("1500ms", 1.5), ("1h", 3600.0), ("90", 90.0), (30, 30.0), (2.5, 2.5)],
)
def test_parse_duration(value, seconds):
    assert parse_duration(value) == pytest.approx(seconds)


@pytest.mark.parametrize("value", ["soon", "10 days", "", True])
def test_parse_duration_rejects_garbage(value):
    with pytest.raises(ConfigurationError):
        parse_duration(value)
