"""
Resource Provider Factory - builds resource handles from descriptors.

Architecture:
- Provider Registry: implementation id -> Resource subclass
- Built-in providers are loaded lazily to avoid circular imports
- Import paths ("package.module:ClassName") work without registration
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

from flowagents.core.exceptions import ConfigurationError
from flowagents.core.resources import Resource

if TYPE_CHECKING:
    from flowagents.core.resources import GetResource, ResourceDescriptor

logger = logging.getLogger(__name__)


RESOURCE_PROVIDER_REGISTRY: dict[str, type[Resource]] = {}

_builtins_loaded = False


def register_resource_provider(name: str, provider_class: type[Resource]) -> None:
    """
    Register a resource implementation under an id usable in descriptors.

    Args:
        name: Implementation id (case-insensitive)
        provider_class: Resource subclass
    """
    if not (isinstance(provider_class, type) and issubclass(provider_class, Resource)):
        raise ConfigurationError(f"Provider '{name}' must be a Resource subclass")
    RESOURCE_PROVIDER_REGISTRY[name.lower()] = provider_class
    logger.debug(f"Registered resource provider: {name}")


def _lazy_load_providers() -> None:
    """Register the built-in providers on first use."""
    global _builtins_loaded
    if _builtins_loaded:
        return
    _builtins_loaded = True

    from flowagents.chat.providers.mock_provider import ScriptedChatModelConnection
    from flowagents.chat.providers.ollama import OllamaChatModelConnection, OllamaChatModelSetup

    RESOURCE_PROVIDER_REGISTRY.setdefault("ollama_connection", OllamaChatModelConnection)
    RESOURCE_PROVIDER_REGISTRY.setdefault("ollama_setup", OllamaChatModelSetup)
    RESOURCE_PROVIDER_REGISTRY.setdefault("scripted_connection", ScriptedChatModelConnection)


def resolve_provider_class(clazz: str) -> type[Resource]:
    """
    Map an implementation id to a Resource subclass.

    Raises:
        ConfigurationError: If the id is neither registered nor importable
    """
    _lazy_load_providers()

    provider_class = RESOURCE_PROVIDER_REGISTRY.get(clazz.lower())
    if provider_class is not None:
        return provider_class

    module_name, sep, attr = clazz.partition(":")
    if not sep:
        module_name, _, attr = clazz.rpartition(".")
    if not module_name or not attr:
        available = ", ".join(sorted(RESOURCE_PROVIDER_REGISTRY))
        raise ConfigurationError(
            f"Unknown resource provider: {clazz}. Available providers: {available}"
        )

    try:
        module = importlib.import_module(module_name)
        provider_class = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot import resource provider '{clazz}': {e}") from e

    if not (isinstance(provider_class, type) and issubclass(provider_class, Resource)):
        raise ConfigurationError(f"Resource provider '{clazz}' is not a Resource subclass")
    return provider_class


def create_resource(descriptor: ResourceDescriptor, get_resource: GetResource) -> Resource:
    """
    Construct a resource from its descriptor.

    Args:
        descriptor: Implementation id and constructor arguments
        get_resource: Resolver the new resource uses to reach other resources

    Raises:
        ConfigurationError: If the provider is unknown or rejects the arguments
    """
    provider_class = resolve_provider_class(descriptor.clazz)

    try:
        resource = provider_class(get_resource=get_resource, **descriptor.initial_arguments)
    except TypeError as e:
        raise ConfigurationError(
            f"Invalid arguments for {provider_class.__name__}: {e}"
        ) from e

    logger.info(f"Created resource {provider_class.__name__} from '{descriptor.clazz}'")
    return resource
