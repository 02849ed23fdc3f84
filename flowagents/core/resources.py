"""
Resources - named, lazily resolved dependencies of actions.

A resource is declared once at startup, either as a ready instance (prompts,
tools) or as a ResourceDescriptor naming an implementation and its
constructor arguments (chat model connections and setups). Actions resolve
resources by name through their RunContext; the ResourceCache constructs each
descriptor at most once per cache.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
import logging
import re
from threading import RLock
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from flowagents.core.exceptions import (
    ConfigurationError,
    DuplicateResourceError,
    UnknownResourceError,
)

logger = logging.getLogger(__name__)


class ResourceType(str, Enum):
    """Kinds of resources an agent can declare."""

    CHAT_MODEL_CONNECTION = "chat_model_connection"
    CHAT_MODEL_SETUP = "chat_model_setup"
    PROMPT = "prompt"
    TOOL = "tool"


GetResource = Callable[[str, "ResourceType | None"], "Resource"]


class Resource:
    """
    Base class for runtime resource handles.

    Handles built from a descriptor receive the descriptor's initial
    arguments as keyword arguments plus `get_resource`, a callback that
    resolves other declared resources by name.
    """

    resource_type: ClassVar[ResourceType]

    def __init__(self, get_resource: GetResource | None = None, **kwargs: Any) -> None:
        self._get_resource = get_resource
        self.kwargs = kwargs

    def get_resource(self, name: str, resource_type: ResourceType | None = None) -> Resource:
        if self._get_resource is None:
            raise ConfigurationError(
                f"{type(self).__name__} cannot resolve '{name}': no resource resolver bound"
            )
        return self._get_resource(name, resource_type)

    async def close(self) -> None:
        """Release held connections. No-op by default."""


class ResourceDescriptor(BaseModel):
    """
    Immutable recipe for building a resource.

    Example:
        >>> ResourceDescriptor.of("ollama_connection", base_url="http://localhost:11434")
    """

    model_config = ConfigDict(frozen=True)

    clazz: str = Field(..., description="Registered provider name or 'module:Class' path")
    initial_arguments: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def of(cls, clazz: str, **initial_arguments: Any) -> ResourceDescriptor:
        return cls(clazz=clazz, initial_arguments=initial_arguments)


@dataclass(frozen=True)
class ResourceDeclaration:
    name: str
    resource_type: ResourceType
    resource: ResourceDescriptor | Resource


class ResourceDeclarations:
    """
    Declaration table mapping (type, name) to a descriptor or instance.

    Names are unique within a resource type. The table is filled before any
    run starts and frozen afterwards.
    """

    def __init__(self) -> None:
        self._by_type: dict[ResourceType, dict[str, ResourceDeclaration]] = {
            resource_type: {} for resource_type in ResourceType
        }
        self._frozen = False

    def declare(
        self,
        name: str,
        resource_type: ResourceType,
        resource: ResourceDescriptor | Resource,
    ) -> None:
        """
        Declare a resource.

        Raises:
            DuplicateResourceError: If the name is already declared for this type
            ConfigurationError: If the table is frozen or the resource is invalid
        """
        if self._frozen:
            raise ConfigurationError(f"Cannot declare resource '{name}': declarations are frozen")
        if not isinstance(resource, (ResourceDescriptor, Resource)):
            raise ConfigurationError(
                f"Resource '{name}' must be a ResourceDescriptor or Resource, got {type(resource).__name__}"
            )
        if isinstance(resource, Resource) and resource.resource_type is not resource_type:
            raise ConfigurationError(
                f"Resource '{name}' is a {resource.resource_type.value}, declared as {resource_type.value}"
            )

        declared = self._by_type[resource_type]
        if name in declared:
            raise DuplicateResourceError(name, resource_type.value)

        declared[name] = ResourceDeclaration(name=name, resource_type=resource_type, resource=resource)
        logger.debug(f"Declared {resource_type.value} resource '{name}'")

    def lookup(self, name: str, resource_type: ResourceType | None = None) -> ResourceDeclaration:
        """
        Find a declaration by name.

        Raises:
            UnknownResourceError: If undeclared, or ambiguous when no type is given
        """
        if resource_type is not None:
            declaration = self._by_type[resource_type].get(name)
            if declaration is None:
                raise UnknownResourceError(
                    f"Unknown {resource_type.value} resource '{name}'", resource_name=name
                )
            return declaration

        matches = [declared[name] for declared in self._by_type.values() if name in declared]
        if not matches:
            raise UnknownResourceError(f"Unknown resource '{name}'", resource_name=name)
        if len(matches) > 1:
            kinds = ", ".join(match.resource_type.value for match in matches)
            raise UnknownResourceError(
                f"Resource name '{name}' is declared for several types ({kinds}); pass a resource type",
                resource_name=name,
            )
        return matches[0]

    def merged(self, other: ResourceDeclarations) -> ResourceDeclarations:
        """Return a new table holding the declarations of both tables."""
        result = ResourceDeclarations()
        for table in (self, other):
            for declaration in table:
                result.declare(declaration.name, declaration.resource_type, declaration.resource)
        return result

    def names(self, resource_type: ResourceType) -> list[str]:
        return list(self._by_type[resource_type])

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __iter__(self):
        for declared in self._by_type.values():
            yield from declared.values()

    def __len__(self) -> int:
        return sum(len(declared) for declared in self._by_type.values())


class ResourceCache:
    """
    Lazily builds and caches resource handles.

    Each declaration is constructed at most once per cache. Instances that
    were declared ready-made are handed out as is and never closed here.
    """

    def __init__(self, declarations: ResourceDeclarations) -> None:
        self._declarations = declarations
        self._handles: dict[tuple[ResourceType, str], Resource] = {}
        self._built: list[Resource] = []
        self._lock = RLock()

    def get(self, name: str, resource_type: ResourceType | None = None) -> Resource:
        """Resolve `name`, constructing it on first use."""
        declaration = self._declarations.lookup(name, resource_type)
        key = (declaration.resource_type, declaration.name)

        with self._lock:
            handle = self._handles.get(key)
            if handle is not None:
                return handle

            if isinstance(declaration.resource, Resource):
                handle = declaration.resource
            else:
                handle = self._build(declaration)
                self._built.append(handle)

            self._handles[key] = handle
            return handle

    def _build(self, declaration: ResourceDeclaration) -> Resource:
        from flowagents.core.factory import create_resource

        descriptor = declaration.resource
        handle = create_resource(descriptor, get_resource=self.get)
        if handle.resource_type is not declaration.resource_type:
            raise ConfigurationError(
                f"Resource '{declaration.name}' built {type(handle).__name__} "
                f"({handle.resource_type.value}), declared as {declaration.resource_type.value}"
            )
        logger.debug(f"Constructed {declaration.resource_type.value} resource '{declaration.name}'")
        return handle

    def __contains__(self, key: tuple[ResourceType, str]) -> bool:
        return key in self._handles

    async def aclose(self) -> None:
        """Close every handle this cache constructed."""
        with self._lock:
            built = list(self._built)
            self._built.clear()
            self._handles.clear()

        for handle in built:
            try:
                await handle.close()
            except Exception as e:
                logger.warning(f"Failed to close {type(handle).__name__}: {e}")


_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, None: 1.0}


def parse_duration(value: str | float | int) -> float:
    """
    Parse a duration into seconds.

    Accepts numbers (seconds) and strings like "120s", "2m", "1500ms", "90".

    Raises:
        ConfigurationError: If the value cannot be parsed
    """
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    match = _DURATION_RE.match(str(value))
    if match is None:
        raise ConfigurationError(f"Invalid duration: {value!r}")

    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit]
