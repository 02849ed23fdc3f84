"""
Tool resources.

Tools are plain functions with explicitly declared metadata. The chat model
setup advertises their metadata to the model; the built-in tool action
invokes them when the model asks.
"""

from __future__ import annotations

from collections.abc import Callable
import inspect
import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from flowagents.core.exceptions import ToolError
from flowagents.core.resources import Resource, ResourceType

logger = logging.getLogger(__name__)

ParameterType = Literal["string", "integer", "number", "boolean"]


class ToolParameter(BaseModel):
    """One declared tool parameter."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: ParameterType = "string"
    description: str = ""
    required: bool = True


class ToolMetadata(BaseModel):
    """Name, description and ordered parameter list of a tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: tuple[ToolParameter, ...] = Field(default=())

    def to_ollama(self) -> dict[str, Any]:
        """Render as an Ollama/OpenAI function tool schema."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {
                        param.name: {"type": param.type, "description": param.description}
                        for param in self.parameters
                    },
                    "required": [param.name for param in self.parameters if param.required],
                },
            },
        }


def _coerce(param: ToolParameter, value: Any) -> Any:
    try:
        if param.type == "integer":
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(f"{value} is not an integer")
            return int(value)
        if param.type == "number":
            return float(value)
        if param.type == "boolean":
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in {"true", "1", "yes"}:
                    return True
                if lowered in {"false", "0", "no"}:
                    return False
                raise ValueError(f"{value!r} is not a boolean")
            return bool(value)
        return value if isinstance(value, str) else str(value)
    except (TypeError, ValueError) as e:
        raise ToolError(f"Argument '{param.name}' must be {param.type}: {e}") from e


class FunctionTool(Resource):
    """
    Tool backed by a Python function.

    Example:
        >>> tool = FunctionTool(
        ...     log_emotion,
        ...     name="logEmotion",
        ...     description="Log strong emotions",
        ...     parameters=[ToolParameter(name="emotion", description="ANGER, JOY, ...")],
        ... )
    """

    resource_type = ResourceType.TOOL

    def __init__(
        self,
        func: Callable[..., Any],
        *,
        name: str | None = None,
        description: str = "",
        parameters: list[ToolParameter] | tuple[ToolParameter, ...] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.func = func
        self.metadata = ToolMetadata(
            name=name or func.__name__,
            description=description or (inspect.getdoc(func) or ""),
            parameters=tuple(parameters),
        )

    @property
    def name(self) -> str:
        return self.metadata.name

    def _bind(self, arguments: dict[str, Any]) -> dict[str, Any]:
        declared = {param.name: param for param in self.metadata.parameters}
        unknown = set(arguments) - set(declared)
        if unknown:
            raise ToolError(f"Tool '{self.name}' got unexpected arguments: {sorted(unknown)}")

        bound = {}
        for param in self.metadata.parameters:
            if param.name not in arguments:
                if param.required:
                    raise ToolError(f"Tool '{self.name}' missing required argument '{param.name}'")
                continue
            bound[param.name] = _coerce(param, arguments[param.name])
        return bound

    async def call(self, **arguments: Any) -> Any:
        """
        Invoke the function with coerced arguments.

        Raises:
            ToolError: If arguments do not match the declared parameters
        """
        bound = self._bind(arguments)
        logger.debug(f"Calling tool {self.name} with {bound}")
        result = self.func(**bound)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"FunctionTool(name={self.name!r}, parameters={len(self.metadata.parameters)})"
