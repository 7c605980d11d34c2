#!/usr/bin/env python3
# src/mcp_sse_server/protocol/tools.py
"""
Tool handlers - wrap plain functions as MCP tools.

The JSON schema for a tool's arguments is derived from the function
signature; arguments are validated and coerced before the call.
"""

import inspect
import typing
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import orjson

from .types import MCPTool, MCPToolInputSchema

_TYPE_MAP: dict[Any, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}

_TRUE_STRINGS = ("true", "1", "yes", "on", "t", "y")
_FALSE_STRINGS = ("false", "0", "no", "off", "f", "n")


class ParameterValidationError(ValueError):
    """A tool argument is missing or has the wrong type."""

    def __init__(self, parameter: str, expected_type: str, received: Any):
        self.parameter = parameter
        self.expected_type = expected_type
        message = f"Invalid parameter '{parameter}': expected {expected_type}, got {type(received).__name__}"
        super().__init__(message)


class ToolExecutionError(Exception):
    """The tool function raised."""

    def __init__(self, tool_name: str, error: Exception):
        self.tool_name = tool_name
        self.error = error
        super().__init__(f"Tool '{tool_name}' execution failed: {error}")


@dataclass
class ToolParameter:
    name: str
    type: str
    required: bool = True
    default: Any = None
    enum: list[Any] | None = None

    @classmethod
    def from_annotation(cls, name: str, annotation: Any, default: Any = inspect.Parameter.empty) -> "ToolParameter":
        """Create a parameter from a function annotation."""
        param_type = "string"
        enum_values = None

        origin = typing.get_origin(annotation)
        args = typing.get_args(annotation)

        if origin is typing.Union or (origin is not None and type(None) in args):
            # Optional[T] / T | None
            non_none = [arg for arg in args if arg is not type(None)]
            if len(non_none) == 1:
                param_type = _TYPE_MAP.get(typing.get_origin(non_none[0]) or non_none[0], "string")
        elif origin is typing.Literal:
            enum_values = list(args)
            param_type = _TYPE_MAP.get(type(args[0]), "string") if args else "string"
        elif origin is not None:
            param_type = _TYPE_MAP.get(origin, "string")
        else:
            param_type = _TYPE_MAP.get(annotation, "string")

        required = default is inspect.Parameter.empty
        return cls(
            name=name,
            type=param_type,
            required=required,
            default=None if required else default,
            enum=enum_values,
        )

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type}
        if self.enum:
            schema["enum"] = self.enum
        if self.default is not None:
            schema["default"] = self.default
        return schema

    def convert(self, value: Any) -> Any:
        """Coerce ``value`` to this parameter's JSON type."""
        if self.type == "integer":
            if isinstance(value, bool):
                raise ValueError("boolean is not an integer")
            if isinstance(value, int):
                converted: Any = value
            elif isinstance(value, float) and value.is_integer():
                converted = int(value)
            elif isinstance(value, str):
                try:
                    converted = int(value)
                except ValueError:
                    as_float = float(value)
                    if not as_float.is_integer():
                        raise ValueError(f"Cannot convert string '{value}' to integer without precision loss")
                    converted = int(as_float)
            else:
                raise ValueError(f"Cannot convert {type(value).__name__} to integer")
        elif self.type == "number":
            if isinstance(value, bool):
                raise ValueError("boolean is not a number")
            converted = float(value)
        elif self.type == "boolean":
            if isinstance(value, bool):
                converted = value
            elif isinstance(value, str) and value.lower() in _TRUE_STRINGS:
                converted = True
            elif isinstance(value, str) and value.lower() in _FALSE_STRINGS:
                converted = False
            elif isinstance(value, int | float):
                converted = bool(value)
            else:
                raise ValueError(f"Cannot convert {value!r} to boolean")
        elif self.type == "string":
            converted = value if isinstance(value, str) else str(value)
        elif self.type == "array":
            converted = orjson.loads(value) if isinstance(value, str) else value
            if isinstance(converted, tuple | set):
                converted = list(converted)
            if not isinstance(converted, list):
                raise ValueError(f"Cannot convert {type(value).__name__} to array")
        elif self.type == "object":
            converted = orjson.loads(value) if isinstance(value, str) else value
            if not isinstance(converted, dict):
                raise ValueError(f"Cannot convert {type(value).__name__} to object")
        else:
            converted = value

        if self.enum and converted not in self.enum:
            raise ValueError(f"Value '{converted}' must be one of {self.enum}")
        return converted


@dataclass
class ToolHandler:
    """A registered tool: its MCP description plus the callable behind it."""

    name: str
    description: str
    handler: Callable[..., Any]
    parameters: list[ToolParameter] = field(default_factory=list)

    @classmethod
    def from_function(
        cls, func: Callable[..., Any], name: str | None = None, description: str | None = None
    ) -> "ToolHandler":
        tool_name = name or func.__name__
        tool_description = description or inspect.getdoc(func) or f"Execute {tool_name}"

        try:
            hints = typing.get_type_hints(func)
        except (NameError, TypeError):
            hints = {}

        parameters = []
        for param_name, param in inspect.signature(func).parameters.items():
            if param_name == "self" or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            annotation = hints.get(param_name, str)
            parameters.append(ToolParameter.from_annotation(param_name, annotation, param.default))

        return cls(name=tool_name, description=tool_description, handler=func, parameters=parameters)

    @property
    def input_schema(self) -> dict[str, Any]:
        required = [p.name for p in self.parameters if p.required]
        schema = MCPToolInputSchema(
            type="object",
            properties={p.name: p.to_json_schema() for p in self.parameters},
            required=required or None,
        )
        return schema.model_dump(exclude_none=True)

    @property
    def mcp_tool(self) -> MCPTool:
        return MCPTool(name=self.name, description=self.description, inputSchema=self.input_schema)

    def to_mcp_format(self) -> dict[str, Any]:
        return self.mcp_tool.model_dump(exclude_none=True)

    def validate_arguments(self, arguments: dict[str, Any]) -> dict[str, Any]:
        validated: dict[str, Any] = {}
        for param in self.parameters:
            value = arguments.get(param.name)
            if value is None:
                if param.required:
                    raise ParameterValidationError(param.name, param.type, None)
                validated[param.name] = param.default
                continue
            try:
                validated[param.name] = param.convert(value)
            except (ValueError, TypeError, orjson.JSONDecodeError) as e:
                raise ParameterValidationError(param.name, param.type, value) from e
        return validated

    async def execute(self, arguments: dict[str, Any]) -> Any:
        """Validate arguments and run the tool.

        Raises:
            ParameterValidationError: an argument is missing or malformed.
            ToolExecutionError: the tool function raised.
        """
        validated = self.validate_arguments(arguments)
        try:
            if inspect.iscoroutinefunction(self.handler):
                return await self.handler(**validated)
            return self.handler(**validated)
        except Exception as e:
            raise ToolExecutionError(self.name, e) from e


__all__ = ["ParameterValidationError", "ToolExecutionError", "ToolHandler", "ToolParameter"]
