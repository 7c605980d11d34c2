#!/usr/bin/env python3
# tests/test_tools.py
"""
Unit tests for mcp_sse_server.protocol.tools

Tests ToolHandler creation from functions, schema derivation, argument
coercion and execution.
"""

from typing import Literal

import pytest

from mcp_sse_server.protocol.tools import ParameterValidationError, ToolExecutionError, ToolHandler, ToolParameter
from mcp_sse_server.protocol.types import MCPTool, ServerCapabilities, create_server_capabilities, format_content


def test_tool_handler_from_function_basic():
    """Test creating ToolHandler from a basic function."""

    def simple_tool(name: str) -> str:
        """A simple tool that greets someone."""
        return f"Hello, {name}!"

    handler = ToolHandler.from_function(simple_tool)

    assert handler.name == "simple_tool"
    assert handler.description == "A simple tool that greets someone."
    assert len(handler.parameters) == 1
    assert handler.parameters[0].name == "name"
    assert handler.parameters[0].type == "string"
    assert handler.parameters[0].required is True


def test_tool_handler_from_function_with_custom_name():
    """Test creating ToolHandler with custom name and description."""

    def my_function(x: int) -> int:
        return x * 2

    handler = ToolHandler.from_function(my_function, name="double_number", description="Doubles a number")

    assert handler.name == "double_number"
    assert handler.description == "Doubles a number"


def test_input_schema_marks_defaults_optional():
    def search(query: str, limit: int = 10, exact: bool | None = None) -> list:
        return []

    schema = ToolHandler.from_function(search).input_schema

    assert schema["required"] == ["query"]
    assert schema["properties"]["limit"] == {"type": "integer", "default": 10}
    assert schema["properties"]["exact"] == {"type": "boolean"}


def test_literal_becomes_enum():
    param = ToolParameter.from_annotation("period", Literal["annual", "quarter"])
    assert param.to_json_schema() == {"type": "string", "enum": ["annual", "quarter"]}
    with pytest.raises(ValueError):
        param.convert("monthly")


@pytest.mark.parametrize(
    ("type_name", "raw", "expected"),
    [
        ("integer", "42", 42),
        ("integer", 7.0, 7),
        ("number", "2.5", 2.5),
        ("boolean", "yes", True),
        ("boolean", "off", False),
        ("string", 12, "12"),
        ("array", "[1, 2]", [1, 2]),
        ("object", '{"a": 1}', {"a": 1}),
    ],
)
def test_parameter_conversion(type_name, raw, expected):
    assert ToolParameter(name="p", type=type_name).convert(raw) == expected


def test_integer_rejects_lossy_and_boolean_values():
    param = ToolParameter(name="p", type="integer")
    with pytest.raises(ValueError):
        param.convert("1.5")
    with pytest.raises(ValueError):
        param.convert(True)


def test_missing_required_argument():
    def needs(a: int) -> int:
        return a

    with pytest.raises(ParameterValidationError) as exc_info:
        ToolHandler.from_function(needs).validate_arguments({})
    assert exc_info.value.parameter == "a"


@pytest.mark.asyncio
async def test_execute_sync_and_async_tools():
    def double(x: int) -> int:
        return x * 2

    async def triple(x: int) -> int:
        return x * 3

    assert await ToolHandler.from_function(double).execute({"x": "4"}) == 8
    assert await ToolHandler.from_function(triple).execute({"x": 4}) == 12


@pytest.mark.asyncio
async def test_execute_wraps_tool_errors():
    def broken() -> None:
        raise KeyError("missing")

    with pytest.raises(ToolExecutionError) as exc_info:
        await ToolHandler.from_function(broken).execute({})
    assert exc_info.value.tool_name == "broken"
    assert isinstance(exc_info.value.error, KeyError)


def test_mcp_tool_is_the_library_model():
    def add(a: int, b: int = 1) -> int:
        """Add two integers."""
        return a + b

    handler = ToolHandler.from_function(add)

    assert isinstance(handler.mcp_tool, MCPTool)
    mcp_format = handler.to_mcp_format()
    assert mcp_format["name"] == "add"
    assert mcp_format["description"] == "Add two integers."
    assert mcp_format["inputSchema"]["type"] == "object"
    assert mcp_format["inputSchema"]["required"] == ["a"]


def test_no_required_key_when_every_argument_has_a_default():
    def greet(name: str = "world") -> str:
        return f"Hello, {name}!"

    assert "required" not in ToolHandler.from_function(greet).input_schema


def test_format_content_uses_text_content():
    assert [(item["type"], item["text"]) for item in format_content("hi")] == [("text", "hi")]
    assert format_content({"a": 1})[0]["text"] == '{\n  "a": 1\n}'
    assert [item["text"] for item in format_content(["x", 2])] == ["x", "2"]
    assert "annotations" not in format_content("hi")[0]


def test_server_capabilities_are_library_types():
    capabilities = create_server_capabilities(tools=True)

    assert isinstance(capabilities, ServerCapabilities)
    assert capabilities.model_dump(exclude_none=True)["tools"]["listChanged"] is False
    assert "logging" in create_server_capabilities(logging=True).model_dump(exclude_none=True)
