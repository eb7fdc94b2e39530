"""Tests for the tool abstractions, the registry and the built-in tools."""

import sys
from enum import Enum
from pathlib import Path
from typing import Tuple

import pytest
from pydantic import Field

from thinkact.core.errors import ToolExecutionError
from thinkact.core.schema import ToolCallArgument
from thinkact.tools import (
    FunctionTool,
    ToolParams,
    ToolRegistry,
    default_tools,
    demo_tools,
    tool,
)
from thinkact.tools.arithmetic import (
    add,
    multiply,
)
from thinkact.tools.files import (
    edit_file,
    read_file,
    write_file,
)
from thinkact.tools.shell import run_command


class GreetParams(ToolParams):
    person: str = Field(..., alias="name", description="Who to greet")
    times: int = 1


@tool("greet")
def greet(params: GreetParams) -> str:
    """Greet someone."""
    return " ".join([f"Hello {params.person}!"] * params.times)


# ---------------------------------------------------------------------------
# FunctionTool
# ---------------------------------------------------------------------------
def test_function_tool_metadata() -> None:
    meta = greet.metadata()
    assert meta.name == "greet"
    assert meta.description == "Greet someone."
    assert [(p.name, p.type) for p in meta.parameters] == [("name", "str"), ("times", "int")]
    assert meta.parameters[0].describe() == (
        "JSON Definition of the parameter: name; Description: Who to greet; Type: str"
    )
    # computed once
    assert greet.metadata() is meta


def test_function_tool_uses_aliases() -> None:
    assert greet.execute({"name": "Ada", "times": 2}) == "Hello Ada! Hello Ada!"


def test_function_tool_rejects_bad_params() -> None:
    with pytest.raises(ToolExecutionError, match="Invalid arguments for tool 'greet'"):
        greet.execute({"name": "Ada", "extra": True})


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"


class PaintParams(ToolParams):
    color: Color
    point: Tuple[int, int]
    target: Path


@tool("paint")
def paint(params: PaintParams) -> str:
    """Paint a pixel."""
    return f"{params.color.value} at {params.point} in {params.target.name}"


def test_function_tool_accepts_json_forms_of_rich_types() -> None:
    """Enum, tuple and path fields accept the values a decoded tool call carries."""
    decoded = ToolCallArgument.from_mapping(
        {"color": "red", "point": [1, 2], "target": "out/canvas.png"}
    ).to_mapping()

    params = paint.parse_params(decoded)

    assert params.color is Color.RED
    assert params.point == (1, 2)
    assert params.target == Path("out/canvas.png")
    assert paint.execute(decoded) == "red at (1, 2) in canvas.png"


@pytest.mark.parametrize(
    "params",
    [
        {"color": "green", "point": [1, 2], "target": "a.png"},  # not a member
        {"color": "red", "point": ["1", 2], "target": "a.png"},  # no coercion from strings
        {"color": "red", "point": [1, 2, 3], "target": "a.png"},  # wrong arity
    ],
)
def test_function_tool_still_rejects_mistyped_rich_values(params) -> None:
    with pytest.raises(ToolExecutionError, match="Invalid arguments for tool 'paint'"):
        paint.execute(params)


def test_function_tool_rejects_non_json_values() -> None:
    with pytest.raises(ToolExecutionError, match="not JSON values"):
        paint.execute({"color": "red", "point": [1, 2], "target": object()})


def test_function_tool_requires_a_params_model() -> None:
    def two_args(a: int, b: int) -> int:
        """Nope."""
        return a + b

    def untyped(params):
        """Nope."""
        return params

    with pytest.raises(TypeError):
        FunctionTool(two_args, name="two_args")
    with pytest.raises(TypeError):
        FunctionTool(untyped, name="untyped")


def test_function_tool_requires_name_and_description() -> None:
    def undocumented(params: GreetParams) -> str:
        return params.person

    with pytest.raises(ValueError):
        FunctionTool(undocumented, name="undocumented")
    with pytest.raises(ValueError):
        FunctionTool(undocumented, name=" ", description="Has a description")
    assert FunctionTool(undocumented, name="ok", description="Echo").name == "ok"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
def test_registry_keeps_order_and_finds_by_name() -> None:
    registry = ToolRegistry([multiply, add])
    assert registry.names() == ["multiply", "add"]
    assert registry.find("add") is add
    assert registry.find("subtract") is None
    assert len(registry) == 2
    assert [meta.name for meta in registry.metadata()] == ["multiply", "add"]


def test_registry_rejects_duplicate_names() -> None:
    registry = ToolRegistry([add])
    with pytest.raises(ValueError, match="already registered"):
        registry.register(add)


def test_frozen_registry_rejects_registration() -> None:
    registry = ToolRegistry([add]).freeze()
    assert registry.frozen
    with pytest.raises(RuntimeError):
        registry.register(multiply)


def test_builtin_tool_sets() -> None:
    assert default_tools().names() == ["Read", "Write", "Edit", "Bash"]
    assert demo_tools().names() == ["add", "multiply"]


# ---------------------------------------------------------------------------
# Built-in tools
# ---------------------------------------------------------------------------
def test_arithmetic_tools() -> None:
    assert add.execute({"x": 2, "y": 3}) == 5
    assert multiply.execute({"x": -4, "y": 7}) == -28


def test_write_read_and_edit_file(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "notes.txt"

    written = write_file.execute({"file_path": str(target), "content": "a-b-a"})
    assert written == f"Wrote 5 characters to {target}"
    assert read_file.execute({"file_path": str(target)}) == "a-b-a"

    edited = edit_file.execute(
        {"file_path": str(target), "old_string": "a", "new_string": "c", "count": 1}
    )
    assert edited == f"Replaced 1 occurrence(s) in {target}"
    assert target.read_text(encoding="utf-8") == "c-b-a"

    edit_file.execute({"file_path": str(target), "old_string": "-", "new_string": "+"})
    assert target.read_text(encoding="utf-8") == "c+b+a"


def test_edit_file_fails_when_text_is_missing(tmp_path: Path) -> None:
    target = tmp_path / "notes.txt"
    target.write_text("hello", encoding="utf-8")
    with pytest.raises(ValueError, match="Could not find"):
        edit_file.execute({"file_path": str(target), "old_string": "bye", "new_string": "x"})


def test_read_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_file.execute({"file_path": str(tmp_path / "missing.txt")})


def test_run_command_returns_output() -> None:
    output = run_command.execute(
        {"command": sys.executable, "arguments": ["-c", "print('hi there')"]}
    )
    assert output.strip() == "hi there"


def test_run_command_raises_on_failure() -> None:
    with pytest.raises(RuntimeError, match="exited with status 3"):
        run_command.execute(
            {"command": sys.executable, "arguments": ["-c", "import sys; sys.exit(3)"]}
        )
