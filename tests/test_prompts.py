"""Tests for system prompt rendering."""

from pathlib import Path

import pytest
from jinja2 import UndefinedError

from thinkact.agent.prompts import (
    DEFAULT_SYSTEM_PROMPT,
    load_system_prompt_template,
    render_system_prompt,
    render_tool_table,
)
from thinkact.core.schema import (
    ToolMetadata,
    ToolParameter,
)
from thinkact.tools import demo_tools


def test_tool_table_has_one_row_per_tool_in_order() -> None:
    table = render_tool_table(demo_tools())
    lines = table.strip().splitlines()
    assert lines[0] == "| Name | Description | Parameters |"
    assert lines[1] == "|-------|-------|-------|"
    assert len(lines) == 4
    assert lines[2].startswith("| add | Tool for adding")
    assert lines[3].startswith("| multiply | Tool for multiplying")
    assert (
        "JSON Definition of the parameter: x; Description: First operand; Type: int - "
        "JSON Definition of the parameter: y; Description: Second operand; Type: int"
    ) in lines[2]


def test_tool_table_escapes_cells() -> None:
    meta = ToolMetadata(
        name="pipe",
        description="Reads a | b\nand more",
        parameters=[ToolParameter(name="a", type="str")],
    )
    row = render_tool_table([meta]).strip().splitlines()[-1]
    assert row == (
        "| pipe | Reads a \\| b and more | "
        "JSON Definition of the parameter: a; Description: ; Type: str |"
    )


def test_empty_tool_table_keeps_header() -> None:
    assert render_tool_table([]).strip().splitlines() == [
        "| Name | Description | Parameters |",
        "|-------|-------|-------|",
    ]


def test_default_prompt_lists_tools() -> None:
    prompt = render_system_prompt(DEFAULT_SYSTEM_PROMPT, demo_tools())
    assert "{{" not in prompt
    assert "| add |" in prompt
    assert "| multiply |" in prompt


def test_custom_template_from_file(tmp_path: Path) -> None:
    path = tmp_path / "prompt.md"
    path.write_text("Tools:\n{{ tools }}", encoding="utf-8")
    template = load_system_prompt_template(str(path))
    assert render_system_prompt(template, demo_tools()).startswith("Tools:\n| Name |")


def test_missing_template_path_uses_default() -> None:
    assert load_system_prompt_template(None) == DEFAULT_SYSTEM_PROMPT


def test_unknown_placeholder_is_an_error() -> None:
    with pytest.raises(UndefinedError):
        render_system_prompt("{{ tools }} {{ user_name }}", demo_tools())
