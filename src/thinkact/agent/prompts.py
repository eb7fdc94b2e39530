"""System prompt template and tool table rendering."""

import logging
from pathlib import Path
from typing import (
    Iterable,
    List,
)

from jinja2 import (
    Environment,
    StrictUndefined,
)

from thinkact.core.schema import ToolMetadata
from thinkact.tools import BaseTool

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = """\
You are a helpful assistant that solves tasks by reasoning and acting in a loop.

Every step has three phases:
1. THOUGHT: reflect on the conversation so far and decide what to do next.
2. ACTION: either call one of the tools listed below, or stop with `_done` and a stop reason
   once the task is complete. The stop reason is shown to the user as your final answer,
   so make it a complete reply.
3. OBSERVATION: after a tool ran, describe what its result means for the task.

When calling a tool, pass its parameters as JSON objects serialized into strings, using
exactly the parameter names listed in the table. Never invent tools that are not listed.

## Available tools

{{ tools }}
"""

_ENV = Environment(undefined=StrictUndefined, autoescape=False, keep_trailing_newline=True)


def _cell(text: str) -> str:
    return " ".join(text.split()).replace("|", "\\|")


def render_tool_table(tools: Iterable[BaseTool | ToolMetadata]) -> str:
    """
    Render tools as a Markdown table, one row per tool in the given order.

    Columns are name, description and the ``" - "``-joined parameter descriptions.
    """
    rows: List[str] = ["| Name | Description | Parameters |", "|-------|-------|-------|"]
    for item in tools:
        meta = item if isinstance(item, ToolMetadata) else item.metadata()
        params = " - ".join(param.describe() for param in meta.parameters)
        rows.append(f"| {_cell(meta.name)} | {_cell(meta.description)} | {_cell(params)} |")
    return "\n".join(rows) + "\n"


def render_system_prompt(template: str, tools: Iterable[BaseTool | ToolMetadata]) -> str:
    """Substitute the tool table into *template*'s ``{{ tools }}`` placeholder."""
    return _ENV.from_string(template).render(tools=render_tool_table(tools))


def load_system_prompt_template(path: str | None = None) -> str:
    """Return the template stored at *path*, or the default one."""
    if not path:
        return DEFAULT_SYSTEM_PROMPT
    logger.info("Loading system prompt template from %s", path)
    return Path(path).read_text(encoding="utf-8")
