"""File tools: read, write and edit text files."""

import logging
from pathlib import Path

from pydantic import Field

from thinkact.tools.base import (
    ToolParams,
    tool,
)

logger = logging.getLogger(__name__)


class ReadParams(ToolParams):
    file_path: str = Field(..., description="Path of the file to read")


class WriteParams(ToolParams):
    file_path: str = Field(..., description="Path of the file to write")
    content: str = Field(..., description="Full content to write to the file")


class EditParams(ToolParams):
    file_path: str = Field(..., description="Path of the file to edit")
    old_string: str = Field(..., description="Exact text to replace")
    new_string: str = Field(..., description="Replacement text")
    count: int = Field(-1, description="How many occurrences to replace (-1 replaces all)")


@tool(
    "Read",
    description="Read a file, providing its path as `file_path` (string)",
)
def read_file(params: ReadParams) -> str:
    return Path(params.file_path).read_text(encoding="utf-8")


@tool(
    "Write",
    description=(
        "Write a file (providing its path as `file_path` - string) by passing a `content` "
        "(string) to write."
    ),
)
def write_file(params: WriteParams) -> str:
    path = Path(params.file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(params.content, encoding="utf-8")
    logger.info("Wrote %d characters to %s", len(params.content), path)
    return f"Wrote {len(params.content)} characters to {path}"


@tool(
    "Edit",
    description=(
        "Edit a file (providing its path as `file_path` - string), by passing the old and new "
        "string (`old_string` and `new_string` parameters) and how many times to replace it "
        "(the `count` parameter, an integer; -1 replaces every occurrence)"
    ),
)
def edit_file(params: EditParams) -> str:
    path = Path(params.file_path)
    content = path.read_text(encoding="utf-8")
    occurrences = content.count(params.old_string)
    if occurrences == 0:
        raise ValueError(f"Could not find the text to replace in {path}")
    path.write_text(
        content.replace(params.old_string, params.new_string, params.count), encoding="utf-8"
    )
    replaced = occurrences if params.count < 0 else min(params.count, occurrences)
    return f"Replaced {replaced} occurrence(s) in {path}"
