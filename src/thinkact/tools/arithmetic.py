"""Integer arithmetic tools, handy for demos and smoke tests."""

from pydantic import Field

from thinkact.tools.base import (
    ToolParams,
    tool,
)


class OperandParams(ToolParams):
    """Two integer operands."""

    x: int = Field(..., description="First operand")
    y: int = Field(..., description="Second operand")


@tool("add")
def add(params: OperandParams) -> int:
    """Tool for adding two integer numbers together. Takes two arguments, x and y, both integers."""
    return params.x + params.y


@tool("multiply")
def multiply(params: OperandParams) -> int:
    """Tool for multiplying two integer numbers together. Takes two arguments, x and y, both integers."""
    return params.x * params.y
