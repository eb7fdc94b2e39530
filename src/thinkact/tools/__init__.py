"""
Tool registry for thinkact.

This module provides the registry the agent uses to look tools up by name, plus factories for the
built-in tool sets.  A registry is filled once when an agent is built and frozen afterwards, so it
can be read by several agents at the same time.
"""

import logging
from typing import (
    Iterable,
    Iterator,
    List,
    Optional,
)

from thinkact.core.schema import ToolMetadata
from thinkact.tools.base import (
    BaseTool,
    FunctionTool,
    ToolParams,
    tool,
)

logger = logging.getLogger(__name__)

__all__ = [
    "BaseTool",
    "FunctionTool",
    "ToolParams",
    "ToolRegistry",
    "default_tools",
    "demo_tools",
    "tool",
]


class ToolRegistry:
    """Ordered collection of tools, keyed by their unique names."""

    def __init__(self, tools: Iterable[BaseTool] = ()):
        self._tools: List[BaseTool] = []
        self._frozen = False
        for item in tools:
            self.register(item)

    def register(self, item: BaseTool) -> None:
        """
        Add *item* to the registry.

        Parameters
        ----------
        item: BaseTool
            The tool to register.  Its name must not be registered already.

        Raises
        ------
        ValueError
            If a tool with the same name is already registered.
        RuntimeError
            If the registry has been frozen.
        """
        if self._frozen:
            raise RuntimeError("Tools cannot be registered once the registry is frozen.")
        if self.find(item.name) is not None:
            raise ValueError(f"Tool '{item.name}' is already registered.")
        logger.debug("Registering tool '%s'", item.name)
        self._tools.append(item)

    def freeze(self) -> "ToolRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def find(self, name: str) -> Optional[BaseTool]:
        """Return the first tool called *name*, or ``None``."""
        for item in self._tools:
            if item.name == name:
                return item
        return None

    def names(self) -> List[str]:
        return [item.name for item in self._tools]

    def metadata(self) -> List[ToolMetadata]:
        return [item.metadata() for item in self._tools]

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(list(self._tools))

    def __len__(self) -> int:
        return len(self._tools)


def default_tools() -> ToolRegistry:
    """File and shell tools, the toolkit of the coding assistant."""
    # pylint: disable=import-outside-toplevel
    from thinkact.tools.files import (
        edit_file,
        read_file,
        write_file,
    )
    from thinkact.tools.shell import run_command

    return ToolRegistry([read_file, write_file, edit_file, run_command])


def demo_tools() -> ToolRegistry:
    """Arithmetic tools used by the examples."""
    from thinkact.tools.arithmetic import (  # pylint: disable=import-outside-toplevel
        add,
        multiply,
    )

    return ToolRegistry([add, multiply])
