"""Command execution tool."""

import logging
import subprocess
from typing import List

from pydantic import Field

from thinkact.config import settings
from thinkact.tools.base import (
    ToolParams,
    tool,
)

logger = logging.getLogger(__name__)


class BashParams(ToolParams):
    command: str = Field(..., description="Program to run")
    arguments: List[str] = Field(default_factory=list, description="Arguments for the program")


@tool(
    "Bash",
    description=(
        "Execute a bash command by providing the main command (`command` parameter - string) "
        "and the arguments for it (`arguments` parameter - list of strings)"
    ),
)
def run_command(params: BashParams) -> str:
    # No shell: the command and its arguments are passed as-is.
    argv = [params.command, *params.arguments]
    logger.info("Running command: %s", argv)
    completed = subprocess.run(
        argv,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        timeout=settings.BASH_TIMEOUT,
        check=False,
    )
    if completed.returncode != 0:
        raise RuntimeError(
            f"Command {argv} exited with status {completed.returncode}: {completed.stdout}"
        )
    return completed.stdout
