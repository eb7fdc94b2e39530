"""Dispatches tool calls chosen by the model and wraps errors."""

import json
import logging
from typing import Any

from thinkact.agent.cancellation import (
    CancellationToken,
    run_cancellable,
)
from thinkact.core.errors import (
    RunCancelledError,
    ToolExecutionError,
    UnknownToolError,
)
from thinkact.core.schema import ToolCall
from thinkact.tools import ToolRegistry

logger = logging.getLogger(__name__)

__all__ = ["ToolExecutionError", "execute_tool", "format_tool_result"]


def execute_tool(
    registry: ToolRegistry, call: ToolCall, cancel_token: CancellationToken | None = None
) -> Any:
    """
    Look up ``call.name`` in *registry* and invoke it with the merged call arguments.

    Parameters
    ----------
    registry:
        The tools available to the agent.
    call:
        The tool call emitted by the model.
    cancel_token:
        Optional token; cancelling it abandons the running tool.

    Returns
    -------
    Any
        Whatever the tool returns.

    Raises
    ------
    ArgumentDecodeError
        If an argument payload is not a JSON object.  Nothing is executed.
    UnknownToolError
        If no tool has the requested name.
    ToolExecutionError
        If the arguments do not fit the tool's parameters, or the tool raises.
    """

    params = call.args_to_map()

    found = registry.find(call.name)
    if found is None:
        raise UnknownToolError(
            f"Tool '{call.name}' is not registered. Available tools: {registry.names()}"
        )

    try:
        logger.debug("Executing tool '%s' with args=%s", call.name, params)
        return run_cancellable(found.execute, cancel_token, params)
    except (ToolExecutionError, RunCancelledError):
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unhandled error in tool '%s'", call.name)
        raise ToolExecutionError(f"Tool '{call.name}' raised an error: {exc}") from exc


def _render(result: Any) -> str:
    if isinstance(result, str):
        return result
    if isinstance(result, (dict, list)):
        return json.dumps(result, default=str)
    return str(result)


def format_tool_result(name: str, result: Any) -> str:
    """Text appended to the conversation after a tool ran."""
    return f"Tool call result from {name}: {_render(result)}"
