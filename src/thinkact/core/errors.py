"""
Error taxonomy for the agent loop.

Every error is fatal to the run that raised it and reaches the caller of
:meth:`thinkact.agent.agent_loop.ReActAgent.run` unchanged.  Nothing in the core recovers from
these; callers decide whether to report, retry the whole run, or give up.
"""


class AgentError(RuntimeError):
    """Base class for every error raised by the agent loop."""


class TransportError(AgentError):
    """Raised when the model client cannot obtain a response (network, auth, rate limit)."""


class DecodeError(AgentError):
    """Raised when model output does not decode into the expected structured shape."""


class UnsupportedActionError(AgentError):
    """Raised when an action carries a discriminant other than ``_done`` or ``tool_call``."""


class UnknownToolError(AgentError):
    """Raised when a tool call names a tool that is not registered."""


class ArgumentDecodeError(AgentError):
    """Raised when a tool-call argument payload is not a JSON object, or keys collide."""


class ToolExecutionError(AgentError):
    """Raised when a requested tool cannot run or fails."""


class RunCancelledError(AgentError):
    """Raised when a run is cancelled through its cancellation token."""


class MaxTurnsExceededError(AgentError):
    """Raised when the optional turn limit is reached before the model stops."""
