"""The ReAct controller and its collaborators."""

from thinkact.agent.agent_loop import (
    ReActAgent,
    build_default_agent,
)
from thinkact.agent.cancellation import CancellationToken
from thinkact.agent.events import (
    AgentEvent,
    CompositeEventSink,
    ConsoleEventSink,
    EventKind,
    EventSink,
    RecordingEventSink,
)
from thinkact.agent.model_client import (
    BaseModelClient,
    load_model_client,
    register_model_client,
)

__all__ = [
    "AgentEvent",
    "BaseModelClient",
    "CancellationToken",
    "CompositeEventSink",
    "ConsoleEventSink",
    "EventKind",
    "EventSink",
    "ReActAgent",
    "RecordingEventSink",
    "build_default_agent",
    "load_model_client",
    "register_model_client",
]
