"""
Event sinks: how the agent loop reports progress.

The controller calls one sink synchronously, in iteration order.  Presentation layers (console
printer, session bridge, tests) implement :class:`EventSink` and can be swapped or combined without
touching the loop.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import (
    Any,
    Iterable,
    List,
)

from pydantic import BaseModel

from thinkact.common import (
    AnsiColors,
    colored_print,
)
from thinkact.core.errors import ArgumentDecodeError
from thinkact.core.schema import Action


class EventKind(str, Enum):
    THOUGHT = "thought"
    ACTION = "action"
    TOOL_END = "tool_end"
    OBSERVATION = "observation"
    STOP = "stop"


class AgentEvent(BaseModel):
    """One recorded callback."""

    kind: EventKind
    payload: Any = None


class EventSink:
    """Receives loop events.  Every hook is a no-op unless overridden."""

    def on_thought(self, text: str) -> None:
        """A thought was produced and appended to the conversation."""

    def on_action(self, action: Action) -> None:
        """The model chose to call a tool."""

    def on_tool_end(self, result: Any) -> None:
        """The tool finished and its result was appended to the conversation."""

    def on_observation(self, text: str) -> None:
        """An observation was produced and appended to the conversation."""

    def on_stop(self, reason: str) -> None:
        """The model chose to stop; the run is about to return."""


class RecordingEventSink(EventSink):
    """Keeps every event in order."""

    def __init__(self) -> None:
        self.events: List[AgentEvent] = []

    def on_thought(self, text: str) -> None:
        self.events.append(AgentEvent(kind=EventKind.THOUGHT, payload=text))

    def on_action(self, action: Action) -> None:
        self.events.append(AgentEvent(kind=EventKind.ACTION, payload=action))

    def on_tool_end(self, result: Any) -> None:
        self.events.append(AgentEvent(kind=EventKind.TOOL_END, payload=result))

    def on_observation(self, text: str) -> None:
        self.events.append(AgentEvent(kind=EventKind.OBSERVATION, payload=text))

    def on_stop(self, reason: str) -> None:
        self.events.append(AgentEvent(kind=EventKind.STOP, payload=reason))

    def of_kind(self, kind: EventKind) -> List[AgentEvent]:
        return [event for event in self.events if event.kind is kind]


class CompositeEventSink(EventSink):
    """Forwards every event to several sinks, in order."""

    def __init__(self, sinks: Iterable[EventSink]):
        self.sinks = list(sinks)

    def on_thought(self, text: str) -> None:
        for sink in self.sinks:
            sink.on_thought(text)

    def on_action(self, action: Action) -> None:
        for sink in self.sinks:
            sink.on_action(action)

    def on_tool_end(self, result: Any) -> None:
        for sink in self.sinks:
            sink.on_tool_end(result)

    def on_observation(self, text: str) -> None:
        for sink in self.sinks:
            sink.on_observation(text)

    def on_stop(self, reason: str) -> None:
        for sink in self.sinks:
            sink.on_stop(reason)


class ConsoleEventSink(EventSink):
    """Prints the loop to the terminal."""

    def on_thought(self, text: str) -> None:
        colored_print(f"💭 Thought: {text}", AnsiColors.MAGENTA)

    def on_action(self, action: Action) -> None:
        colored_print(f"🔧 Action: {action.type}", AnsiColors.BLUE)
        if action.tool_call is None:
            return
        colored_print(f"   Tool: {action.tool_call.name}", AnsiColors.BLUE)
        try:
            args = action.tool_call.args_to_map()
        except ArgumentDecodeError:
            # The dispatcher reports the failure; just show the raw payloads.
            args = [arg.parameter_value for arg in action.tool_call.args]
        colored_print(f"   Args: {json.dumps(args, default=str)}", AnsiColors.BLUE)

    def on_tool_end(self, result: Any) -> None:
        colored_print(f"✅ Tool result: {result}", AnsiColors.GREEN)

    def on_observation(self, text: str) -> None:
        colored_print(f"👀 Observation: {text}", AnsiColors.YELLOW)

    def on_stop(self, reason: str) -> None:
        colored_print(f"🏁 {reason}", AnsiColors.GREEN)
