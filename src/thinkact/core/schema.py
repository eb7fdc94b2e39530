"""
Schema definitions for model <-> agent <-> tool messages.

These data models serve as the contract between the model, the orchestration loop, and individual
tools.  The structured output adapter turns them into strict JSON schemas, so field descriptions are
written for the model.  We keep them separate from runtime logic so they can be imported anywhere
without side-effects.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Optional,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)

from thinkact.core.errors import ArgumentDecodeError


class Role(str, Enum):
    """Author of a chat message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """A single entry of the conversation history."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    def to_openai(self) -> Dict[str, str]:
        """Render the message as an OpenAI chat message."""
        return {"role": self.role.value, "content": self.content}


# ---------------------------------------------------------------------------
# Structured outputs requested from the model
# ---------------------------------------------------------------------------
class Thought(BaseModel):
    """Reasoning about the path forward."""

    thought: str = Field(
        ..., description="Thought about the path forward, based on the chat history"
    )


class Observation(BaseModel):
    """Reflection on the state of the task after a tool ran."""

    observation: str = Field(
        ...,
        description="Observation about the current state of things, based on the chat history",
    )


class StopReason(BaseModel):
    """Why the agent decided to stop."""

    reason: str = Field(..., description="Reason why the conversation should stop")


class ToolCallArgument(BaseModel):
    """
    One tool-call argument.

    Strict structured outputs cannot describe arbitrary nested objects, so the parameters travel as
    a JSON object serialized into a string.
    """

    parameter_value: str = Field(
        ...,
        description=(
            "Parameter name and value of the parameter as a JSON string "
            "(e.g. '{\"age\": 40, \"name\": \"John Doe\"}')"
        ),
    )

    def to_mapping(self) -> Dict[str, Any]:
        """Decode the payload into a mapping of parameter name -> value."""
        try:
            decoded = json.loads(self.parameter_value)
        except json.JSONDecodeError as exc:
            raise ArgumentDecodeError(
                f"Tool argument is not valid JSON: {self.parameter_value!r}"
            ) from exc
        if not isinstance(decoded, dict):
            raise ArgumentDecodeError(
                f"Tool argument must be a JSON object, got {type(decoded).__name__}"
            )
        return decoded

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ToolCallArgument":
        """Encode *mapping* into the string form expected by the model."""
        return cls(parameter_value=json.dumps(dict(mapping)))


class ToolCall(BaseModel):
    """A call that the model wants the agent to execute."""

    name: str = Field(..., description="Name of the tool to call")
    args: List[ToolCallArgument] = Field(..., description="Tool call arguments")

    def args_to_map(self) -> Dict[str, Any]:
        """
        Merge every argument into one flat mapping.

        Raises
        ------
        ArgumentDecodeError
            If any payload fails to decode, or if two arguments define the same parameter.
        """
        merged: Dict[str, Any] = {}
        for arg in self.args:
            for key, value in arg.to_mapping().items():
                if key in merged:
                    raise ArgumentDecodeError(
                        f"Parameter '{key}' is defined more than once in the call to '{self.name}'"
                    )
                merged[key] = value
        return merged


class ActionType(str, Enum):
    """Known action discriminants."""

    DONE = "_done"
    TOOL_CALL = "tool_call"


class Action(BaseModel):
    """
    The action part of a turn: either stop, or call a tool.

    Exactly one payload is populated and it must match ``type``.  Unknown discriminants decode (so
    the controller can reject them explicitly) but known ones with the wrong payload do not.
    """

    type: str = Field(
        ...,
        description=(
            "Type of the action to perform based on the chat history. Use '_done' if you think "
            "the conversation should stop, and 'tool_call' if you want to call a tool"
        ),
        json_schema_extra={"enum": [member.value for member in ActionType]},
    )
    stop_reason: Optional[StopReason] = Field(
        None,
        description="Reason why the conversation should stop. Only present when type is '_done'",
    )
    tool_call: Optional[ToolCall] = Field(
        None,
        description="Tool to call with its arguments. Only present when type is 'tool_call'",
    )

    @model_validator(mode="after")
    def _check_payload(self) -> "Action":
        if self.type == ActionType.DONE.value:
            if self.stop_reason is None or self.tool_call is not None:
                raise ValueError("a '_done' action must carry stop_reason and no tool_call")
        elif self.type == ActionType.TOOL_CALL.value:
            if self.tool_call is None or self.stop_reason is not None:
                raise ValueError("a 'tool_call' action must carry tool_call and no stop_reason")
        return self

    @classmethod
    def done(cls, reason: str) -> "Action":
        """Build a terminal action."""
        return cls(type=ActionType.DONE.value, stop_reason=StopReason(reason=reason))

    @classmethod
    def call(cls, name: str, **params: Any) -> "Action":
        """Build a tool-call action carrying *params* as a single argument."""
        args = [ToolCallArgument.from_mapping(params)] if params else []
        return cls(type=ActionType.TOOL_CALL.value, tool_call=ToolCall(name=name, args=args))


# ---------------------------------------------------------------------------
# Tool metadata used for prompting
# ---------------------------------------------------------------------------
class ToolParameter(BaseModel):
    """Metadata for one tool parameter."""

    name: str
    description: str = ""
    type: str

    def describe(self) -> str:
        """Render the parameter for the system prompt."""
        return (
            f"JSON Definition of the parameter: {self.name}; "
            f"Description: {self.description}; Type: {self.type}"
        )


class ToolMetadata(BaseModel):
    """Name, description and parameters of a tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: List[ToolParameter] = Field(default_factory=list)


class RunResult(BaseModel):
    """Outcome of a successful run."""

    stop_reason: str
    turns: int
    messages: List[ChatMessage] = Field(default_factory=list)
