"""
Shared fixtures: a scripted model client and a small arithmetic toolkit.

Run with:
$ pytest -q
"""

from typing import (
    Any,
    Dict,
    Iterable,
    List,
)

import pytest
from pydantic import BaseModel

from thinkact.agent.model_client import BaseModelClient
from thinkact.core.schema import (
    Action,
    Observation,
    Thought,
)
from thinkact.tools import (
    FunctionTool,
    ToolParams,
    ToolRegistry,
)


class ScriptedModelClient(BaseModelClient):
    """Model stub replaying canned replies in order and recording every request."""

    def __init__(self, replies: Iterable[Any]):
        self.replies: List[Any] = list(replies)
        self.calls: List[Dict[str, Any]] = []

    def _complete(self, messages: list[Dict[str, str]], response_format: Dict[str, Any]) -> str:
        self.calls.append({"messages": messages, "response_format": response_format})
        if not self.replies:
            raise AssertionError("The scripted model ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, BaseModel):
            return reply.model_dump_json()
        return reply

    @property
    def schema_names(self) -> List[str]:
        return [call["response_format"]["json_schema"]["name"] for call in self.calls]


def thought(text: str) -> Thought:
    return Thought(thought=text)


def observation(text: str) -> Observation:
    return Observation(observation=text)


def add_then_stop() -> List[Any]:
    """One tool turn calling ``add(2, 3)``, then a turn that stops."""
    return [
        thought("I should add the numbers."),
        Action.call("add", x=2, y=3),
        observation("The sum is 5."),
        thought("I have the answer."),
        Action.done("2 + 3 = 5"),
    ]


class AddParams(ToolParams):
    x: int
    y: int


@pytest.fixture
def add_calls() -> List[Dict[str, Any]]:
    return []


@pytest.fixture
def registry(add_calls: List[Dict[str, Any]]) -> ToolRegistry:
    def add(params: AddParams) -> int:
        """Add two integers x and y."""
        add_calls.append(params.model_dump())
        return params.x + params.y

    def fail(params: AddParams) -> int:
        """Always fails."""
        raise ZeroDivisionError("nope")

    return ToolRegistry([FunctionTool(add, name="add"), FunctionTool(fail, name="fail")])
