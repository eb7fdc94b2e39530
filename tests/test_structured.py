"""Tests for the structured output adapter."""

import json

import pytest

from conftest import ScriptedModelClient
from thinkact.agent.structured import (
    build_response_format,
    predict,
    strict_json_schema,
)
from thinkact.core.conversation import Conversation
from thinkact.core.errors import (
    DecodeError,
    TransportError,
)
from thinkact.core.schema import (
    Action,
    Role,
    Thought,
)


def _objects(node):
    """Yield every object schema inside *node*."""
    if isinstance(node, dict):
        if "properties" in node:
            yield node
        for value in node.values():
            yield from _objects(value)
    elif isinstance(node, list):
        for item in node:
            yield from _objects(item)


def _conversation() -> Conversation:
    conversation = Conversation()
    conversation.append(Role.SYSTEM, "You are a test.")
    conversation.append(Role.USER, "Hello")
    return conversation


def test_strict_schema_has_no_references_and_closed_objects() -> None:
    """Every object is closed and fully required; references are inlined."""
    schema = strict_json_schema(Action)
    assert "$ref" not in json.dumps(schema)
    assert "$defs" not in schema
    objects = list(_objects(schema))
    # Action, StopReason, ToolCall, ToolCallArgument
    assert len(objects) == 4
    for obj in objects:
        assert obj["additionalProperties"] is False
        assert obj["required"] == list(obj["properties"])
        assert "title" not in obj


def test_strict_schema_keeps_enum_and_descriptions() -> None:
    schema = strict_json_schema(Action)
    assert schema["properties"]["type"]["enum"] == ["_done", "tool_call"]
    assert "Reason why" in schema["properties"]["stop_reason"]["description"]
    assert "default" not in json.dumps(schema)


def test_response_format_is_strict_json_schema() -> None:
    response_format = build_response_format(Thought, "thought", "Think first")
    assert response_format["type"] == "json_schema"
    assert response_format["json_schema"]["name"] == "thought"
    assert response_format["json_schema"]["description"] == "Think first"
    assert response_format["json_schema"]["strict"] is True
    assert response_format["json_schema"]["schema"]["required"] == ["thought"]


def test_predict_decodes_reply_without_touching_history() -> None:
    conversation = _conversation()
    client = ScriptedModelClient(['{"thought": "plan"}'])

    result = predict(client, conversation, Thought, "thought", "desc")

    assert result == Thought(thought="plan")
    assert len(conversation) == 2
    assert client.calls[0]["messages"] == conversation.to_openai()


@pytest.mark.parametrize(
    "reply",
    [
        "not json at all",
        "{}",
        '{"thought": 42}',
        '{"thought": "x", "extra": true',
    ],
)
def test_predict_raises_decode_error_on_bad_output(reply: str) -> None:
    """A reply that does not fit the shape is an error, never a zero value."""
    client = ScriptedModelClient([reply])
    with pytest.raises(DecodeError):
        predict(client, _conversation(), Thought, "thought", "desc")


def test_predict_rejects_action_with_mismatched_payload() -> None:
    client = ScriptedModelClient(['{"type": "_done", "stop_reason": null, "tool_call": null}'])
    with pytest.raises(DecodeError):
        predict(client, _conversation(), Action, "action", "desc")


def test_predict_propagates_transport_errors() -> None:
    client = ScriptedModelClient([TransportError("rate limited")])
    with pytest.raises(TransportError, match="rate limited"):
        predict(client, _conversation(), Thought, "thought", "desc")
