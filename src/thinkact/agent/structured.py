"""
Structured output adapter.

Turns a pydantic model into a strict ``json_schema`` response format, asks the model client for a
reply, and decodes the reply back into the model.  Decoding failures are errors: a partially
populated or default-valued result is never returned.
"""

from __future__ import annotations

import logging
from typing import (
    Any,
    Dict,
    Type,
    TypeVar,
)

from pydantic import (
    BaseModel,
    ValidationError,
)

from thinkact.agent.cancellation import CancellationToken
from thinkact.agent.model_client import BaseModelClient
from thinkact.core.conversation import Conversation
from thinkact.core.errors import DecodeError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_DROPPED_KEYS = {"title", "default"}


def _inline_refs(node: Any, defs: Dict[str, Any]) -> Any:
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str) and ref.startswith("#/$defs/"):
            target = dict(defs[ref.split("/")[-1]])
            extras = {k: v for k, v in node.items() if k != "$ref"}
            target.update(extras)
            return _inline_refs(target, defs)
        return {key: _inline_refs(value, defs) for key, value in node.items() if key != "$defs"}
    if isinstance(node, list):
        return [_inline_refs(item, defs) for item in node]
    return node


def _make_strict(node: Any) -> Any:
    if isinstance(node, dict):
        strict: Dict[str, Any] = {}
        for key, value in node.items():
            if key in _DROPPED_KEYS:
                continue
            if key == "properties":
                # property names are user data, not schema keywords
                strict[key] = {prop: _make_strict(sub) for prop, sub in value.items()}
            else:
                strict[key] = _make_strict(value)
        if "properties" in strict:
            strict["type"] = "object"
            strict["required"] = list(strict["properties"].keys())
            strict["additionalProperties"] = False
        return strict
    if isinstance(node, list):
        return [_make_strict(item) for item in node]
    return node


def strict_json_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """
    Build a schema that strict structured outputs accept.

    References are inlined, every object forbids additional properties and lists all of its
    properties as required (optional fields stay nullable through ``anyOf``).
    """
    schema = model.model_json_schema()
    inlined = _inline_refs(schema, schema.get("$defs", {}))
    return _make_strict(inlined)


def build_response_format(model: Type[BaseModel], name: str, description: str) -> Dict[str, Any]:
    """Wrap the strict schema of *model* in an OpenAI ``json_schema`` response format."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": name,
            "description": description,
            "schema": strict_json_schema(model),
            "strict": True,
        },
    }


def predict(
    client: BaseModelClient,
    conversation: Conversation,
    result_type: Type[M],
    name: str,
    description: str,
    cancel_token: CancellationToken | None = None,
) -> M:
    """
    Ask the model for a *result_type* given the current *conversation*.

    The conversation is only read; appending the result is up to the caller.

    Raises
    ------
    DecodeError
        If the reply is not JSON matching *result_type*.
    TransportError
        Propagated from the model client.
    """
    response_format = build_response_format(result_type, name, description)
    raw = client.structured_chat(conversation.messages, response_format, cancel_token=cancel_token)
    try:
        return result_type.model_validate_json(raw)
    except ValidationError as exc:
        logger.error("Failed to decode '%s' from model output: %s", name, exc)
        logger.debug("Raw model output: %s", raw)
        raise DecodeError(f"Model output does not match '{name}': {exc}") from exc
