"""
Model client interface for thinkact.

This module is the only place that *directly* calls an LLM.  Everything else (agent loop, tools,
prompts) stays model-agnostic and only relies on one capability: given a message history and a
response-format constraint, return the model's JSON text.

We support two back-ends out of the box:

1. **OpenAI** via the official SDK (requires ``OPENAI_API_KEY``).
2. **Any OpenAI-compatible server** (vLLM, llama.cpp, TGI's Messages API, ...) over plain httpx.

Additional providers can be added by subclassing :class:`BaseModelClient` and registering via
:func:`register_model_client`.

Retries and timeouts belong to the client; failures surface as :class:`TransportError`.
"""

import logging
from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Any,
    Callable,
    Dict,
    Mapping,
    Sequence,
    Type,
)

import httpx

from thinkact.agent.cancellation import (
    CancellationToken,
    run_cancellable,
)
from thinkact.config import settings
from thinkact.core.errors import (
    DecodeError,
    TransportError,
)
from thinkact.core.schema import ChatMessage

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Registry helpers
# ---------------------------------------------------------------------------
_CLIENT_REGISTRY: dict[str, Type["BaseModelClient"]] = {}


def register_model_client(name: str) -> Callable:
    """Decorator to register a model client class under *name*."""

    def wrapper(cls: Type["BaseModelClient"]) -> Type["BaseModelClient"]:
        _CLIENT_REGISTRY[name] = cls
        return cls

    return wrapper


def load_model_client(name: str | None = None) -> "BaseModelClient":
    """
    Factory that returns an instantiated model client.

    Fallback order:
    1. *name* arg
    2. ``settings.MODEL_CLIENT`` env option
    3. default: ``"openai"``
    """

    target = name or getattr(settings, "MODEL_CLIENT", "openai")
    cls = _CLIENT_REGISTRY.get(target.lower())
    if cls is None:
        raise ValueError(f"Model client '{target}' is not registered.")
    return cls()


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------
class BaseModelClient(ABC):
    """Abstract client producing structured JSON replies for a message history."""

    def structured_chat(
        self,
        messages: Sequence[ChatMessage],
        response_format: Mapping[str, Any],
        cancel_token: CancellationToken | None = None,
    ) -> str:
        """
        Return the model's reply, constrained by *response_format*.

        The blocking request runs through :func:`run_cancellable`, so a cancelled token interrupts
        the call itself rather than waiting for it to finish.
        """
        payload = [message.to_openai() for message in messages]
        return run_cancellable(self._complete, cancel_token, payload, dict(response_format))

    @abstractmethod
    def _complete(self, messages: list[Dict[str, str]], response_format: Dict[str, Any]) -> str:
        """Send one chat completion request and return the message content."""


# ---------------------------------------------------------------------------
# Concrete clients
# ---------------------------------------------------------------------------
@register_model_client("openai")
class OpenAIModelClient(BaseModelClient):
    """OpenAI SDK client using strict ``json_schema`` response formats."""

    def __init__(self, client: Any = None, model: str | None = None):
        if client is None:
            import openai  # pylint: disable=import-outside-toplevel

            client = openai.OpenAI(
                api_key=settings.OPENAI_API_KEY,
                base_url=settings.OPENAI_BASE_URL,
                timeout=settings.MODEL_TIMEOUT,
                max_retries=settings.MODEL_MAX_RETRIES,
            )
        self._client = client
        self.model = model or settings.OPENAI_MODEL

    def _complete(self, messages: list[Dict[str, str]], response_format: Dict[str, Any]) -> str:
        import openai  # pylint: disable=import-outside-toplevel

        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format=response_format,
            )
        except openai.OpenAIError as exc:
            logger.error("OpenAI request error: %s", exc)
            raise TransportError(f"Error calling OpenAI: {exc}") from exc

        content = resp.choices[0].message.content
        if not content:
            logger.error("OpenAI returned an empty response")
            raise DecodeError("Empty response from OpenAI")

        logger.debug("OpenAI response: %s", content)
        return content


@register_model_client("http")
class HTTPModelClient(BaseModelClient):
    """Client for OpenAI-compatible ``/chat/completions`` endpoints, over httpx."""

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        api_key: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        base_url = base_url or settings.OPENAI_BASE_URL
        if not base_url:
            raise ValueError("The 'http' model client needs OPENAI_BASE_URL to be set.")
        self.endpoint = base_url.rstrip("/") + "/chat/completions"
        self.model = model or settings.OPENAI_MODEL
        self._api_key = api_key or settings.OPENAI_API_KEY
        self._transport = transport

    def _complete(self, messages: list[Dict[str, str]], response_format: Dict[str, Any]) -> str:
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        payload = {"model": self.model, "messages": messages, "response_format": response_format}

        try:
            with httpx.Client(timeout=settings.MODEL_TIMEOUT, transport=self._transport) as client:
                resp = client.post(self.endpoint, json=payload, headers=headers)
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPError as exc:
            logger.error("Model endpoint request error: %s", exc)
            raise TransportError(f"Error calling {self.endpoint}: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"Model endpoint returned a non-JSON body: {exc}") from exc

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise TransportError(f"Unexpected response envelope from {self.endpoint}") from exc
        if not content:
            raise DecodeError(f"Empty response from {self.endpoint}")

        logger.debug("Model endpoint response: %s", content)
        return content
