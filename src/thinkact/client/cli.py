"""CLI client for the thinkact API."""

from __future__ import annotations

import logging
import time
from typing import (
    Any,
    Dict,
    Mapping,
    Tuple,
    cast,
)

import httpx

from thinkact.common import (
    AnsiColors,
    colored_print,
)
from thinkact.config import settings

logger = logging.getLogger(__name__)

# Agent turns can take several model calls and tool runs.
_PROMPT_TIMEOUT = 600.0


# ---------------------------------------------------------------------------
# CLI Client
# ---------------------------------------------------------------------------
def get_user_message() -> Tuple[str, bool]:
    """
    Get a message from the user via standard input.

    Returns:
        Tuple of (user_input, success_flag)
        The success_flag is False if input couldn't be read (e.g., Ctrl+C)
    """
    try:
        user_input = input().strip()
        return user_input, True
    except (EOFError, KeyboardInterrupt):
        return "", False


def call_api(
    endpoint: str,
    data: Dict[str, Any],
    max_retries: int = 5,
    timeout: float = 30.0,
    transport: httpx.BaseTransport | None = None,
) -> Dict[str, Any]:
    """
    Make a POST request to the API and return the JSON body.

    Connection failures are retried with exponential backoff while the API starts up; any other
    failure is reported as ``{"error": "..."}``.
    """
    api_url = f"http://localhost:{settings.API_PORT}{endpoint}"

    for attempt in range(max_retries):
        try:
            with httpx.Client(timeout=timeout, transport=transport) as client:
                response = client.post(api_url, json=data)
                response.raise_for_status()
                return cast(Dict[str, Any], response.json())
        except httpx.ConnectError as e:
            if attempt < max_retries - 1:
                retry_delay = 0.5 * (2**attempt)  # exponential backoff: 0.5s, 1s, 2s, 4s...
                logger.info(
                    "API not ready yet, retrying in %.1f seconds (attempt %d/%d)...",
                    retry_delay,
                    attempt + 1,
                    max_retries,
                )
                time.sleep(retry_delay)
                continue
            logger.error("API connection error: %s", e)
            return {"error": f"Error connecting to API: {e}"}
        except httpx.HTTPStatusError as e:
            detail = str(e)
            try:
                detail = e.response.json().get("detail", detail)
            except ValueError:
                pass
            logger.error("API returned %d: %s", e.response.status_code, detail)
            return {"error": f"API error: {detail}"}
        except httpx.HTTPError as e:
            logger.error("API request error: %s", e)
            return {"error": f"Error calling API: {e}"}

    return {"error": f"Failed to connect to API after {max_retries} attempts"}


def render_update(update: Mapping[str, Any]) -> None:
    """Print one session update."""
    kind = update.get("kind")
    if kind == "agent_thought":
        colored_print(f"💭 {update.get('text')}", AnsiColors.MAGENTA)
    elif kind == "tool_call":
        colored_print(
            f"🔧 [{update.get('tool_call_id')}] {update.get('title')} {update.get('raw_input')}",
            AnsiColors.BLUE,
        )
    elif kind == "tool_call_update":
        output = update.get("raw_output") or {}
        colored_print(
            f"✅ [{update.get('tool_call_id')}] {output.get('result')}", AnsiColors.GREEN
        )
    else:
        colored_print(str(update.get("text", "")), AnsiColors.YELLOW)


def run_cli() -> None:
    """Run the CLI client that communicates with the API."""
    # Create a new session
    session_response = call_api("/sessions", {})
    session_id = session_response.get("session_id")

    if not session_id:
        colored_print(
            f"⚠️ Failed to create a session: {session_response.get('error')}", AnsiColors.RED
        )
        return

    colored_print("\n🔮 thinkact shell - type 'exit' or 'quit' (or Ctrl+C) to exit", AnsiColors.GREEN)
    while True:
        colored_print("\n🧑 You: ", AnsiColors.BLUE, end="")
        user_msg, ok = get_user_message()
        if not ok:
            break  # Exit if user input couldn't be retrieved (e.g., Ctrl+C)
        if user_msg.lower() in {"exit", "quit"}:
            break
        if not user_msg:
            continue

        response = call_api(
            f"/sessions/{session_id}/prompt", {"prompt": user_msg}, timeout=_PROMPT_TIMEOUT
        )
        if "error" in response:
            colored_print(f"⚠️ {response['error']}", AnsiColors.RED)
            continue

        for update in response.get("updates", []):
            render_update(update)
        if response.get("stop_reason") == "cancelled":
            colored_print("⚠️ Turn cancelled", AnsiColors.RED)


if __name__ == "__main__":
    run_cli()
