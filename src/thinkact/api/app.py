"""
Session API for thinkact.

This module exposes the agent to a host process over HTTP.  Each session keeps its own conversation
and at most one turn in flight; a new prompt cancels the previous turn of the same session.
It exposes the following endpoints:
- **GET /health**  - liveness probe for health checks.
- **POST /sessions** - create a new session, returns a session ID.
- **GET /sessions** - list all active sessions.
- **POST /sessions/{id}/prompt** - run one agent turn: {"prompt": "..."}
- **POST /sessions/{id}/cancel** - cancel the turn currently running in a session.
"""

import logging
import secrets
import threading
from dataclasses import (
    dataclass,
    field,
)
from functools import lru_cache
from typing import (
    Any,
    Dict,
    List,
    Optional,
)

from fastapi import (
    Depends,
    FastAPI,
    HTTPException,
)

from thinkact.agent.agent_loop import (
    ReActAgent,
    build_default_agent,
)
from thinkact.agent.cancellation import CancellationToken
from thinkact.agent.events import EventSink
from thinkact.api.models import (
    CancelResponse,
    PromptRequest,
    PromptResponse,
    SessionResponse,
    SessionUpdate,
    StopReasonKind,
    ToolCallStatus,
    UpdateKind,
)
from thinkact.common import (
    AnsiColors,
    colored_print,
)
from thinkact.config import settings
from thinkact.core.conversation import Conversation
from thinkact.core.errors import (
    AgentError,
    ArgumentDecodeError,
    RunCancelledError,
    TransportError,
)
from thinkact.core.schema import Action

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Conversation and in-flight turn of one session."""

    conversation: Conversation = field(default_factory=Conversation)
    cancel_token: Optional[CancellationToken] = None


# Session storage (in-memory only; conversations do not survive a restart)
sessions: Dict[str, Session] = {}
_sessions_lock = threading.Lock()

app = FastAPI(title="thinkact API", version="0.1.0", description="ReAct agent session API")


# ---------------------------------------------------------------------------
# Event sink translating loop events into session updates
# ---------------------------------------------------------------------------
def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return str(value)


def _tool_title(name: str) -> str:
    if name == "Bash":
        return "Executing bash command"
    if name in {"Read", "Write", "Edit"}:
        return f"{name.rstrip('e')}ing file"
    return f"Calling {name}"


class SessionEventSink(EventSink):
    """
    Collects the updates of one turn.

    Tool calls get ids ``call_1``, ``call_2``, ... from the active tool-call counter so that the
    start and completion of each call can be correlated by the host.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.updates: List[SessionUpdate] = []
        self.tool_call_count = 0

    @property
    def current_call_id(self) -> str:
        return f"call_{self.tool_call_count}"

    def announce(self) -> None:
        self.updates.append(
            SessionUpdate(
                kind=UpdateKind.AGENT_MESSAGE,
                text=f"Starting to work on the request for session {self.session_id}",
            )
        )

    def on_thought(self, text: str) -> None:
        self.updates.append(SessionUpdate(kind=UpdateKind.AGENT_THOUGHT, text=text))

    def on_action(self, action: Action) -> None:
        if action.tool_call is None:
            return
        self.tool_call_count += 1
        try:
            raw_input: Any = action.tool_call.args_to_map()
        except ArgumentDecodeError:
            raw_input = [arg.parameter_value for arg in action.tool_call.args]
        self.updates.append(
            SessionUpdate(
                kind=UpdateKind.TOOL_CALL,
                tool_call_id=self.current_call_id,
                title=_tool_title(action.tool_call.name),
                status=ToolCallStatus.PENDING,
                raw_input=_jsonable(raw_input),
            )
        )

    def on_tool_end(self, result: Any) -> None:
        self.updates.append(
            SessionUpdate(
                kind=UpdateKind.TOOL_CALL_UPDATE,
                tool_call_id=self.current_call_id,
                status=ToolCallStatus.COMPLETED,
                raw_output={"result": _jsonable(result)},
            )
        )

    def on_observation(self, text: str) -> None:
        self.updates.append(
            SessionUpdate(kind=UpdateKind.AGENT_MESSAGE, text="### Observation\n" + text)
        )

    def on_stop(self, reason: str) -> None:
        self.updates.append(SessionUpdate(kind=UpdateKind.AGENT_MESSAGE, text=reason))


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_agent() -> ReActAgent:
    """Build the agent once; it is shared by every session (it holds no conversation)."""
    return build_default_agent()


def new_session_id() -> str:
    return "sess_" + secrets.token_hex(12)


def get_session(session_id: str) -> Session:
    """Return the session or answer 404."""
    with _sessions_lock:
        session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return session


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/health", summary="Health check")
async def health() -> dict[str, str]:
    """Return a simple liveness payload."""
    return {"status": "ok"}


@app.post("/sessions", response_model=SessionResponse, summary="Create a new session")
async def create_session() -> SessionResponse:
    """Create a new conversation session."""
    session_id = new_session_id()
    with _sessions_lock:
        sessions[session_id] = Session()
    logger.info("Created session %s", session_id)
    return SessionResponse(session_id=session_id)


@app.get("/sessions", response_model=List[str], summary="List active sessions")
async def list_sessions() -> List[str]:
    """List all active session IDs."""
    with _sessions_lock:
        return list(sessions.keys())


# Sync endpoints run in the threadpool, so a cancel request can arrive while a prompt is running.
@app.post(
    "/sessions/{session_id}/prompt", response_model=PromptResponse, summary="Run one agent turn"
)
def prompt_session(
    session_id: str, req: PromptRequest, agent: ReActAgent = Depends(get_agent)
) -> PromptResponse:
    """Run the agent on *req.prompt*, continuing the session's conversation."""
    session = get_session(session_id)

    token = CancellationToken()
    with _sessions_lock:
        previous, session.cancel_token = session.cancel_token, token
        conversation = session.conversation.copy()
    if previous is not None:
        logger.info("Cancelling previous turn of session %s", session_id)
        previous.cancel()

    sink = SessionEventSink(session_id)
    sink.announce()
    committed = False
    try:
        agent.run(req.prompt, sink, cancel_token=token, conversation=conversation)
    except RunCancelledError:
        logger.info("Turn of session %s was cancelled", session_id)
        return PromptResponse(
            session_id=session_id, stop_reason=StopReasonKind.CANCELLED, updates=sink.updates
        )
    except TransportError as exc:
        logger.warning("Model failure in session %s: %s", session_id, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except AgentError as exc:
        logger.warning("Agent failure in session %s: %s", session_id, exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    else:
        # Only the latest prompt of a session may store its conversation.
        with _sessions_lock:
            committed = session.cancel_token is token
            if committed:
                session.conversation = conversation
    finally:
        with _sessions_lock:
            if session.cancel_token is token:
                session.cancel_token = None

    if not committed:
        logger.info("Turn of session %s was superseded by a newer prompt", session_id)
        return PromptResponse(
            session_id=session_id, stop_reason=StopReasonKind.CANCELLED, updates=sink.updates
        )
    return PromptResponse(
        session_id=session_id, stop_reason=StopReasonKind.END_TURN, updates=sink.updates
    )


@app.post(
    "/sessions/{session_id}/cancel", response_model=CancelResponse, summary="Cancel running turn"
)
def cancel_session(session_id: str) -> CancelResponse:
    """Cancel the turn currently running in the session, if any."""
    session = get_session(session_id)
    with _sessions_lock:
        token = session.cancel_token
    if token is not None:
        token.cancel()
    return CancelResponse(session_id=session_id, cancelled=token is not None)


# ---------------------------------------------------------------------------
# Public helper to launch the API (imported by main.py)
# ---------------------------------------------------------------------------
def run_api(
    host: str = "0.0.0.0", port: int = 8000, reload: bool = False, log_level: str | None = None
) -> None:
    """Start a uvicorn server hosting *app*.

    Parameters
    ----------
    host, port:
        Bind address for the HTTP server.
    reload:
        If *True*, enable auto-reload (useful in development).
    log_level:
        Logging level to use (default from settings if not provided).
    """

    # Lazy import - keeps uvicorn an optional dependency at pkg-import time
    import uvicorn  # pylint: disable=import-outside-toplevel

    if log_level is None:  # Use the default from settings if not provided
        log_level = settings.LOG_LEVEL

    logger.info(
        "Starting thinkact API at %s:%d (reload=%s, log_level=%s)", host, port, reload, log_level
    )
    colored_print(f"🔮 thinkact API is running at http://localhost:{port}.", AnsiColors.GREEN)
    colored_print(f"Visit http://localhost:{port}/docs for API documentation.", AnsiColors.BLUE)
    uvicorn.run(
        "thinkact.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# ---------------------------------------------------------------------------
# `python -m thinkact.api.app` helper
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    run_api(reload=True)
