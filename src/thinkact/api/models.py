"""
Pydantic models for thinkact API requests and responses.
This module defines the request and response schemas used by the thinkact API.
"""

from enum import Enum
from typing import (
    Any,
    List,
    Optional,
)

from pydantic import (
    BaseModel,
    Field,
)


# ---------------------------------------------------------------------------
# Pydantic request / response schema
# ---------------------------------------------------------------------------
class SessionResponse(BaseModel):
    """Response with session information."""

    session_id: str


class PromptRequest(BaseModel):
    """Incoming user prompt."""

    prompt: str = Field(..., min_length=1, description="User prompt for the agent")


class UpdateKind(str, Enum):
    """Kinds of session updates streamed back to the host."""

    AGENT_MESSAGE = "agent_message"
    AGENT_THOUGHT = "agent_thought"
    TOOL_CALL = "tool_call"
    TOOL_CALL_UPDATE = "tool_call_update"


class ToolCallStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class SessionUpdate(BaseModel):
    """One progress notification produced while the agent works on a prompt."""

    kind: UpdateKind
    text: Optional[str] = None
    tool_call_id: Optional[str] = None
    title: Optional[str] = None
    status: Optional[ToolCallStatus] = None
    raw_input: Optional[Any] = None
    raw_output: Optional[Any] = None


class StopReasonKind(str, Enum):
    END_TURN = "end_turn"
    CANCELLED = "cancelled"


class PromptResponse(BaseModel):
    """API response returned once the agent's turn is over."""

    session_id: str
    stop_reason: StopReasonKind
    updates: List[SessionUpdate] = Field(default_factory=list)


class CancelResponse(BaseModel):
    session_id: str
    cancelled: bool
