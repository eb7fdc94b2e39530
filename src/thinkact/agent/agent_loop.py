"""Main orchestration loop for thinkact: Think -> Act -> (dispatch | stop) -> Observe."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from thinkact.agent.cancellation import CancellationToken
from thinkact.agent.events import EventSink
from thinkact.agent.model_client import (
    BaseModelClient,
    load_model_client,
)
from thinkact.agent.prompts import (
    DEFAULT_SYSTEM_PROMPT,
    load_system_prompt_template,
    render_system_prompt,
)
from thinkact.agent.structured import predict
from thinkact.agent.tool_executor import (
    execute_tool,
    format_tool_result,
)
from thinkact.config import settings
from thinkact.core.conversation import Conversation
from thinkact.core.errors import (
    MaxTurnsExceededError,
    UnsupportedActionError,
)
from thinkact.core.schema import (
    Action,
    ActionType,
    ChatMessage,
    Observation,
    Role,
    RunResult,
    Thought,
)
from thinkact.tools import (
    BaseTool,
    ToolRegistry,
    default_tools,
)

logger = logging.getLogger(__name__)

THOUGHT_DESCRIPTION = "Thoughts about the action to perform next, based on current chat history"
ACTION_DESCRIPTION = (
    "Action to take, based on the chat history. Choose within _done (accompanied with a stop "
    "reason), if you think the conversation should stop, or tool_call (accompanied by a tool "
    "call) if you think the conversation should continue and you need more input from available "
    "tooling."
)
OBSERVATION_DESCRIPTION = "Observation about the current state of the task, based on chat history"


class AgentState(str, Enum):
    """Phases of a run, in the order they are visited."""

    INIT = "init"
    THINKING = "thinking"
    ACTING = "acting"
    DISPATCHING = "dispatching"
    OBSERVING = "observing"
    STOPPED = "stopped"


# ---------------------------------------------------------------------------
# Agent
# ---------------------------------------------------------------------------
class ReActAgent:
    """
    Drives a model through the ReAct loop until it chooses to stop.

    The agent itself holds no conversation: every :meth:`run` works on its own
    :class:`Conversation`, so one agent can serve several runs.  The tool registry is frozen here
    and only read afterwards.
    """

    def __init__(
        self,
        client: BaseModelClient,
        tools: ToolRegistry | Iterable[BaseTool],
        system_prompt_template: str = DEFAULT_SYSTEM_PROMPT,
        max_turns: int | None = None,
    ):
        if max_turns is not None and max_turns < 1:
            raise ValueError("max_turns must be a positive integer or None.")
        self.client = client
        self.tools = tools if isinstance(tools, ToolRegistry) else ToolRegistry(tools)
        self.tools.freeze()
        self.system_prompt_template = system_prompt_template
        self.max_turns = max_turns

    def build_system_prompt(self) -> ChatMessage:
        """Render the template with the table of registered tools."""
        content = render_system_prompt(self.system_prompt_template, self.tools)
        return ChatMessage(role=Role.SYSTEM, content=content)

    # -- phases -------------------------------------------------------------
    def think(self, conversation: Conversation, cancel_token: CancellationToken | None = None) -> str:
        thought = predict(
            self.client, conversation, Thought, "thought", THOUGHT_DESCRIPTION, cancel_token
        )
        conversation.append(Role.ASSISTANT, thought.thought)
        return thought.thought

    def act(self, conversation: Conversation, cancel_token: CancellationToken | None = None) -> Action:
        return predict(
            self.client, conversation, Action, "action", ACTION_DESCRIPTION, cancel_token
        )

    def observe(
        self, conversation: Conversation, cancel_token: CancellationToken | None = None
    ) -> str:
        observation = predict(
            self.client,
            conversation,
            Observation,
            "observation",
            OBSERVATION_DESCRIPTION,
            cancel_token,
        )
        conversation.append(Role.ASSISTANT, observation.observation)
        return observation.observation

    def dispatch(
        self,
        conversation: Conversation,
        action: Action,
        cancel_token: CancellationToken | None = None,
    ):
        """Run the tool requested by *action* and append its result as a user message."""
        call = action.tool_call
        if call is None:
            raise UnsupportedActionError("A 'tool_call' action carries no tool call.")
        result = execute_tool(self.tools, call, cancel_token)
        logger.info("Tool '%s' returned: %s", call.name, result)
        conversation.append(Role.USER, format_tool_result(call.name, result))
        return result

    # -- loop ---------------------------------------------------------------
    def run(
        self,
        prompt: str,
        sink: EventSink | None = None,
        *,
        cancel_token: CancellationToken | None = None,
        conversation: Conversation | None = None,
    ) -> RunResult:
        """
        Run the loop for *prompt* until the model emits ``_done``.

        Parameters
        ----------
        prompt:
            The user's request.
        sink:
            Receives thought/action/tool-end/observation/stop events.
        cancel_token:
            Checked before every step and passed to the model client and tools.
        conversation:
            A conversation to continue.  A fresh one is used when omitted; the system prompt is
            only added to an empty conversation.

        Raises
        ------
        AgentError
            Any failure ends the run; see :mod:`thinkact.core.errors`.
        """
        sink = sink or EventSink()
        conversation = conversation if conversation is not None else Conversation()

        state = AgentState.INIT
        if len(conversation) == 0:
            system = self.build_system_prompt()
            conversation.append(system.role, system.content)
        conversation.append(Role.USER, prompt)
        logger.info("Starting run with %d tools: %s", len(self.tools), self.tools.names())

        turns = 0
        while True:
            if self.max_turns is not None and turns >= self.max_turns:
                raise MaxTurnsExceededError(
                    f"The model did not stop within {self.max_turns} turns."
                )
            turns += 1
            logger.debug("Turn %d", turns)

            state = self._enter(state, AgentState.THINKING, cancel_token)
            thought = self.think(conversation, cancel_token)
            sink.on_thought(thought)

            state = self._enter(state, AgentState.ACTING, cancel_token)
            action = self.act(conversation, cancel_token)

            if action.type == ActionType.DONE.value:
                if action.stop_reason is None:
                    raise UnsupportedActionError("A '_done' action carries no stop reason.")
                state = self._enter(state, AgentState.STOPPED, None)
                sink.on_stop(action.stop_reason.reason)
                return RunResult(
                    stop_reason=action.stop_reason.reason,
                    turns=turns,
                    messages=list(conversation.messages),
                )
            if action.type != ActionType.TOOL_CALL.value:
                raise UnsupportedActionError(f"Unsupported action type: {action.type}")

            sink.on_action(action)
            state = self._enter(state, AgentState.DISPATCHING, cancel_token)
            result = self.dispatch(conversation, action, cancel_token)
            sink.on_tool_end(result)

            state = self._enter(state, AgentState.OBSERVING, cancel_token)
            observation = self.observe(conversation, cancel_token)
            sink.on_observation(observation)

    @staticmethod
    def _enter(
        current: AgentState, target: AgentState, token: CancellationToken | None
    ) -> AgentState:
        if token is not None:
            token.raise_if_cancelled()
        logger.debug("State %s -> %s", current.value, target.value)
        return target


def build_default_agent(client: BaseModelClient | None = None) -> ReActAgent:
    """Assemble an agent from settings: model client, built-in tools, prompt and turn limit."""
    return ReActAgent(
        client=client or load_model_client(),
        tools=default_tools(),
        system_prompt_template=load_system_prompt_template(settings.SYSTEM_PROMPT_PATH),
        max_turns=settings.MAX_TURNS,
    )
