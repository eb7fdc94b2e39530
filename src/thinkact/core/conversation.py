"""Message history management for the ReAct loop."""

from __future__ import annotations

from typing import (
    Dict,
    Iterable,
    Iterator,
    List,
    Tuple,
)

from thinkact.core.schema import (
    ChatMessage,
    Role,
)


class Conversation:
    """
    Append-only log of chat messages owned by a single run.

    A system message is only accepted as the first entry.  ``version`` grows by one on every append,
    so a caller holding a snapshot can tell whether the log moved on.
    """

    def __init__(self, messages: Iterable[ChatMessage] = ()):
        self._messages: List[ChatMessage] = []
        for message in messages:
            self._append(message)

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def version(self) -> int:
        return len(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self.messages)

    def append(self, role: Role | str, content: str) -> ChatMessage:
        """Create a message and add it to the end of the log."""
        message = ChatMessage(role=Role(role), content=content)
        self._append(message)
        return message

    def _append(self, message: ChatMessage) -> None:
        if message.role is Role.SYSTEM and self._messages:
            raise ValueError("A system message can only be the first entry of a conversation.")
        self._messages.append(message)

    def copy(self) -> "Conversation":
        """Return an independent conversation holding the same messages."""
        return Conversation(self._messages)

    def to_openai(self) -> List[Dict[str, str]]:
        return [message.to_openai() for message in self._messages]
