"""The conversation shown on screen.

Hides the internal representation of chat messages. Messages are owned by
value; only the most recent one may be rewritten, which is how a reply
that is still streaming in gets updated.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from ..llm.models import ChatMessage as WireMessage


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass
class ChatMessage:
    """A chat message in the conversation."""

    role: Role
    content: str


class Conversation:
    """Ordered, append-mostly list of chat messages.

    Mutated only from the UI thread.
    """

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []
        # Index of the message currently being written by a request
        self._live: int | None = None

    def append(self, role: Role, content: str) -> ChatMessage:
        msg = ChatMessage(role=role, content=content)
        self._messages.append(msg)
        return msg

    def notice(self, content: str) -> ChatMessage:
        """Append a system notice."""
        return self.append(Role.SYSTEM, content)

    def begin_live(self, role: Role, content: str) -> ChatMessage:
        """Append a message that in-flight output will rewrite."""
        msg = self.append(role, content)
        self._live = len(self._messages) - 1
        return msg

    def end_live(self) -> None:
        self._live = None

    @property
    def live(self) -> bool:
        return self._live is not None

    def replace_last(self, content: str, role: Role | None = None) -> None:
        """Rewrite the most recent message.

        Raises:
            IndexError: If the conversation is empty
        """
        if not self._messages:
            raise IndexError("replace_last on empty conversation")
        msg = self._messages[-1]
        msg.content = content
        if role is not None:
            msg.role = role

    def pop_last(self) -> ChatMessage:
        if self._live == len(self._messages) - 1:
            self._live = None
        return self._messages.pop()

    def clear(self) -> None:
        self._messages.clear()
        self._live = None

    def reset(self, notice: str) -> None:
        """Drop every message and leave a single system notice."""
        self.clear()
        self.notice(notice)

    @property
    def last(self) -> ChatMessage | None:
        return self._messages[-1] if self._messages else None

    def history(self) -> list[WireMessage]:
        """User and assistant turns to send to a provider.

        System notices are local to the screen, and a live message is
        the reply being produced, so neither is sent.
        """
        return [
            WireMessage(role=msg.role.value, content=msg.content)
            for i, msg in enumerate(self._messages)
            if msg.role in (Role.USER, Role.ASSISTANT) and i != self._live
        ]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self._messages)

    def __getitem__(self, index: int) -> ChatMessage:
        return self._messages[index]
