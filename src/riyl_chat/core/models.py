"""Chat data models: messages and conversations."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from riyl_chat.core.types import Sender

TITLE_MAX_CHARS = 48
TITLE_ELLIPSIS = "…"
DEFAULT_TITLE = "New conversation"


def derive_title(text: str) -> str:
    """Build a conversation title from the first user message."""
    trimmed = text.strip()
    if not trimmed:
        return DEFAULT_TITLE
    if len(trimmed) > TITLE_MAX_CHARS:
        return trimmed[:TITLE_MAX_CHARS] + TITLE_ELLIPSIS
    return trimmed


@dataclass(frozen=True, slots=True)
class Message:
    sender: Sender
    text: str

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(sender=Sender.USER, text=text)

    @classmethod
    def bot(cls, text: str = "") -> Message:
        return cls(sender=Sender.BOT, text=text)

    @property
    def is_placeholder(self) -> bool:
        """A bot message with no text yet, i.e. awaiting a response."""
        return self.sender == Sender.BOT and not self.text

    def to_dict(self) -> dict[str, Any]:
        return {"sender": self.sender.value, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        text = data["text"]
        if not isinstance(text, str):
            raise TypeError(f"message text must be a string, got {type(text).__name__}")
        return cls(sender=Sender(data["sender"]), text=text)


@dataclass(frozen=True, slots=True)
class ChatItem:
    """A persisted conversation.

    Instances are never mutated; message updates produce a new ChatItem
    through ``with_messages`` so the title and creation time stay fixed.
    """

    id: str
    title: str
    query: str
    created_at: datetime
    messages: tuple[Message, ...] = field(default_factory=tuple)

    def with_messages(self, messages: list[Message] | tuple[Message, ...]) -> ChatItem:
        return replace(self, messages=tuple(messages))

    def with_last_message(self, message: Message) -> ChatItem:
        """Replace the trailing message (the pending placeholder)."""
        if not self.messages:
            return self.with_messages([message])
        return self.with_messages(self.messages[:-1] + (message,))

    def matches(self, term: str) -> bool:
        """Case-insensitive match against title and original query."""
        haystack = f"{self.title}{self.query}".casefold()
        return term.casefold() in haystack

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "query": self.query,
            "createdAt": self.created_at.isoformat(),
            "messages": [m.to_dict() for m in self.messages],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatItem:
        for key in ("id", "title", "query"):
            if not isinstance(data[key], str):
                raise TypeError(f"'{key}' must be a string")
        messages = data.get("messages", [])
        if not isinstance(messages, list):
            raise TypeError("'messages' must be a list")
        return cls(
            id=data["id"],
            title=data["title"],
            query=data["query"],
            created_at=datetime.fromisoformat(data["createdAt"]),
            messages=tuple(Message.from_dict(m) for m in messages),
        )
