"""Chat session manager: conversation list, active log and the send cycle."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from riyl_chat.core.ids import generate_id, utcnow
from riyl_chat.core.models import ChatItem, Message, derive_title
from riyl_chat.errors import QuotaExceededError
from riyl_chat.gateway.client import CompletionGateway
from riyl_chat.log import get_logger
from riyl_chat.storage.codec import (
    DEFAULT_STORAGE_KEY,
    decode_conversations,
    encode_conversations,
)
from riyl_chat.storage.store import KeyValueStore

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
QUOTA_ERROR_MESSAGE = (
    "You have exceeded your API usage quota. Please check your plan or try again later."
)


def _settle_placeholder(conversation: ChatItem) -> ChatItem:
    """Replace a placeholder left by a process that exited mid-send."""
    if conversation.messages and conversation.messages[-1].is_placeholder:
        logger.warning("stale_placeholder_settled", conversation_id=conversation.id)
        return conversation.with_last_message(Message.bot(GENERIC_ERROR_MESSAGE))
    return conversation


@dataclass(frozen=True, slots=True)
class PendingSend:
    """An optimistic send waiting for its gateway reply."""

    conversation_id: str
    prompt: str


class ChatSessionManager:
    """Owns the conversation list and reconciles optimistic sends.

    All methods run on one event loop. A send suspends once, on the gateway
    call; selecting, deleting and searching stay usable while it is
    outstanding, and the reply always lands in the conversation that sent it.
    """

    def __init__(
        self,
        store: KeyValueStore,
        gateway: CompletionGateway,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        id_factory: Callable[[], str] = generate_id,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._store = store
        self._gateway = gateway
        self._storage_key = storage_key
        self._id_factory = id_factory
        self._clock = clock

        self._conversations: list[ChatItem] = [
            _settle_placeholder(c) for c in decode_conversations(store.read(storage_key))
        ]
        self._active_id: str | None = None
        self._messages: list[Message] = []
        self._pending: PendingSend | None = None
        self.draft = ""

        if self._conversations:
            first = self._conversations[0]
            self._active_id = first.id
            self._messages = list(first.messages)
        logger.info("session_restored", conversations=len(self._conversations))

    @property
    def conversations(self) -> list[ChatItem]:
        return list(self._conversations)

    @property
    def active_id(self) -> str | None:
        return self._active_id

    @property
    def active_conversation(self) -> ChatItem | None:
        if self._active_id is None:
            return None
        return self._find(self._active_id)

    @property
    def messages(self) -> list[Message]:
        """The active message log, in display order."""
        return list(self._messages)

    @property
    def pending(self) -> bool:
        return self._pending is not None

    @property
    def pending_id(self) -> str | None:
        """Id of the conversation awaiting a reply, if any."""
        return self._pending.conversation_id if self._pending else None

    def new_conversation(self) -> None:
        self._active_id = None
        self._messages = []

    def select_conversation(self, conversation_id: str) -> None:
        conversation = self._find(conversation_id)
        if conversation is None:
            return
        self._active_id = conversation.id
        self._messages = list(conversation.messages)

    def delete_conversation(self, conversation_id: str) -> None:
        remaining = [c for c in self._conversations if c.id != conversation_id]
        if len(remaining) == len(self._conversations):
            return
        self._conversations = remaining
        if self._active_id == conversation_id:
            self.new_conversation()
        logger.info("conversation_deleted", conversation_id=conversation_id)
        self._persist()

    def search(self, term: str) -> list[ChatItem]:
        if not term:
            return list(self._conversations)
        return [c for c in self._conversations if c.matches(term)]

    async def send(self, text: str) -> Message | None:
        """Send *text* to the gateway and record the exchange.

        Returns the bot message that replaced the placeholder, or None when
        the send was ignored (blank text or a request already in flight).
        """
        request = self.begin_send(text)
        if request is None:
            return None
        return await self.finish_send(request)

    def begin_send(self, text: str) -> PendingSend | None:
        """Apply the optimistic update for *text* and mark the session pending."""
        if not text.strip() or self._pending is not None:
            return None

        self._messages = self._messages + [Message.user(text), Message.bot()]

        if self._active_id is None:
            conversation = ChatItem(
                id=self._id_factory(),
                title=derive_title(text),
                query=text,
                created_at=self._clock(),
                messages=tuple(self._messages),
            )
            self._conversations.insert(0, conversation)
            self._active_id = conversation.id
            logger.info("conversation_created", conversation_id=conversation.id)
        else:
            self._replace(self._active_id, lambda c: c.with_messages(self._messages))

        self._pending = PendingSend(conversation_id=self._active_id, prompt=text)
        self.draft = ""
        self._persist()
        return self._pending

    async def finish_send(self, request: PendingSend) -> Message:
        """Await the gateway and write the reply over the placeholder."""
        origin_id = request.conversation_id
        try:
            reply = Message.bot(await self._gateway.complete(request.prompt))
        except QuotaExceededError as e:
            logger.warning("gateway_quota_exceeded", conversation_id=origin_id, error=str(e))
            reply = Message.bot(QUOTA_ERROR_MESSAGE)
        except asyncio.CancelledError:
            logger.warning("send_cancelled", conversation_id=origin_id)
            self._pending = None
            self._resolve(origin_id, Message.bot(GENERIC_ERROR_MESSAGE))
            raise
        except Exception as e:
            logger.error("gateway_error", conversation_id=origin_id, error=str(e))
            reply = Message.bot(GENERIC_ERROR_MESSAGE)
        finally:
            self._pending = None

        self._resolve(origin_id, reply)
        return reply

    def _resolve(self, origin_id: str, reply: Message) -> None:
        """Write *reply* over the placeholder of the originating conversation."""
        if self._find(origin_id) is None:
            logger.info("reply_dropped", conversation_id=origin_id)
            return
        self._replace(origin_id, lambda c: c.with_last_message(reply))
        if self._active_id == origin_id:
            self._messages = self._messages[:-1] + [reply]
        self._persist()

    def _find(self, conversation_id: str) -> ChatItem | None:
        for conversation in self._conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    def _replace(self, conversation_id: str, update: Callable[[ChatItem], ChatItem]) -> None:
        self._conversations = [
            update(c) if c.id == conversation_id else c for c in self._conversations
        ]

    def _persist(self) -> None:
        try:
            self._store.write(self._storage_key, encode_conversations(self._conversations))
        except OSError as e:
            logger.error("persist_failed", key=self._storage_key, error=str(e))
