"""Serialize the conversation list to a single JSON blob and back."""

from __future__ import annotations

import json

from riyl_chat.core.models import ChatItem
from riyl_chat.log import get_logger

logger = get_logger(__name__)

DEFAULT_STORAGE_KEY = "riyl-chat.conversations.v1"


def encode_conversations(conversations: list[ChatItem]) -> str:
    return json.dumps([c.to_dict() for c in conversations], ensure_ascii=False)


def decode_conversations(blob: str | None) -> list[ChatItem]:
    """Decode a stored blob, treating anything unusable as an empty store.

    Missing blobs, malformed or too deeply nested JSON and non-array
    payloads yield ``[]``.
    Records that do not have the conversation shape are dropped, as are
    later duplicates of an id already seen.
    """
    if blob is None:
        return []
    try:
        raw = json.loads(blob)
    except (json.JSONDecodeError, TypeError, RecursionError) as e:
        logger.warning("stored_conversations_malformed", error=str(e))
        return []
    if not isinstance(raw, list):
        logger.warning("stored_conversations_not_a_list", kind=type(raw).__name__)
        return []

    conversations: list[ChatItem] = []
    seen: set[str] = set()
    for index, record in enumerate(raw):
        try:
            item = ChatItem.from_dict(record)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("stored_conversation_dropped", index=index, error=str(e))
            continue
        if item.id in seen:
            logger.warning("stored_conversation_duplicate", index=index, id=item.id)
            continue
        seen.add(item.id)
        conversations.append(item)
    return conversations
