"""Turn accumulated dialogue into stored messages."""

from __future__ import annotations

from uuid import UUID

from .models import Message
from .storage import EntityStore


class MessageEmitter:
    def __init__(self, store: EntityStore):
        self.store = store

    def flush(self, buffer: str, speaker_id: UUID, conversation_id: UUID) -> Message | None:
        """Store ``buffer`` as a message, or do nothing if it is blank.

        The caller owns the buffer and resets it after flushing.
        """
        if not buffer.strip():
            return None
        message = Message(conversation_id=conversation_id, author_id=speaker_id, content=buffer)
        self.store.add_message(message)
        return message
