"""Start a new conversation at each act boundary."""

from __future__ import annotations

import logging
from uuid import UUID

from .models import Conversation
from .resolver import EntityResolver
from .storage import EntityStore

logger = logging.getLogger(__name__)


class ConversationBuilder:
    def __init__(self, store: EntityStore, resolver: EntityResolver):
        self.store = store
        self.resolver = resolver

    def start_conversation(self, title_prefix: str, raw_act_line: str) -> UUID:
        """Create a narrator-owned conversation titled ``<prefix>_<act line>``."""
        owner_id = self.resolver.resolve_narrator()
        conversation = Conversation(owner_id=owner_id, title=f"{title_prefix}_{raw_act_line}")
        self.store.add_conversation(conversation)
        logger.debug("Started conversation '%s' (%s)", conversation.title, conversation.id)
        return conversation.id
