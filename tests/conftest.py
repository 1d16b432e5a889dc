from __future__ import annotations

import pytest

from script2chat.storage import Found, NotFound, ScriptStore


class MemoryStore:
    """Records every write in order; stands in for the SQLite store."""

    def __init__(self):
        self.users = {}
        self.conversations = []
        self.messages = []
        self.events = []
        self.lookups = 0

    def add_user(self, user):
        self.users.setdefault(user.id, user)
        self.events.append(("user", user.name))

    def add_conversation(self, conversation):
        self.conversations.append(conversation)
        self.events.append(("conversation", conversation.title))

    def add_message(self, message):
        self.messages.append(message)
        self.events.append(("message", self.users[message.author_id].name))

    def lookup_user(self, user_id):
        self.lookups += 1
        user = self.users.get(user_id)
        if user is None:
            return NotFound()
        return Found(entity=user)

    def name_of(self, user_id):
        return self.users[user_id].name

    def transcript(self):
        return [(self.name_of(m.author_id), m.content) for m in self.messages]


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def sqlite_store(tmp_path):
    store = ScriptStore(tmp_path / "data" / "script2chat.db")
    yield store
    store.close()
