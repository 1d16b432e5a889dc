import io

import pytest

from script2chat.errors import StoreError
from script2chat.models import Conversation, Message, User
from script2chat.parser import ScriptParser
from script2chat.resolver import user_id_for
from script2chat.storage import EntityStore, Found, NotFound, ScriptStore


def _user(name):
    return User(id=user_id_for(name), name=name, password="password")


def test_lookup_missing_user_is_plain_not_found(sqlite_store):
    result = sqlite_store.lookup_user(user_id_for("NOBODY"))
    assert isinstance(result, NotFound)
    assert result.error is None


def test_add_and_lookup_user(sqlite_store):
    romeo = _user("ROMEO")
    sqlite_store.add_user(romeo)

    result = sqlite_store.lookup_user(romeo.id)

    assert isinstance(result, Found)
    assert result.entity.id == romeo.id
    assert result.entity.name == "ROMEO"
    assert result.entity.created_at == romeo.created_at


def test_add_user_is_idempotent(sqlite_store):
    sqlite_store.add_user(_user("ROMEO"))
    sqlite_store.add_user(_user("ROMEO"))
    assert sqlite_store.get_stats()["total_users"] == 1


def test_lookup_conversation(sqlite_store):
    narrator = _user("NARRATOR")
    sqlite_store.add_user(narrator)
    conversation = Conversation(owner_id=narrator.id, title="R&J_ACT I")
    sqlite_store.add_conversation(conversation)

    result = sqlite_store.lookup_conversation(conversation.id)

    assert isinstance(result, Found)
    assert result.entity.title == "R&J_ACT I"
    assert result.entity.owner_id == narrator.id
    assert isinstance(sqlite_store.lookup_conversation(narrator.id), NotFound)


def test_lookup_on_broken_connection_reports_error(sqlite_store):
    sqlite_store.close()
    result = sqlite_store.lookup_user(user_id_for("ROMEO"))
    assert isinstance(result, NotFound)
    assert result.error


def test_write_on_broken_connection_raises(sqlite_store):
    sqlite_store.close()
    with pytest.raises(StoreError):
        sqlite_store.add_user(_user("ROMEO"))


def test_parsed_script_round_trips_through_sqlite(sqlite_store):
    ScriptParser(sqlite_store).parse(
        io.StringIO("ACT I\nROMEO\nHello.\nJULIET\nHi.\nROMEO\nBye.\nACT II\nNURSE\nMadam!\n"),
        "R&J",
    )

    conversations = sqlite_store.list_conversations()
    assert [(c["title"], c["message_count"]) for c in conversations] == [
        ("R&J_ACT I", 3),
        ("R&J_ACT II", 1),
    ]

    transcript = sqlite_store.get_conversation(conversations[0]["id"])
    assert transcript["owner"] == "NARRATOR"
    assert [(m["author"], m["content"]) for m in transcript["messages"]] == [
        ("ROMEO", "Hello."),
        ("JULIET", "Hi."),
        ("ROMEO", "Bye."),
    ]

    stats = sqlite_store.get_stats()
    assert stats["total_users"] == 4
    assert stats["total_conversations"] == 2
    assert stats["total_messages"] == 4
    assert stats["newest_user"] == "NURSE"
    assert stats["most_active_user"] == "ROMEO"
    assert stats["avg_messages_per_conversation"] == 2.0


def test_most_active_tie_goes_to_first_to_reach_count(sqlite_store):
    ScriptParser(sqlite_store).parse(
        io.StringIO("ACT I\nJULIET\nOne.\nROMEO\nTwo.\n"), "R&J"
    )
    assert sqlite_store.get_stats()["most_active_user"] == "JULIET"


def test_list_conversations_keyword_and_paging(sqlite_store):
    narrator = _user("NARRATOR")
    sqlite_store.add_user(narrator)
    for title in ("R&J_ACT I", "R&J_ACT II", "Tempest_ACT I"):
        sqlite_store.add_conversation(Conversation(owner_id=narrator.id, title=title))

    assert [c["title"] for c in sqlite_store.list_conversations(keyword="Tempest")] == [
        "Tempest_ACT I"
    ]
    assert [c["title"] for c in sqlite_store.list_conversations(limit=1, offset=1)] == [
        "R&J_ACT II"
    ]


def test_get_missing_conversation(sqlite_store):
    assert sqlite_store.get_conversation("no-such-id") is None


def test_empty_stats(sqlite_store):
    stats = sqlite_store.get_stats()
    assert stats["total_messages"] == 0
    assert stats["newest_user"] is None
    assert stats["most_active_user"] is None
    assert stats["avg_messages_per_conversation"] == 0


def test_message_fields_persist(sqlite_store):
    narrator = _user("NARRATOR")
    sqlite_store.add_user(narrator)
    conversation = Conversation(owner_id=narrator.id, title="JulC_ACT III")
    sqlite_store.add_conversation(conversation)
    sqlite_store.add_message(
        Message(conversation_id=conversation.id, author_id=narrator.id, content="Et tu, Brute?")
    )

    [message] = sqlite_store.get_conversation(str(conversation.id))["messages"]
    assert message["author"] == "NARRATOR"
    assert message["content"] == "Et tu, Brute?"


def test_keyword_wildcards_match_literally(sqlite_store):
    narrator = _user("NARRATOR")
    sqlite_store.add_user(narrator)
    for title in ("R&J_ACT I", "R&JxACT I", "Tempest_100% ACT I", "Tempest_100 ACT I"):
        sqlite_store.add_conversation(Conversation(owner_id=narrator.id, title=title))

    assert [c["title"] for c in sqlite_store.list_conversations(keyword="J_A")] == ["R&J_ACT I"]
    assert [c["title"] for c in sqlite_store.list_conversations(keyword="100%")] == [
        "Tempest_100% ACT I"
    ]


def test_open_under_a_file_raises_store_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    with pytest.raises(StoreError):
        ScriptStore(blocker / "script2chat.db")


def test_open_corrupt_database_raises_store_error(tmp_path):
    db_path = tmp_path / "script2chat.db"
    db_path.write_bytes(b"this is not an sqlite database" * 100)
    with pytest.raises(StoreError):
        ScriptStore(db_path)


def test_both_stores_satisfy_entity_store(sqlite_store, memory_store):
    assert isinstance(sqlite_store, EntityStore)
    assert isinstance(memory_store, EntityStore)
