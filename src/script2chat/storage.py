"""SQLite storage for users, conversations and messages."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Generic, Protocol, TypeVar, runtime_checkable
from uuid import UUID

from pydantic import BaseModel

from .errors import StoreError
from .models import Conversation, Message, User

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Found(BaseModel, Generic[T]):
    entity: T


class NotFound(BaseModel):
    """No entity under the requested id.

    ``error`` is set when the lookup itself failed, so callers can tell a
    transport problem from a plain miss.
    """

    error: str | None = None


@runtime_checkable
class EntityStore(Protocol):
    """Writes and lookups the parser needs from a backing store."""

    def add_user(self, user: User): ...

    def add_conversation(self, conversation: Conversation): ...

    def add_message(self, message: Message): ...

    def lookup_user(self, user_id: UUID) -> Found[User] | NotFound: ...


class ScriptStore:
    """SQLite-backed storage for parsed scripts."""

    def __init__(self, db_path: Path):
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(str(db_path))
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA journal_mode=WAL")
            self._migrate()
        except (OSError, sqlite3.Error) as exc:
            raise StoreError(f"Cannot open database {db_path}: {exc}") from exc

    def _migrate(self):
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                password TEXT NOT NULL,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS conversations (
                id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                title TEXT NOT NULL,
                created_at TEXT NOT NULL,
                FOREIGN KEY (owner_id) REFERENCES users(id)
            );

            CREATE TABLE IF NOT EXISTS messages (
                id TEXT PRIMARY KEY,
                conversation_id TEXT NOT NULL,
                author_id TEXT NOT NULL,
                content TEXT NOT NULL,
                created_at TEXT NOT NULL,
                FOREIGN KEY (conversation_id) REFERENCES conversations(id),
                FOREIGN KEY (author_id) REFERENCES users(id)
            );

            CREATE INDEX IF NOT EXISTS idx_messages_conv
                ON messages(conversation_id);

            CREATE TABLE IF NOT EXISTS import_metadata (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                import_time TEXT NOT NULL,
                file_path TEXT,
                title_prefix TEXT,
                conversations_imported INTEGER,
                messages_imported INTEGER
            );
        """)
        self.conn.commit()

    def _write(self, sql: str, params: tuple):
        try:
            self.conn.execute(sql, params)
            self.conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Write failed: {exc}") from exc

    def add_user(self, user: User):
        """Register a user; a second add under the same id is ignored."""
        self._write(
            "INSERT OR IGNORE INTO users (id, name, password, created_at) VALUES (?, ?, ?, ?)",
            (str(user.id), user.name, user.password, user.created_at.isoformat()),
        )

    def add_conversation(self, conversation: Conversation):
        self._write(
            "INSERT INTO conversations (id, owner_id, title, created_at) VALUES (?, ?, ?, ?)",
            (str(conversation.id), str(conversation.owner_id), conversation.title,
             conversation.created_at.isoformat()),
        )

    def add_message(self, message: Message):
        self._write(
            """INSERT INTO messages (id, conversation_id, author_id, content, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            (str(message.id), str(message.conversation_id), str(message.author_id),
             message.content, message.created_at.isoformat()),
        )

    def lookup_user(self, user_id: UUID) -> Found[User] | NotFound:
        row = self._lookup("SELECT * FROM users WHERE id = ?", user_id)
        if isinstance(row, NotFound):
            return row
        return Found[User](entity=User(**dict(row)))

    def lookup_conversation(self, conversation_id: UUID) -> Found[Conversation] | NotFound:
        row = self._lookup("SELECT * FROM conversations WHERE id = ?", conversation_id)
        if isinstance(row, NotFound):
            return row
        return Found[Conversation](entity=Conversation(**dict(row)))

    def _lookup(self, sql: str, entity_id: UUID) -> sqlite3.Row | NotFound:
        try:
            row = self.conn.execute(sql, (str(entity_id),)).fetchone()
        except sqlite3.Error as exc:
            logger.warning("Lookup of %s failed: %s", entity_id, exc)
            return NotFound(error=str(exc))
        if row is None:
            return NotFound()
        return row

    def get_conversation(self, conversation_id: str) -> dict | None:
        """Get a conversation with all its messages in creation order."""
        row = self.conn.execute(
            """SELECT c.id, c.title, c.created_at, u.name AS owner
               FROM conversations c LEFT JOIN users u ON u.id = c.owner_id
               WHERE c.id = ?""",
            (conversation_id,),
        ).fetchone()
        if not row:
            return None

        messages = self.conn.execute(
            """SELECT u.name AS author, m.content, m.created_at
               FROM messages m LEFT JOIN users u ON u.id = m.author_id
               WHERE m.conversation_id = ?
               ORDER BY m.rowid""",
            (conversation_id,),
        ).fetchall()

        return {
            "id": row["id"],
            "title": row["title"],
            "owner": row["owner"],
            "created_at": row["created_at"],
            "message_count": len(messages),
            "messages": [dict(m) for m in messages],
        }

    def list_conversations(
        self,
        limit: int = 20,
        offset: int = 0,
        keyword: str | None = None,
    ) -> list[dict]:
        """List conversations in creation order, optionally filtered by title."""
        sql = """SELECT c.id, c.title, c.created_at,
                        (SELECT COUNT(*) FROM messages m WHERE m.conversation_id = c.id)
                            AS message_count
                 FROM conversations c"""
        params: tuple = ()
        if keyword:
            sql += " WHERE c.title LIKE ? ESCAPE '\\'"
            params = (f"%{_escape_like(keyword)}%",)
        sql += " ORDER BY c.rowid LIMIT ? OFFSET ?"
        rows = self.conn.execute(sql, params + (limit, offset)).fetchall()
        return [dict(r) for r in rows]

    def get_stats(self) -> dict:
        """Get overall database statistics."""
        user_count = self.conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
        conv_count = self.conn.execute("SELECT COUNT(*) FROM conversations").fetchone()[0]
        msg_count = self.conn.execute("SELECT COUNT(*) FROM messages").fetchone()[0]

        newest = self.conn.execute(
            "SELECT name FROM users ORDER BY rowid DESC LIMIT 1"
        ).fetchone()

        return {
            "total_users": user_count,
            "total_conversations": conv_count,
            "total_messages": msg_count,
            "newest_user": newest["name"] if newest else None,
            "most_active_user": self._most_active_user(),
            "avg_messages_per_conversation": round(msg_count / conv_count, 1) if conv_count else 0,
        }

    def _most_active_user(self) -> str | None:
        # Ties go to whoever reached the top count first.
        rows = self.conn.execute(
            """SELECT u.name FROM messages m
               JOIN conversations c ON c.id = m.conversation_id
               LEFT JOIN users u ON u.id = m.author_id
               ORDER BY c.rowid, m.rowid"""
        ).fetchall()

        counts: dict[str, int] = {}
        leader: str | None = None
        best = 0
        for (name,) in rows:
            if name is None:
                continue
            counts[name] = counts.get(name, 0) + 1
            if counts[name] > best:
                best = counts[name]
                leader = name
        return leader

    def record_import(self, file_path: str, title_prefix: str, conversations: int, messages: int):
        self._write(
            """INSERT INTO import_metadata (import_time, file_path, title_prefix,
               conversations_imported, messages_imported) VALUES (?, ?, ?, ?, ?)""",
            (datetime.now(timezone.utc).isoformat(), file_path, title_prefix,
             conversations, messages),
        )

    def close(self):
        self.conn.close()


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
