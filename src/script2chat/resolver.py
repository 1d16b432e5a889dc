"""Resolve speaker names to stable user identities."""

from __future__ import annotations

import hashlib
import logging
from uuid import UUID

from .config import NARRATOR_NAME, PLACEHOLDER_PASSWORD
from .models import User
from .storage import EntityStore, NotFound

logger = logging.getLogger(__name__)


def user_id_for(name: str) -> UUID:
    """Derive the user id for a display name.

    Name-based MD5 UUID (version 3) over the raw UTF-8 bytes, no namespace,
    so ids match those produced by other name-UUID implementations.
    """
    digest = hashlib.md5(name.encode("utf-8")).digest()
    return UUID(bytes=digest, version=3)


class EntityResolver:
    """Map names to user ids, creating users on first sight."""

    def __init__(self, store: EntityStore):
        self.store = store
        self._resolved: dict[str, UUID] = {}

    @property
    def resolved_count(self) -> int:
        return len(self._resolved)

    def resolve(self, name: str) -> UUID:
        cached = self._resolved.get(name)
        if cached is not None:
            return cached

        user_id = user_id_for(name)
        result = self.store.lookup_user(user_id)
        if isinstance(result, NotFound):
            if result.error:
                logger.warning("Treating failed lookup of '%s' as missing: %s", name, result.error)
            logger.debug("Creating user '%s' (%s)", name, user_id)
            self.store.add_user(User(id=user_id, name=name, password=PLACEHOLDER_PASSWORD))
        else:
            user_id = result.entity.id

        self._resolved[name] = user_id
        return user_id

    def resolve_narrator(self) -> UUID:
        return self.resolve(NARRATOR_NAME)
