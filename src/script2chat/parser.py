"""Parse a play script line stream into conversations, users and messages."""

from __future__ import annotations

import logging
from typing import Iterable
from uuid import UUID

from pydantic import BaseModel

from .builder import ConversationBuilder
from .classifier import (
    ActMarker,
    DialogueContinuation,
    SceneMarker,
    SpeakerCue,
    StageDirection,
    classify,
)
from .config import NARRATOR_NAME
from .emitter import MessageEmitter
from .errors import ScriptFormatError
from .models import ParseSummary
from .resolver import EntityResolver
from .storage import EntityStore

logger = logging.getLogger(__name__)


class ParseState(BaseModel):
    """Running state of a single parse; never shared between runs."""

    title_prefix: str
    current_user: UUID | None = None
    current_conversation: UUID | None = None
    buffer: str = ""
    line_number: int = 0
    conversations: int = 0
    messages: int = 0


class ScriptParser:
    """Drive line classification and entity creation over a whole script.

    Every line is fully handled, including the store writes it causes, before
    the next one is read. Dialogue is only written when the speaker changes,
    a section boundary appears, or the stream ends.
    """

    def __init__(self, store: EntityStore):
        self.store = store

    def parse(self, lines: Iterable[str], title_prefix: str) -> ParseSummary:
        resolver = EntityResolver(self.store)
        builder = ConversationBuilder(self.store, resolver)
        emitter = MessageEmitter(self.store)
        state = ParseState(title_prefix=title_prefix)

        for raw in lines:
            state.line_number += 1
            kind = classify(raw)

            if isinstance(kind, ActMarker):
                self._switch_speaker(state, NARRATOR_NAME, resolver, emitter)
                state.buffer = ""
                state.current_conversation = builder.start_conversation(
                    state.title_prefix, kind.line
                )
                state.conversations += 1
            elif isinstance(kind, SceneMarker):
                self._switch_speaker(state, NARRATOR_NAME, resolver, emitter)
                state.buffer = kind.line
            elif isinstance(kind, SpeakerCue):
                self._switch_speaker(state, kind.name, resolver, emitter)
                state.buffer = ""
            elif isinstance(kind, StageDirection):
                self._switch_speaker(state, NARRATOR_NAME, resolver, emitter)
                state.buffer = ""
            elif isinstance(kind, DialogueContinuation):
                state.buffer = f"{state.buffer} {kind.line}" if state.buffer else kind.line

        # Trailing dialogue has no cue after it to trigger a flush.
        self._flush(state, emitter)
        state.buffer = ""

        summary = ParseSummary(
            lines=state.line_number,
            users=resolver.resolved_count,
            conversations=state.conversations,
            messages=state.messages,
        )
        logger.info(
            "Parsed '%s': %d lines, %d users, %d conversations, %d messages",
            title_prefix, summary.lines, summary.users, summary.conversations, summary.messages,
        )
        return summary

    def _switch_speaker(
        self,
        state: ParseState,
        name: str,
        resolver: EntityResolver,
        emitter: MessageEmitter,
    ):
        """Flush the outgoing speaker's dialogue, then adopt ``name``."""
        self._flush(state, emitter)
        state.current_user = resolver.resolve(name)

    def _flush(self, state: ParseState, emitter: MessageEmitter):
        if not state.buffer.strip():
            return
        if state.current_user is None:
            logger.warning(
                "Line %d: discarding text with no speaker: %.60r", state.line_number, state.buffer
            )
            return
        if state.current_conversation is None:
            raise ScriptFormatError(
                "dialogue appears before the first ACT line; there is no conversation to hold it",
                state.line_number,
            )
        if emitter.flush(state.buffer, state.current_user, state.current_conversation) is not None:
            state.messages += 1
