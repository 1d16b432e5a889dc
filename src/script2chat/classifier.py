"""Classify raw script lines into structural kinds."""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict

from .config import STAGE_DIRECTION_MARKERS


class _Line(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: str


class ActMarker(_Line):
    pass


class SceneMarker(_Line):
    pass


class SpeakerCue(_Line):
    name: str


class StageDirection(_Line):
    pass


class DialogueContinuation(_Line):
    pass


LineKind = Union[ActMarker, SceneMarker, SpeakerCue, StageDirection, DialogueContinuation]


def leading_token(line: str) -> str:
    """Return the token a line is classified by.

    Any line mentioning ACT is treated as an act header, wherever the word
    appears. Otherwise the token is everything before the first space.
    """
    if "ACT" in line:
        return "ACT"
    return line.split(" ", 1)[0]


def is_all_caps_word(token: str) -> bool:
    if len(token) < 2:
        return False
    return all(ch.isalpha() and ch.isupper() for ch in token)


def classify(line: str) -> LineKind:
    """Classify a single line. Total: every string maps to exactly one kind."""
    line = line.rstrip("\r\n")
    token = leading_token(line)

    if is_all_caps_word(token):
        if token == "ACT":
            return ActMarker(line=line)
        if token == "SCENE":
            return SceneMarker(line=line)
        return SpeakerCue(line=line, name=line)

    if token in STAGE_DIRECTION_MARKERS:
        return StageDirection(line=line)
    return DialogueContinuation(line=line)
