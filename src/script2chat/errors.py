"""Exceptions raised by script2chat."""

from __future__ import annotations


class Script2ChatError(Exception):
    """Base class for all script2chat errors."""


class ScriptFormatError(Script2ChatError):
    """The script breaks a structural precondition of the parser."""

    def __init__(self, message: str, line_number: int):
        super().__init__(f"line {line_number}: {message}")
        self.line_number = line_number


class StoreError(Script2ChatError):
    """A write to the backing store failed."""
