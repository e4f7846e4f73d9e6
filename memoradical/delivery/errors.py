"""
Error types raised by the Memoradical core.

Selection on an empty deck is not an error: the scheduler returns None.
"""

from __future__ import annotations


class MemoradicalError(Exception):
    """Base class for errors surfaced to the user."""

    pass


class MalformedImport(MemoradicalError):
    """Raised when deck JSON cannot be parsed or validated."""

    pass


class PersistenceConflict(MemoradicalError):
    """Raised when the backing store changed since the last load or save."""

    pass


class StaleReference(MemoradicalError, IndexError):
    """Raised when a card position no longer addresses a card."""

    def __init__(self, position: int | None, size: int):
        self.position = position
        self.size = size
        super().__init__(f"Card position {position} is not valid for a deck of {size} cards")
