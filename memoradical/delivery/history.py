"""
History Window: short-term recency buffer for the scheduler.

Positions shown recently are excluded from the next draw. The window
grows with the deck: capacity is round(log2(N)) for a deck of N cards,
so a two-card deck only blocks the card just shown.
"""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterable, Iterator

from loguru import logger


def capacity(deck_size: int) -> int:
    """Window capacity for a deck of the given size (0 for N <= 1)."""
    if deck_size <= 1:
        return 0
    return max(0, round(math.log2(deck_size)))


class HistoryWindow:
    """
    Bounded FIFO of recently shown card positions.

    Capacity is recomputed on every push from the current deck size and
    never on pop, so a window that was filled for a larger deck shrinks
    lazily on the next push.
    """

    def __init__(self, positions: Iterable[int] | None = None):
        self._entries: deque[int] = deque(positions if positions is not None else [])

    def push(self, position: int, deck_size: int) -> None:
        """
        Append a position, evicting the oldest entries beyond capacity.

        Args:
            position: Card position that is leaving the screen
            deck_size: Current number of cards in the deck
        """
        self._entries.append(position)
        limit = capacity(deck_size)
        while len(self._entries) > limit:
            evicted = self._entries.popleft()
            logger.debug(f"History evicted position {evicted} (capacity {limit})")

    def pop(self) -> int | None:
        """Remove and return the most recent position, or None when empty."""
        if not self._entries:
            return None
        return self._entries.pop()

    def clear(self) -> None:
        self._entries.clear()

    def copy(self) -> HistoryWindow:
        return HistoryWindow(list(self._entries))

    def __contains__(self, position: object) -> bool:
        return position in self._entries

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HistoryWindow):
            return NotImplemented
        return list(self._entries) == list(other._entries)

    def __repr__(self) -> str:
        return f"HistoryWindow({list(self._entries)!r})"
