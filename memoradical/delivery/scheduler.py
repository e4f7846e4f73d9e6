"""
Adaptive Card Selector.

Decides which card to show next. Each card gets a weight from its
hit/miss history and the active mode flags:

- prefer missed: a Beta(misses + 1, hits + 1) sample, so cards that are
  missed more than hit tend to draw high values while well-known cards
  still come up now and then
- prefer neglected: a bonus that shrinks as a card collects responses
- recently shown cards (the history window) get weight 0

The largest Beta sample wins when prefer missed is the only preference;
otherwise the draw is proportional to the weights, so fixed neglect
bonuses never starve a card. If every weight is 0 the draw falls back to
a uniform choice over the whole deck. The random source is always
passed in explicitly.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from loguru import logger

from .card_deck import Card
from .errors import StaleReference
from .history import HistoryWindow

# =============================================================================
# Flags and Configuration
# =============================================================================


@dataclass
class ModeFlags:
    """User toggles consumed by the selector and the stats engine."""

    reverse_mode: bool = False
    prefer_missed: bool = True
    prefer_neglected: bool = False


class NeglectFormula(Enum):
    """How the prefer-neglected bonus decays with the number of visits."""

    INVERSE = "inverse"  # 1 / visits
    INVERSE_SQRT = "inverse_sqrt"  # 1 / sqrt(visits)

    def weight(self, visits: int) -> float:
        """Bonus for a card with the given number of responses."""
        if visits <= 0:
            return 1.0
        if self is NeglectFormula.INVERSE_SQRT:
            return 1.0 / math.sqrt(visits)
        return 1.0 / visits


class DrawStrategy(Enum):
    """How a position is chosen from the card weights."""

    THOMPSON = "thompson"  # Largest Beta sample wins, random tie-break
    PROPORTIONAL = "proportional"  # Probability proportional to weight


@dataclass
class SelectorConfig:
    """Configuration for card selection."""

    draw: DrawStrategy = DrawStrategy.THOMPSON
    neglect: NeglectFormula = NeglectFormula.INVERSE


@dataclass
class SchedulerState:
    """History window and current card position, owned by the selector."""

    history: HistoryWindow = field(default_factory=HistoryWindow)
    current: int | None = None

    def copy(self) -> SchedulerState:
        return SchedulerState(history=self.history.copy(), current=self.current)


# =============================================================================
# Card Selector
# =============================================================================


class CardSelector:
    """
    Chooses the next card and keeps the history window consistent.

    Apart from the SchedulerState passed to it the selector holds no
    state; given the same inputs and an identically seeded generator it
    makes the same choice.
    """

    def __init__(self, config: SelectorConfig | None = None):
        """
        Initialize the selector.

        Args:
            config: Custom configuration (uses defaults if None)
        """
        self.config = config or SelectorConfig()

    def weights(
        self,
        cards: Sequence[Card],
        history: HistoryWindow,
        flags: ModeFlags,
        rng: np.random.Generator,
    ) -> np.ndarray:
        """
        Compute the non-negative selection weight of every card.

        Args:
            cards: The deck
            history: Positions excluded from this draw
            flags: Active mode flags
            rng: Random source for Beta sampling

        Returns:
            Array of weights, one per position
        """
        weights = np.zeros(len(cards), dtype=float)
        neglect_only = flags.prefer_neglected and not flags.prefer_missed

        for position, card in enumerate(cards):
            if position in history:
                continue

            hits, misses = card.counts(flags.reverse_mode)

            if flags.prefer_missed:
                weight = float(rng.beta(misses + 1, hits + 1))
            else:
                weight = 0.0 if neglect_only else 1.0

            if flags.prefer_neglected:
                weight += self.config.neglect.weight(hits + misses)

            weights[position] = weight

        return weights

    def _draw(self, weights: np.ndarray, flags: ModeFlags, rng: np.random.Generator) -> int:
        """
        Pick a position from the weights, falling back to uniform.

        Taking the maximum is only random when every weight is a Beta
        sample, so it is limited to prefer-missed without the neglect bonus.
        """
        size = len(weights)
        total = float(weights.sum())

        if total <= 0.0:
            logger.debug(f"All {size} weights are zero, drawing uniformly")
            return int(rng.integers(size))

        thompson = (
            self.config.draw is DrawStrategy.THOMPSON
            and flags.prefer_missed
            and not flags.prefer_neglected
        )
        if not thompson:
            return int(rng.choice(size, p=weights / total))

        candidates = np.flatnonzero(weights == weights.max())
        if len(candidates) == 1:
            return int(candidates[0])
        return int(rng.choice(candidates))

    def select_next(
        self,
        cards: Sequence[Card],
        state: SchedulerState,
        flags: ModeFlags,
        rng: np.random.Generator,
    ) -> int | None:
        """
        Choose the next card and make it current.

        The card being left is pushed onto the history window first so it
        cannot be drawn again right away.

        Args:
            cards: The deck
            state: Scheduler state, updated in place
            flags: Active mode flags
            rng: Random source

        Returns:
            The new current position, or None for an empty deck
        """
        if not cards:
            state.current = None
            return None

        if state.current is not None:
            state.history.push(state.current, len(cards))

        weights = self.weights(cards, state.history, flags, rng)
        position = self._draw(weights, flags, rng)
        state.current = position

        logger.debug(f"Selected card {position} of {len(cards)} (history={list(state.history)})")
        return position

    @staticmethod
    def go_back(state: SchedulerState) -> int | None:
        """
        Return to the most recently shown card.

        Returns:
            The restored position, or None if there is no history
            (the current position is then left as it was)
        """
        position = state.history.pop()
        if position is None:
            return None
        state.current = position
        return position

    @staticmethod
    def record_outcome(
        cards: Sequence[Card],
        position: int,
        is_hit: bool,
        flags: ModeFlags,
    ) -> None:
        """
        Add one hit or miss to a single card.

        The reverse counters are used in reverse mode.

        Raises:
            StaleReference: If position does not address a card
        """
        check_position(cards, position)
        card = cards[position]

        if flags.reverse_mode:
            if is_hit:
                card.reverse_hits += 1
            else:
                card.reverse_misses += 1
        elif is_hit:
            card.hits += 1
        else:
            card.misses += 1

    @staticmethod
    def on_delete(cards: list[Card], state: SchedulerState, position: int) -> None:
        """
        Remove a card and repair every outstanding position.

        The history window is cleared. The current position is kept if it
        was before the deleted card, shifted down if after, and cleared if
        it was the deleted card.

        Raises:
            StaleReference: If position does not address a card
        """
        check_position(cards, position)
        del cards[position]
        state.history.clear()

        if state.current is None:
            return
        if state.current == position:
            state.current = None
        elif state.current > position:
            state.current -= 1

        logger.debug(f"Deleted card {position}, current is now {state.current}")

    def on_replace_all(
        self,
        cards: list[Card],
        state: SchedulerState,
        new_cards: Sequence[Card],
        flags: ModeFlags,
        rng: np.random.Generator,
    ) -> int | None:
        """
        Replace the whole deck and choose a fresh current card.

        Returns:
            The new current position, or None if the new deck is empty
        """
        cards[:] = list(new_cards)
        state.history.clear()
        state.current = None
        return self.select_next(cards, state, flags, rng)


def check_position(cards: Sequence[Card], position: int | None) -> None:
    if position is None or not 0 <= position < len(cards):
        raise StaleReference(position, len(cards))
