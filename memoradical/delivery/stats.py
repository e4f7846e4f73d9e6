"""
Deck Statistics.

Pure computation over the cards' hit/miss counters, no I/O:

- hit ratio per card: hits / (hits + misses)
- goodness per card: (hits - misses) / (hits + misses), in [-1, 1]
- overall score, share of cards known well, share visited, total responses

Unvisited cards have hit ratio and goodness 0. Counters are read for the
forward or reverse direction depending on reverse_mode.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .card_deck import Card

DEFAULT_GOODNESS_THRESHOLD = 0.95


@dataclass(frozen=True)
class CardStats:
    """Metrics for a single card in one study direction."""

    position: int
    prompt: str
    response: str
    hits: int
    misses: int

    @property
    def visits(self) -> int:
        return self.hits + self.misses

    @property
    def hit_ratio(self) -> float:
        """hits / visits, 0 when never answered."""
        if self.visits == 0:
            return 0.0
        return self.hits / self.visits

    @property
    def percent_hit(self) -> float:
        return 100.0 * self.hit_ratio

    @property
    def goodness(self) -> float:
        """(hits - misses) / visits, 0 when never answered."""
        if self.visits == 0:
            return 0.0
        return (self.hits - self.misses) / self.visits

    def is_known_well(self, threshold: float) -> bool:
        """More than one response and goodness at or above threshold."""
        return self.visits > 1 and self.goodness >= threshold


@dataclass(frozen=True)
class StatsSnapshot:
    """Recomputed-on-demand view of deck quality; never persisted."""

    rows: list[CardStats] = field(default_factory=list)
    reverse_mode: bool = False
    goodness_threshold: float = DEFAULT_GOODNESS_THRESHOLD
    total_cards: int = 0
    overall_score: float = 0.0
    percent_known_well: float = 0.0
    percent_visited: float = 0.0
    total_responses: int = 0

    def top(self, n: int) -> list[CardStats]:
        """The n best cards by goodness."""
        return self.rows[: max(0, n)]

    def to_dict(self) -> dict:
        return {
            "reverse_mode": self.reverse_mode,
            "goodness_threshold": self.goodness_threshold,
            "total_cards": self.total_cards,
            "overall_score": self.overall_score,
            "percent_known_well": self.percent_known_well,
            "percent_visited": self.percent_visited,
            "total_responses": self.total_responses,
        }


def compute_stats(
    cards: Sequence[Card],
    reverse_mode: bool = False,
    goodness_threshold: float = DEFAULT_GOODNESS_THRESHOLD,
) -> StatsSnapshot:
    """
    Compute per-card and aggregate statistics.

    Args:
        cards: The deck
        reverse_mode: Read the reverse counters instead of the forward ones
        goodness_threshold: Minimum goodness for a card to count as known well

    Returns:
        StatsSnapshot with rows sorted by descending goodness; cards with
        equal goodness keep their deck order
    """
    rows = []
    for position, card in enumerate(cards):
        hits, misses = card.counts(reverse_mode)
        rows.append(
            CardStats(
                position=position,
                prompt=card.prompt,
                response=card.response,
                hits=hits,
                misses=misses,
            )
        )

    total = len(rows)
    if total == 0:
        return StatsSnapshot(reverse_mode=reverse_mode, goodness_threshold=goodness_threshold)

    overall_score = 100.0 * sum(row.goodness for row in rows) / total
    known_well = sum(1 for row in rows if row.is_known_well(goodness_threshold))
    visited = sum(1 for row in rows if row.visits > 0)

    return StatsSnapshot(
        rows=sorted(rows, key=lambda row: -row.goodness),
        reverse_mode=reverse_mode,
        goodness_threshold=goodness_threshold,
        total_cards=total,
        overall_score=overall_score,
        percent_known_well=100.0 * known_well / total,
        percent_visited=100.0 * visited / total,
        total_responses=sum(row.visits for row in rows),
    )
