"""
Card Deck: flashcard data model and JSON wire format.

A deck is an ordered list of cards; a card's position in the list is
the address used by the scheduler and by the study session.

Provides:
- Card: prompt/response text plus forward and reverse hit/miss counters
- parse_cards / export_json: the on-disk and import/export JSON format
- default_deck: the two-card deck used when nothing is stored yet
- cards_from_dat: conversion of tab-separated word lists
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Annotated

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import MalformedImport

# =============================================================================
# Card Data Class
# =============================================================================


@dataclass
class Card:
    """
    A single flashcard.

    Counters only ever grow; the scheduler increments them one at a
    time and nothing resets them.
    """

    prompt: str
    response: str
    hits: int = 0
    misses: int = 0
    reverse_hits: int = 0
    reverse_misses: int = 0

    def counts(self, reverse_mode: bool = False) -> tuple[int, int]:
        """Return (hits, misses) for the requested study direction."""
        if reverse_mode:
            return self.reverse_hits, self.reverse_misses
        return self.hits, self.misses

    def visits(self, reverse_mode: bool = False) -> int:
        """Total responses recorded in the requested direction."""
        hits, misses = self.counts(reverse_mode)
        return hits + misses

    def faces(self, reverse_mode: bool = False) -> tuple[str, str]:
        """Return (question, answer) text, swapped in reverse mode."""
        if reverse_mode:
            return self.response, self.prompt
        return self.prompt, self.response

    @classmethod
    def from_dict(cls, data: dict) -> Card:
        """
        Create a Card from an already validated dictionary.

        Missing or null reverse counters are read as zero.
        """
        return cls(
            prompt=data["prompt"],
            response=data["response"],
            hits=data.get("hits", 0),
            misses=data.get("misses", 0),
            reverse_hits=data.get("reverse_hits") or 0,
            reverse_misses=data.get("reverse_misses") or 0,
        )

    def to_dict(self) -> dict:
        return {
            "prompt": self.prompt,
            "response": self.response,
            "hits": self.hits,
            "misses": self.misses,
            "reverse_hits": self.reverse_hits,
            "reverse_misses": self.reverse_misses,
        }


# =============================================================================
# Wire Format
# =============================================================================

Count = Annotated[int, Field(ge=0, strict=True)]


class CardRecord(BaseModel):
    """Validation model for one card in the JSON deck format."""

    model_config = ConfigDict(extra="ignore")

    prompt: Annotated[str, Field(strict=True)]
    response: Annotated[str, Field(strict=True)]
    hits: Count
    misses: Count
    reverse_hits: Count | None = None
    reverse_misses: Count | None = None


_DECK_ADAPTER = TypeAdapter(list[CardRecord])


def _describe(error: ValidationError, limit: int = 3) -> str:
    """Summarize a pydantic ValidationError into one readable line."""
    details = []
    for err in error.errors()[:limit]:
        loc = ".".join(str(part) for part in err["loc"]) or "deck"
        details.append(f"{loc}: {err['msg']}")
    extra = error.error_count() - len(details)
    if extra > 0:
        details.append(f"... and {extra} more")
    return "; ".join(details)


def parse_cards(text: str | bytes) -> list[Card]:
    """
    Parse deck JSON into cards.

    Args:
        text: UTF-8 JSON array of card objects

    Returns:
        List of Card instances in file order

    Raises:
        MalformedImport: If the text is not valid JSON or a card is invalid
    """
    try:
        records = _DECK_ADAPTER.validate_json(text)
    except ValidationError as e:
        raise MalformedImport(f"Invalid card data: {_describe(e)}") from e

    cards = [Card.from_dict(record.model_dump()) for record in records]
    logger.debug(f"Parsed {len(cards)} cards")
    return cards


def export_json(cards: Iterable[Card]) -> str:
    """Serialize cards to pretty-printed JSON."""
    return json.dumps([card.to_dict() for card in cards], indent=2, ensure_ascii=False)


def default_deck() -> list[Card]:
    """The deck used when no stored deck exists."""
    return [
        Card(prompt="What is to the left of right?", response="Left"),
        Card(prompt="What is to the right of left?", response="Right"),
    ]


# =============================================================================
# Word List Conversion
# =============================================================================


def cards_from_dat(lines: Iterable[str]) -> list[Card]:
    """
    Convert a tab-separated word list into cards.

    Each line is ``rank<TAB>prompt<TAB>response``. Lines starting with
    ``#`` and blank lines are skipped. The rank seeds the miss counter so
    that higher-ranked words come up more often at first.

    Raises:
        MalformedImport: If a line has the wrong shape or a non-numeric rank
    """
    cards: list[Card] = []
    for lineno, raw in enumerate(lines, 1):
        line = raw.rstrip("\r\n")
        if not line.strip() or line.startswith("#"):
            continue

        fields = line.split("\t", 2)
        if len(fields) != 3:
            raise MalformedImport(f"Line {lineno}: expected rank, prompt and response separated by tabs")

        rank, prompt, response = fields
        try:
            misses = int(rank)
        except ValueError as e:
            raise MalformedImport(f"Line {lineno}: rank {rank!r} is not an integer") from e
        if misses < 0:
            raise MalformedImport(f"Line {lineno}: rank {misses} is negative")

        cards.append(Card(prompt=prompt, response=response, hits=0, misses=misses))

    logger.debug(f"Converted {len(cards)} word list entries")
    return cards
