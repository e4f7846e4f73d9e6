"""
Study Session: command handling for a single deck.

The front end turns key presses and menu actions into commands and
feeds them to apply(). Each call returns a new StudyState; the state
passed in is never modified, so a failed command (for example an import
of malformed JSON) leaves the caller holding its previous state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

import numpy as np
from loguru import logger

from .card_deck import Card, parse_cards
from .scheduler import CardSelector, ModeFlags, SchedulerState, check_position

# =============================================================================
# State
# =============================================================================


class Face(Enum):
    """Which side of the current card is showing."""

    PROMPT = "prompt"
    RESPONSE = "response"


@dataclass(frozen=True)
class StudyState:
    """Everything a study session needs between commands."""

    cards: list[Card] = field(default_factory=list)
    scheduler: SchedulerState = field(default_factory=SchedulerState)
    flags: ModeFlags = field(default_factory=ModeFlags)
    face: Face = Face.PROMPT

    @property
    def current(self) -> int | None:
        return self.scheduler.current

    @property
    def current_card(self) -> Card | None:
        """The card being shown, or None for an empty deck."""
        position = self.scheduler.current
        if position is None or not 0 <= position < len(self.cards):
            return None
        return self.cards[position]


def _clone(state: StudyState, copy_cards: bool = True) -> StudyState:
    """
    Copy a state for one command.

    Cards are copied one by one. Commands that never touch the cards pass
    copy_cards=False and share the list with the state they came from.
    """
    return StudyState(
        cards=[replace(card) for card in state.cards] if copy_cards else state.cards,
        scheduler=state.scheduler.copy(),
        flags=replace(state.flags),
        face=state.face,
    )


def visible_text(state: StudyState) -> str | None:
    """
    Text on the showing face of the current card.

    In reverse mode the response is asked and the prompt is the answer.
    """
    card = state.current_card
    if card is None:
        return None
    question, answer = card.faces(state.flags.reverse_mode)
    return question if state.face is Face.PROMPT else answer


# =============================================================================
# Commands
# =============================================================================


@dataclass(frozen=True)
class Flip:
    pass


@dataclass(frozen=True)
class RecordHit:
    pass


@dataclass(frozen=True)
class RecordMiss:
    pass


@dataclass(frozen=True)
class GoNext:
    pass


@dataclass(frozen=True)
class GoPrev:
    pass


@dataclass(frozen=True)
class ToggleReverse:
    pass


@dataclass(frozen=True)
class TogglePreferMissed:
    pass


@dataclass(frozen=True)
class TogglePreferNeglected:
    pass


@dataclass(frozen=True)
class AddCard:
    prompt: str
    response: str


@dataclass(frozen=True)
class EditCard:
    """Replace the text of a card; None keeps the existing text."""

    position: int
    prompt: str | None = None
    response: str | None = None


@dataclass(frozen=True)
class DeleteCard:
    position: int


@dataclass(frozen=True)
class ImportCards:
    """Replace the whole deck with cards parsed from JSON text."""

    text: str


Command = (
    Flip
    | RecordHit
    | RecordMiss
    | GoNext
    | GoPrev
    | ToggleReverse
    | TogglePreferMissed
    | TogglePreferNeglected
    | AddCard
    | EditCard
    | DeleteCard
    | ImportCards
)

# Commands that only move between cards or change flags and the face
_LEAVES_CARDS = (
    Flip,
    GoNext,
    GoPrev,
    ToggleReverse,
    TogglePreferMissed,
    TogglePreferNeglected,
)


# =============================================================================
# Reducer
# =============================================================================


def initial_state(
    cards: list[Card],
    rng: np.random.Generator,
    flags: ModeFlags | None = None,
    selector: CardSelector | None = None,
) -> StudyState:
    """Build a session over cards and draw the first card."""
    selector = selector or CardSelector()
    state = StudyState(cards=[replace(card) for card in cards], flags=flags or ModeFlags())
    selector.select_next(state.cards, state.scheduler, state.flags, rng)
    return state


def apply(
    state: StudyState,
    command: Command,
    rng: np.random.Generator,
    selector: CardSelector | None = None,
) -> StudyState:
    """
    Apply one command and return the resulting state.

    Args:
        state: Current state (left untouched)
        command: The command to apply
        rng: Random source for card selection
        selector: Card selector (creates default if None)

    Returns:
        New StudyState

    Raises:
        MalformedImport: For ImportCards with invalid JSON
        StaleReference: For EditCard/DeleteCard with an invalid position
    """
    selector = selector or CardSelector()

    # Parse before copying anything so a failure cannot leave partial state.
    imported = parse_cards(command.text) if isinstance(command, ImportCards) else None

    new = _clone(state, copy_cards=not isinstance(command, _LEAVES_CARDS))
    cards, sched, flags = new.cards, new.scheduler, new.flags
    face = new.face

    if isinstance(command, Flip):
        face = Face.RESPONSE if face is Face.PROMPT else Face.PROMPT

    elif isinstance(command, (RecordHit, RecordMiss)):
        if new.current_card is None:
            logger.debug("No current card to record an outcome for")
            return state
        selector.record_outcome(cards, sched.current, isinstance(command, RecordHit), flags)
        selector.select_next(cards, sched, flags, rng)
        face = Face.PROMPT

    elif isinstance(command, GoNext):
        selector.select_next(cards, sched, flags, rng)
        face = Face.PROMPT

    elif isinstance(command, GoPrev):
        if selector.go_back(sched) is None:
            return state
        face = Face.PROMPT

    elif isinstance(command, ToggleReverse):
        flags.reverse_mode = not flags.reverse_mode

    elif isinstance(command, TogglePreferMissed):
        flags.prefer_missed = not flags.prefer_missed

    elif isinstance(command, TogglePreferNeglected):
        flags.prefer_neglected = not flags.prefer_neglected

    elif isinstance(command, AddCard):
        cards.append(Card(prompt=command.prompt, response=command.response))
        if sched.current is None:
            selector.select_next(cards, sched, flags, rng)
            face = Face.PROMPT

    elif isinstance(command, EditCard):
        check_position(cards, command.position)
        card = cards[command.position]
        if command.prompt is not None:
            card.prompt = command.prompt
        if command.response is not None:
            card.response = command.response

    elif isinstance(command, DeleteCard):
        selector.on_delete(cards, sched, command.position)
        if sched.current is None:
            selector.select_next(cards, sched, flags, rng)
            face = Face.PROMPT

    elif isinstance(command, ImportCards):
        selector.on_replace_all(cards, sched, imported, flags, rng)
        face = Face.PROMPT
        logger.info(f"Imported {len(cards)} cards")

    else:
        raise TypeError(f"Unknown command: {command!r}")

    return replace(new, face=face)
