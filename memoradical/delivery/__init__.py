"""
Memoradical delivery layer.

A portable, database-free flashcard trainer driven by cumulative
hit/miss counts.

Components:
- Card / parse_cards / export_json: deck model and JSON format
- HistoryWindow: recency buffer that blocks immediate repeats
- CardSelector: adaptive card choice (Beta sampling, neglect bonus)
- compute_stats: per-card and deck quality metrics
- StudyState / apply: command handling for a study session
- CardStore: checksum-guarded JSON file persistence
- copy_to_clipboard: export to the system clipboard
"""

from .card_deck import Card, cards_from_dat, default_deck, export_json, parse_cards
from .clipboard import ClipboardResult, copy_to_clipboard
from .errors import MalformedImport, MemoradicalError, PersistenceConflict, StaleReference
from .history import HistoryWindow, capacity
from .scheduler import (
    CardSelector,
    DrawStrategy,
    ModeFlags,
    NeglectFormula,
    SchedulerState,
    SelectorConfig,
)
from .session import Face, StudyState, apply, initial_state, visible_text
from .state_store import CardStore
from .stats import CardStats, StatsSnapshot, compute_stats

__all__ = [
    # Deck
    "Card",
    "parse_cards",
    "export_json",
    "default_deck",
    "cards_from_dat",
    # Errors
    "MemoradicalError",
    "MalformedImport",
    "PersistenceConflict",
    "StaleReference",
    # Scheduling
    "HistoryWindow",
    "capacity",
    "CardSelector",
    "DrawStrategy",
    "ModeFlags",
    "NeglectFormula",
    "SchedulerState",
    "SelectorConfig",
    # Statistics
    "CardStats",
    "StatsSnapshot",
    "compute_stats",
    # Session
    "Face",
    "StudyState",
    "apply",
    "initial_state",
    "visible_text",
    # Persistence
    "CardStore",
    "ClipboardResult",
    "copy_to_clipboard",
]
