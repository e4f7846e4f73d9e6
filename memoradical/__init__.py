"""
Memoradical: a no-frills local-only flashcard trainer.

Cards are chosen adaptively from their hit/miss history; see
memoradical.delivery for the selector, statistics and storage.
"""

__version__ = "1.0.0"
