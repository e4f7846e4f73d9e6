"""
JSON Card Store for Memoradical.

Keeps the deck in a single UTF-8 JSON file (default:
~/.memoradical/cards.json).

- Writes are all-or-nothing: a temporary file next to the target is
  written and then renamed over it
- Every load and save records a SHA-256 checksum of the file contents;
  a save is refused if the file no longer matches it, so a deck edited
  elsewhere is never silently overwritten
"""

from __future__ import annotations

import hashlib
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from .card_deck import Card, default_deck, export_json, parse_cards
from .errors import MalformedImport, PersistenceConflict


def _checksum(data: bytes | None) -> str | None:
    if data is None:
        return None
    return hashlib.sha256(data).hexdigest()


class CardStore:
    """
    File-backed persistence for the card deck.

    The store remembers what it last read or wrote. A checksum of None
    means "expect no file": saving over a file that appeared since then
    is a conflict too.
    """

    DEFAULT_PATH = Path.home() / ".memoradical" / "cards.json"

    def __init__(self, path: Path | None = None):
        """
        Initialize the card store.

        Args:
            path: Deck file location (defaults to ~/.memoradical/cards.json)
        """
        self.path = Path(path) if path is not None else self.DEFAULT_PATH
        self._checksum: str | None = None

    @property
    def checksum(self) -> str | None:
        """Checksum of the contents last loaded or saved."""
        return self._checksum

    def _read(self) -> bytes | None:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None

    def load(self) -> list[Card] | None:
        """
        Load the deck.

        The checksum is only recorded once the file has parsed, so a
        corrupt file is never overwritten without a conflict.

        Returns:
            Cards from the file, or None if the file does not exist

        Raises:
            MalformedImport: If the stored file is not a valid UTF-8 deck
        """
        data = self._read()

        if data is None:
            self._checksum = None
            logger.info(f"No deck found at {self.path}")
            return None

        try:
            cards = parse_cards(data.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise MalformedImport(f"{self.path}: not valid UTF-8 ({e.reason} at byte {e.start})") from e
        except MalformedImport as e:
            raise MalformedImport(f"{self.path}: {e}") from e

        self._checksum = _checksum(data)
        logger.info(f"Loaded {len(cards)} cards from {self.path}")
        return cards

    def reload(self) -> list[Card] | None:
        """Re-read the file, accepting whatever it now contains."""
        return self.load()

    def load_or_default(self) -> list[Card]:
        """
        Load the deck, creating the default deck if none is stored.

        Returns:
            The stored cards, or the freshly saved default deck
        """
        cards = self.load()
        if cards is None:
            cards = default_deck()
            self.save(cards)
            logger.info(f"Created default deck at {self.path}")
        return cards

    def save(self, cards: Sequence[Card]) -> None:
        """
        Atomically replace the stored deck.

        Args:
            cards: Complete deck to store

        Raises:
            PersistenceConflict: If the file changed since the last load/save
        """
        current = _checksum(self._read())
        if current != self._checksum:
            logger.warning(f"Refusing to save {self.path}: changed since last load")
            raise PersistenceConflict(
                f"{self.path} has been changed since it was last loaded; reload before saving"
            )

        data = export_json(cards).encode("utf-8")
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        self._checksum = _checksum(data)
        logger.debug(f"Saved {len(cards)} cards to {self.path}")
