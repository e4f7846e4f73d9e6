"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from memoradical.delivery.card_deck import Card  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture
def rng():
    """Seeded random source so draws are reproducible."""
    return np.random.default_rng(12345)


@pytest.fixture
def sample_cards():
    """A small deck with a mix of history."""
    return [
        Card(prompt="hola", response="hello"),
        Card(prompt="gato", response="cat", hits=5, misses=0),
        Card(prompt="perro", response="dog", hits=0, misses=5),
        Card(prompt="casa", response="house", hits=2, misses=2, reverse_hits=1),
    ]


@pytest.fixture
def deck_file(tmp_path):
    """Path for a deck file inside a temporary directory."""
    return tmp_path / "deck" / "cards.json"
