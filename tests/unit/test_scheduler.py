"""
Unit tests for the adaptive card selector.

All draws use seeded generators so the outcomes are reproducible.
"""

import numpy as np
import pytest

from memoradical.delivery.card_deck import Card
from memoradical.delivery.errors import StaleReference
from memoradical.delivery.history import HistoryWindow, capacity
from memoradical.delivery.scheduler import (
    CardSelector,
    DrawStrategy,
    ModeFlags,
    NeglectFormula,
    SchedulerState,
    SelectorConfig,
)
from memoradical.delivery.stats import compute_stats


def make_deck(size: int) -> list[Card]:
    return [Card(prompt=f"q{i}", response=f"a{i}") for i in range(size)]


class TestSelectNext:
    @pytest.mark.parametrize("size", [1, 2, 3, 7, 20])
    def test_position_always_in_range(self, size, rng):
        cards = make_deck(size)
        selector = CardSelector()
        state = SchedulerState()
        for _ in range(200):
            position = selector.select_next(cards, state, ModeFlags(), rng)
            assert 0 <= position < size
            assert state.current == position

    def test_empty_deck_returns_none(self, rng):
        state = SchedulerState(current=3)
        assert CardSelector().select_next([], state, ModeFlags(), rng) is None
        assert state.current is None

    def test_single_card_deck_keeps_history_empty(self, rng):
        cards = make_deck(1)
        selector = CardSelector()
        state = SchedulerState()
        for _ in range(5):
            assert selector.select_next(cards, state, ModeFlags(), rng) == 0
        assert len(state.history) == 0

    def test_previous_card_is_pushed_to_history(self, rng):
        cards = make_deck(4)
        selector = CardSelector()
        state = SchedulerState(current=2)
        selector.select_next(cards, state, ModeFlags(), rng)
        assert list(state.history) == [2]

    @pytest.mark.parametrize("flags", [
        ModeFlags(prefer_missed=True, prefer_neglected=False),
        ModeFlags(prefer_missed=False, prefer_neglected=True),
        ModeFlags(prefer_missed=True, prefer_neglected=True),
        ModeFlags(prefer_missed=False, prefer_neglected=False),
    ])
    def test_no_repeats_within_history_window(self, flags, rng):
        cards = make_deck(8)
        cards[3].misses = 40
        window = capacity(len(cards))
        selector = CardSelector()
        state = SchedulerState()

        shown = [selector.select_next(cards, state, flags, rng) for _ in range(300)]

        for i in range(len(shown) - window):
            recent = shown[i : i + window + 1]
            assert len(set(recent)) == len(recent)

    def test_two_card_deck_alternates(self, rng):
        cards = make_deck(2)
        cards[0].misses = 100
        selector = CardSelector()
        state = SchedulerState()
        shown = [selector.select_next(cards, state, ModeFlags(), rng) for _ in range(20)]
        assert all(a != b for a, b in zip(shown, shown[1:]))

    def test_fully_excluded_deck_falls_back_to_uniform(self, rng):
        cards = make_deck(3)
        selector = CardSelector()
        seen = set()
        for _ in range(300):
            state = SchedulerState(history=HistoryWindow([0, 1, 2]))
            seen.add(selector.select_next(cards, state, ModeFlags(), rng))
        assert seen == {0, 1, 2}

    def test_same_seed_same_sequence(self):
        cards = make_deck(10)
        selector = CardSelector()

        def run(seed):
            gen = np.random.default_rng(seed)
            state = SchedulerState()
            return [selector.select_next(cards, state, ModeFlags(), gen) for _ in range(50)]

        assert run(7) == run(7)


class TestMissedSkew:
    """Deck of (unseen, well known, badly missed) with prefer-missed only."""

    DRAWS = 10_000

    def _deck(self):
        return [
            Card(prompt="new", response="x", hits=0, misses=0),
            Card(prompt="known", response="y", hits=5, misses=0),
            Card(prompt="missed", response="z", hits=0, misses=5),
        ]

    def _counts(self, selector, rng):
        cards = self._deck()
        flags = ModeFlags(prefer_missed=True, prefer_neglected=False)
        counts = np.zeros(3, dtype=int)
        for _ in range(self.DRAWS):
            counts[selector.select_next(cards, SchedulerState(), flags, rng)] += 1
        return counts / self.DRAWS

    def test_missed_card_dominates(self, rng):
        share = self._counts(CardSelector(), rng)
        assert share[2] > 0.8
        assert share[1] < 0.05

    def test_proportional_draw_keeps_ordering(self, rng):
        selector = CardSelector(SelectorConfig(draw=DrawStrategy.PROPORTIONAL))
        share = self._counts(selector, rng)
        assert share[2] > share[0] > share[1] > 0


class TestNeglectDraw:
    """With the neglect bonus active the draw is proportional to the weights."""

    DRAWS = 3000

    def _shares(self, cards, flags, rng):
        selector = CardSelector()
        counts = np.zeros(len(cards), dtype=int)
        for _ in range(self.DRAWS):
            counts[selector.select_next(cards, SchedulerState(), flags, rng)] += 1
        return counts / self.DRAWS

    def test_neglect_only_shares_follow_weights(self, rng):
        # Weights 1, 0.5, 0.5, 0.5, 0.5
        cards = [Card(prompt="a", response="b", hits=1)] + [
            Card(prompt=f"q{i}", response=f"a{i}", hits=1, misses=1) for i in range(4)
        ]
        flags = ModeFlags(prefer_missed=False, prefer_neglected=True)

        share = self._shares(cards, flags, rng)

        assert 0.28 < share[0] < 0.39
        assert all(0.12 < s < 0.22 for s in share[1:])

    def test_both_preferences_starve_no_card(self, rng):
        cards = [Card(prompt="new", response="x")] + [
            Card(prompt=f"q{i}", response=f"a{i}", hits=1, misses=1) for i in range(4)
        ]
        flags = ModeFlags(prefer_missed=True, prefer_neglected=True)

        share = self._shares(cards, flags, rng)

        assert share[0] < 0.5
        assert (share > 0.1).all()


class TestWeights:
    def test_uniform_without_preferences(self, sample_cards, rng):
        flags = ModeFlags(prefer_missed=False, prefer_neglected=False)
        weights = CardSelector().weights(sample_cards, HistoryWindow(), flags, rng)
        assert weights.tolist() == [1.0, 1.0, 1.0, 1.0]

    def test_neglect_only_uses_inverse_visits(self, sample_cards, rng):
        flags = ModeFlags(prefer_missed=False, prefer_neglected=True)
        weights = CardSelector().weights(sample_cards, HistoryWindow(), flags, rng)
        assert weights.tolist() == pytest.approx([1.0, 0.2, 0.2, 0.25])

    def test_neglect_reads_reverse_counts(self, sample_cards, rng):
        flags = ModeFlags(reverse_mode=True, prefer_missed=False, prefer_neglected=True)
        weights = CardSelector().weights(sample_cards, HistoryWindow(), flags, rng)
        assert weights.tolist() == pytest.approx([1.0, 1.0, 1.0, 1.0])

    def test_neglect_only_has_no_baseline(self, rng):
        cards = [Card(prompt="a", response="b", hits=1, misses=1)]
        flags = ModeFlags(prefer_missed=False, prefer_neglected=True)
        assert CardSelector().weights(cards, HistoryWindow(), flags, rng)[0] == pytest.approx(0.5)

    def test_inverse_sqrt_formula(self, sample_cards, rng):
        selector = CardSelector(SelectorConfig(neglect=NeglectFormula.INVERSE_SQRT))
        flags = ModeFlags(prefer_missed=False, prefer_neglected=True)
        weights = selector.weights(sample_cards, HistoryWindow(), flags, rng)
        assert weights[3] == pytest.approx(0.5)

    def test_history_positions_get_zero_weight(self, sample_cards, rng):
        weights = CardSelector().weights(sample_cards, HistoryWindow([1, 3]), ModeFlags(), rng)
        assert weights[1] == 0.0
        assert weights[3] == 0.0
        assert weights[0] > 0.0 and weights[2] > 0.0

    def test_beta_weights_stay_in_unit_interval(self, sample_cards, rng):
        for _ in range(100):
            weights = CardSelector().weights(sample_cards, HistoryWindow(), ModeFlags(), rng)
            assert ((weights >= 0.0) & (weights <= 1.0)).all()



class TestGoBack:
    def test_pops_most_recent(self):
        state = SchedulerState(history=HistoryWindow([1, 4]), current=2)
        assert CardSelector.go_back(state) == 4
        assert state.current == 4
        assert list(state.history) == [1]

    def test_empty_history_is_noop(self):
        state = SchedulerState(current=2)
        assert CardSelector.go_back(state) is None
        assert state.current == 2


class TestRecordOutcome:
    def test_hit_increments_only_hits(self, sample_cards):
        CardSelector.record_outcome(sample_cards, 0, True, ModeFlags())
        card = sample_cards[0]
        assert (card.hits, card.misses, card.reverse_hits, card.reverse_misses) == (1, 0, 0, 0)

    def test_reverse_miss_increments_reverse_misses(self, sample_cards):
        CardSelector.record_outcome(sample_cards, 3, False, ModeFlags(reverse_mode=True))
        card = sample_cards[3]
        assert (card.hits, card.misses, card.reverse_hits, card.reverse_misses) == (2, 2, 1, 1)

    def test_other_cards_untouched(self, sample_cards):
        before = [card.to_dict() for card in sample_cards]
        CardSelector.record_outcome(sample_cards, 2, True, ModeFlags())
        after = [card.to_dict() for card in sample_cards]
        assert before[:2] == after[:2]
        assert before[3] == after[3]

    def test_hit_then_miss_gives_zero_goodness(self):
        cards = [Card(prompt="a", response="b")]
        CardSelector.record_outcome(cards, 0, True, ModeFlags())
        CardSelector.record_outcome(cards, 0, False, ModeFlags())
        assert cards[0].counts() == (1, 1)
        assert compute_stats(cards).rows[0].goodness == 0.0

    @pytest.mark.parametrize("position", [-1, 4, None])
    def test_invalid_position_raises(self, sample_cards, position):
        with pytest.raises(StaleReference):
            CardSelector.record_outcome(sample_cards, position, True, ModeFlags())


class TestOnDelete:
    def _state(self, current):
        return SchedulerState(history=HistoryWindow([0, 2]), current=current)

    def test_deleting_current_clears_it(self, sample_cards):
        state = self._state(current=1)
        CardSelector.on_delete(sample_cards, state, 1)
        assert state.current is None
        assert len(state.history) == 0
        assert len(sample_cards) == 3

    def test_current_after_deleted_shifts_down(self, sample_cards):
        state = self._state(current=3)
        CardSelector.on_delete(sample_cards, state, 1)
        assert state.current == 2
        assert sample_cards[state.current].prompt == "casa"
        assert len(state.history) == 0

    def test_current_before_deleted_unchanged(self, sample_cards):
        state = self._state(current=0)
        CardSelector.on_delete(sample_cards, state, 2)
        assert state.current == 0
        assert len(state.history) == 0

    def test_invalid_position_raises_and_keeps_deck(self, sample_cards):
        state = self._state(current=0)
        with pytest.raises(StaleReference):
            CardSelector.on_delete(sample_cards, state, 9)
        assert len(sample_cards) == 4
        assert list(state.history) == [0, 2]


class TestOnReplaceAll:
    def test_replaces_deck_and_clears_history(self, sample_cards, rng):
        state = SchedulerState(history=HistoryWindow([0, 1]), current=3)
        new_cards = make_deck(2)
        position = CardSelector().on_replace_all(sample_cards, state, new_cards, ModeFlags(), rng)
        assert [card.prompt for card in sample_cards] == ["q0", "q1"]
        assert position in (0, 1)
        assert state.current == position
        assert len(state.history) == 0

    def test_empty_replacement_has_no_current(self, sample_cards, rng):
        state = SchedulerState(current=1)
        assert CardSelector().on_replace_all(sample_cards, state, [], ModeFlags(), rng) is None
        assert sample_cards == []
        assert state.current is None
