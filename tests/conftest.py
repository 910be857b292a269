"""Pytest fixtures for terminal blackjack tests."""

import pytest
from random import Random

from core.cards import DECK, Card, Shoe, ShoeUnderflowError, Rank, Suit
from core.hand import Hand
from core.game import BlackjackGame


class StackedShoe(Shoe):
    """Shoe that deals the given cards first, in order, then the rest of the deck."""

    def __init__(self, cards: list[Card]) -> None:
        self._stacked = list(cards)
        super().__init__(rng=Random(0))

    def shuffle(self) -> None:
        rest = [card for card in DECK if card not in self._stacked]
        self._cards = self._stacked + rest

    def deal(self, n: int) -> list[Card]:
        if n >= len(self._cards):
            raise ShoeUnderflowError(f"Cannot deal {n} cards")
        dealt = self._cards[:n]
        del self._cards[:n]
        return dealt


class ScriptedInput:
    """Command source that replays fixed input lines and records each prompt."""

    def __init__(self, *lines: str) -> None:
        self.lines = list(lines)
        self.prompts: list[list[str]] = []

    def __call__(self, options) -> str:
        self.prompts.append([option.value for option in options])
        if not self.lines:
            raise EOFError("Script exhausted")
        return self.lines.pop(0)


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled single-deck shoe."""
    return Shoe(rng=rng)


@pytest.fixture
def stacked_shoe():
    """Factory for shoes dealing card codes in the given order."""

    def _make(*codes: str) -> StackedShoe:
        return StackedShoe([Card.from_string(code) for code in codes])

    return _make


@pytest.fixture
def stacked_game(stacked_shoe):
    """Factory for games whose first round deals the given card codes.

    Deal order: two player cards, two dealer cards, then every later draw.
    """

    def _make(*codes: str, abort_on_invalid_split: bool = False) -> BlackjackGame:
        return BlackjackGame(
            shoe=stacked_shoe(*codes),
            abort_on_invalid_split=abort_on_invalid_split,
        )

    return _make


@pytest.fixture
def scripted():
    """The ScriptedInput class."""
    return ScriptedInput


@pytest.fixture
def game(rng):
    """A new game instance."""
    return BlackjackGame(rng=rng)


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return Hand([Card(Rank.ACE, Suit.SPADES), Card(Rank.KING, Suit.CLUBS)])


@pytest.fixture
def soft_20_hand():
    """A soft 20 hand (A-9)."""
    return Hand([Card(Rank.ACE, Suit.SPADES), Card(Rank.NINE, Suit.HEARTS)])


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return Hand([Card(Rank.TEN, Suit.SPADES), Card(Rank.SIX, Suit.HEARTS)])


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return Hand([Card(Rank.EIGHT, Suit.SPADES), Card(Rank.EIGHT, Suit.CLUBS)])


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return Hand(
        [
            Card(Rank.TEN, Suit.SPADES),
            Card(Rank.SIX, Suit.HEARTS),
            Card(Rank.KING, Suit.CLUBS),
        ]
    )
