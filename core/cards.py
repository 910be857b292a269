"""Card and Shoe classes - immutable card representations."""

from dataclasses import dataclass
from enum import Enum, auto
from random import Random
from typing import Iterator

from core.rules import RESHUFFLE_THRESHOLD


class ShoeUnderflowError(IndexError):
    """Raised when more cards are requested than the shoe can give."""


class Suit(Enum):
    """Card suits."""

    CLUBS = auto()
    SPADES = auto()
    DIAMONDS = auto()
    HEARTS = auto()

    def __str__(self) -> str:
        letters = {
            Suit.CLUBS: "C",
            Suit.SPADES: "S",
            Suit.DIAMONDS: "D",
            Suit.HEARTS: "H",
        }
        return letters[self]


class Rank(Enum):
    """Card ranks. Number ranks carry their face value."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]

    @property
    def hard_value(self) -> int:
        """Return the point value with Aces counted as 1."""
        if self.value <= 10:
            return self.value
        if self == Rank.ACE:
            return 1
        return 10  # Face cards

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        """Check if this rank has a value of 10."""
        return self.hard_value == 10


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.suit}{self.rank}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the hard point value (Ace = 1)."""
        return self.rank.hard_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @property
    def is_ten_value(self) -> bool:
        """Check if this card has a value of 10."""
        return self.rank.is_ten_value

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from its display code like 'SA', 'C10', 'hk'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        suit_str = s[0]
        rank_str = s[1:]

        suit_map = {
            "C": Suit.CLUBS,
            "S": Suit.SPADES,
            "D": Suit.DIAMONDS,
            "H": Suit.HEARTS,
        }
        rank_map = {str(rank): rank for rank in Rank}

        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")
        if rank_str not in rank_map:
            raise ValueError(f"Invalid rank: {rank_str}")

        return cls(rank_map[rank_str], suit_map[suit_str])


def is_split_equal(a: Card, b: Card) -> bool:
    """
    Check whether two cards may be split into separate hands.

    Any two ten-value cards match each other, an Ace only matches an Ace,
    and number cards must share the same rank. Suits never matter.
    """
    if a.is_ten_value or b.is_ten_value:
        return a.is_ten_value and b.is_ten_value
    return a.rank == b.rank


_DECK_RANKS = (
    Rank.ACE,
    Rank.KING,
    Rank.QUEEN,
    Rank.JACK,
    Rank.TEN,
    Rank.NINE,
    Rank.EIGHT,
    Rank.SEVEN,
    Rank.SIX,
    Rank.FIVE,
    Rank.FOUR,
    Rank.THREE,
    Rank.TWO,
)
_DECK_SUITS = (Suit.SPADES, Suit.CLUBS, Suit.DIAMONDS, Suit.HEARTS)

# The canonical 52-card deck every shoe is rebuilt from
DECK: tuple[Card, ...] = tuple(
    Card(rank, suit) for rank in _DECK_RANKS for suit in _DECK_SUITS
)


class Shoe:
    """
    The single-deck draw pile shared by every round.

    Cards are dealt from the end of the pile. The shoe is only rebuilt
    between rounds, via ensure_shuffled().
    """

    def __init__(self, rng: Random | None = None) -> None:
        """
        Initialize a freshly shuffled shoe.

        Args:
            rng: Random number generator for shuffling
        """
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self.shuffle()

    def reset(self) -> None:
        """Reset shoe to the canonical deck order."""
        self._cards = list(DECK)

    def shuffle(self) -> None:
        """Rebuild the shoe from a full deck and shuffle it."""
        self.reset()
        self._rng.shuffle(self._cards)

    def ensure_shuffled(self) -> bool:
        """
        Rebuild the shoe if it has run low.

        Returns:
            True if the shoe was reshuffled
        """
        if not self.needs_shuffle:
            return False
        self.shuffle()
        return True

    def deal(self, n: int) -> list[Card]:
        """
        Remove and return the last n cards of the shoe.

        Raises:
            ShoeUnderflowError: if n is not strictly less than the cards remaining
        """
        remaining = len(self._cards)
        if n >= remaining:
            raise ShoeUnderflowError(
                f"Cannot deal {n} cards from a shoe holding {remaining}"
            )
        dealt = self._cards[remaining - n:]
        del self._cards[remaining - n:]
        return dealt

    def draw(self) -> Card:
        """Deal a single card."""
        return self.deal(1)[0]

    @property
    def needs_shuffle(self) -> bool:
        """Check if the shoe has fallen below the reshuffle threshold."""
        return len(self._cards) < RESHUFFLE_THRESHOLD

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
