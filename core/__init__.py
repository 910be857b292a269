"""Core blackjack engine - 100% UI-agnostic."""

from core.cards import DECK, Card, Shoe, ShoeUnderflowError, Rank, Suit, is_split_equal
from core.hand import Hand, score

__all__ = [
    "DECK",
    "Card",
    "Shoe",
    "ShoeUnderflowError",
    "Rank",
    "Suit",
    "is_split_equal",
    "Hand",
    "score",
]
