"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from core.cards import Card, is_split_equal
from core.rules import GOAL


def score(cards: Iterable[Card]) -> int:
    """
    Calculate the best total of a group of cards.

    Every Ace first counts as 1. While the total is under 21, as many Aces
    as fit whole tens into the gap up to 21 are promoted to 11.
    """
    total = 0
    aces = 0

    for card in cards:
        if card.is_ace:
            aces += 1
        total += card.value

    if total < GOAL:
        promotable = (GOAL - total) // 10
        total += min(aces, promotable) * 10

    return total


def format_cards(cards: Iterable[Card]) -> str:
    """Render cards as a pipe-delimited list of card codes."""
    return "|".join(str(card) for card in cards)


@dataclass
class Hand:
    """A blackjack hand with value calculation."""

    cards: list[Card] = field(default_factory=list)
    is_split_hand: bool = False
    is_doubled: bool = False

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    def add_cards(self, cards: Iterable[Card]) -> None:
        """Add several cards to the hand."""
        self.cards.extend(cards)

    @property
    def value(self) -> int:
        """Calculate the best hand value."""
        return score(self.cards)

    @property
    def is_blackjack(self) -> bool:
        """Check if the hand is a natural blackjack (21 with 2 cards)."""
        return (
            len(self.cards) == 2
            and self.value == GOAL
            and not self.is_split_hand
        )

    @property
    def is_busted(self) -> bool:
        """Check if the hand has busted (value > 21)."""
        return self.value > GOAL

    @property
    def is_done(self) -> bool:
        """Check if the hand can take no more cards."""
        return self.value >= GOAL

    @property
    def is_pair(self) -> bool:
        """Check if the hand holds exactly two split-equal cards."""
        return len(self.cards) == 2 and is_split_equal(self.cards[0], self.cards[1])

    @property
    def is_splittable(self) -> bool:
        """Check if the hand can be split."""
        return self.is_pair and not self.is_split_hand

    def masked(self) -> str:
        """Render the hand with only its first card visible."""
        if not self.cards:
            return ""
        return f"{self.cards[0]}|**"

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        return f"{format_cards(self.cards)} (Score {self.value})"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, value={self.value})"


def evaluate_hands(player_hand: Hand, dealer_hand: Hand) -> int:
    """
    Compare player and dealer hands.

    Returns:
        1 if player wins
        -1 if dealer wins
        0 if tie
    """
    # Player busts always loses
    if player_hand.is_busted:
        return -1

    # Dealer busts, every live hand wins
    if dealer_hand.is_busted:
        return 1

    player_value = player_hand.value
    dealer_value = dealer_hand.value

    if player_value > dealer_value:
        return 1
    if dealer_value > player_value:
        return -1
    return 0
