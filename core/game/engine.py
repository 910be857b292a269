"""Blackjack round engine with state machine."""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from random import Random
from typing import Callable, Sequence

from transitions import Machine

from core.cards import Card, Shoe
from core.hand import Hand, evaluate_hands
from core.rules import DEALER_GOAL
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.state import DECISION_STATES, RoundState

logger = logging.getLogger(__name__)


class Command(Enum):
    """Single-key player commands."""

    HIT = "H"
    STAND = "S"
    SPLIT = "P"
    DOUBLE = "D"

    @property
    def label(self) -> str:
        """Return the prompt label with the key in brackets."""
        return {
            Command.HIT: "(H)it",
            Command.STAND: "(S)tand",
            Command.SPLIT: "s(P)lit",
            Command.DOUBLE: "(D)ouble",
        }[self]

    @classmethod
    def parse(cls, line: str) -> "Command | None":
        """Map the first character of an input line to a command."""
        try:
            return cls(line[:1].upper())
        except ValueError:
            return None


class RoundOutcome(Enum):
    """Result of a single player hand."""

    BLACKJACK = auto()
    BUST = auto()
    WIN = auto()
    LOSS = auto()
    TIE = auto()

    @property
    def is_win(self) -> bool:
        """Check if this outcome counts towards the win tally."""
        return self in (RoundOutcome.BLACKJACK, RoundOutcome.WIN)


@dataclass
class RoundResult:
    """Final state of a finished round."""

    outcomes: list[RoundOutcome]
    player_hands: list[Hand]
    dealer_hand: Hand
    aborted: bool = False

    @property
    def wins(self) -> int:
        """Return the number of winning player hands."""
        return sum(1 for outcome in self.outcomes if outcome.is_win)


@dataclass
class Tally:
    """Running totals for the lifetime of the process."""

    wins: int = 0
    rounds_played: int = 0


# Called with the currently valid commands, returns one line of player input
CommandSource = Callable[[Sequence[Command]], str]


class BlackjackRound:
    """
    One round of blackjack using a state machine.

    The round never reads input or prints by itself. Commands come in
    through command(), everything that happens goes out as events.
    """

    # State machine states
    STATES = [s.name.lower() for s in RoundState]

    _DECIDING = [s.name.lower() for s in DECISION_STATES]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "deal_cards", "source": "initial", "dest": "awaiting_first_decision"},
        {"trigger": "natural", "source": "awaiting_first_decision", "dest": "blackjack"},
        {
            "trigger": "continue_hand",
            "source": ["awaiting_first_decision", "awaiting_decision"],
            "dest": "awaiting_decision",
        },
        {
            "trigger": "next_hand",
            "source": ["awaiting_first_decision", "awaiting_decision"],
            "dest": "awaiting_split_second_decision",
        },
        {
            "trigger": "continue_split_hand",
            "source": "awaiting_split_second_decision",
            "dest": "awaiting_split_second_decision",
        },
        {"trigger": "player_done", "source": _DECIDING, "dest": "standing"},
        {"trigger": "player_busts_all", "source": _DECIDING, "dest": "busted"},
        {"trigger": "abort", "source": "awaiting_first_decision", "dest": "aborted"},
        {"trigger": "dealer_turn", "source": "standing", "dest": "awaiting_dealer_play"},
        {
            "trigger": "resolve",
            "source": ["blackjack", "busted", "awaiting_dealer_play"],
            "dest": "resolved",
        },
    ]

    def __init__(
        self,
        shoe: Shoe,
        events: EventEmitter | None = None,
        abort_on_invalid_split: bool = False,
    ) -> None:
        """
        Initialize a round that deals from the given shoe.

        Args:
            shoe: The shared shoe, owned by the caller
            events: Emitter to publish round events on
            abort_on_invalid_split: End the round instead of re-prompting
                when a split is asked for on cards that cannot be split
        """
        self.shoe = shoe
        self.events = events if events is not None else EventEmitter()
        self.abort_on_invalid_split = abort_on_invalid_split

        self.player_hands: list[Hand] = []
        self.current_hand_index: int = 0
        self.dealer_hand = Hand()
        self.outcomes: list[RoundOutcome] = []

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="initial",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> RoundState:
        """Get current round state as enum."""
        return RoundState[self._machine_state.upper()]  # type: ignore

    @property
    def current_hand(self) -> Hand | None:
        """Get the player hand currently being played."""
        if 0 <= self.current_hand_index < len(self.player_hands):
            return self.player_hands[self.current_hand_index]
        return None

    @property
    def is_split(self) -> bool:
        """Check if the player split this round."""
        return len(self.player_hands) > 1

    @property
    def awaiting_input(self) -> bool:
        """Check if the round is blocked on a player command."""
        return self.state in DECISION_STATES

    @property
    def finished(self) -> bool:
        """Check if the round has reached a terminal state."""
        return self.state in (RoundState.RESOLVED, RoundState.ABORTED)

    @property
    def valid_commands(self) -> list[Command]:
        """Return the commands accepted in the current state."""
        if self.state == RoundState.AWAITING_FIRST_DECISION:
            commands = [Command.HIT, Command.STAND]
            hand = self.current_hand
            if hand is not None and hand.is_splittable:
                commands.append(Command.SPLIT)
            commands.append(Command.DOUBLE)
            return commands
        if self.awaiting_input:
            return [Command.HIT, Command.STAND]
        return []

    @property
    def result(self) -> RoundResult:
        """Return the result of a finished round."""
        if not self.finished:
            raise RuntimeError(f"Round is not finished (state: {self.state})")
        return RoundResult(
            outcomes=list(self.outcomes),
            player_hands=self.player_hands,
            dealer_hand=self.dealer_hand,
            aborted=self.state == RoundState.ABORTED,
        )

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to round events."""
        self.events.subscribe(handler, event_type)

    def play(self, read_command: CommandSource) -> RoundResult:
        """
        Play the round to completion.

        Blocks on read_command at every decision point. Errors raised by
        read_command (such as EOFError) propagate unchanged.
        """
        if self.state == RoundState.INITIAL:
            self.start()

        while self.awaiting_input:
            self.command(read_command(self.valid_commands))

        return self.result

    def start(self) -> RoundState:
        """Reshuffle if needed and deal the opening cards."""
        if self.shoe.ensure_shuffled():
            logger.info("Shoe reshuffled to %d cards", self.shoe.cards_remaining)
            self.events.emit_new(
                EventType.SHOE_SHUFFLED,
                cards_remaining=self.shoe.cards_remaining,
            )

        player_hand = Hand()
        self.player_hands = [player_hand]
        self.current_hand_index = 0

        self._deal_to_hand(player_hand, 2)
        self._deal_to_hand(self.dealer_hand, 2)
        self.deal_cards()
        self.events.emit_new(EventType.ROUND_STARTED)

        if player_hand.is_blackjack:
            self.natural()
            self._reveal_hands()
            self.events.emit_new(EventType.PLAYER_BLACKJACK, hand_index=0)
            self.outcomes = [RoundOutcome.BLACKJACK]
            self.resolve()
            logger.info("Player blackjack with %s", player_hand)
            return self.state

        self._show_table()
        return self.state

    def command(self, line: str) -> bool:
        """
        Apply one line of player input.

        Only the first character counts. Rejected input is reported as an
        INVALID_ACTION event and leaves the round waiting for another command.

        Returns:
            True if the command was carried out
        """
        if not self.awaiting_input:
            return False

        logger.debug("Command %r in state %s", line, self.state)
        options = self.valid_commands
        cmd = Command.parse(line)

        if (
            cmd == Command.SPLIT
            and cmd not in options
            and self.state == RoundState.AWAITING_FIRST_DECISION
        ):
            return self._reject_split(line[:1], options)

        if cmd is None or cmd not in options:
            self._reject(line[:1], options)
            return False

        handlers = {
            Command.HIT: self._hit,
            Command.STAND: self._stand,
            Command.DOUBLE: self._double_down,
            Command.SPLIT: self._split,
        }
        return handlers[cmd]()

    def _reject(
        self,
        key: str,
        options: Sequence[Command],
        message: str | None = None,
    ) -> None:
        """Report a command that is not valid right now."""
        expected = [option.value for option in options]
        logger.warning("Rejected input %r, expected one of %s", key, expected)
        self.events.emit_new(
            EventType.INVALID_ACTION,
            key=key,
            expected=expected,
            message=message,
        )

    def _reject_split(self, key: str, options: Sequence[Command]) -> bool:
        """Report a split on cards that are not split-equal."""
        first, second = self.current_hand.cards  # type: ignore[union-attr]
        self._reject(key, options, message=f"Cannot split {first} and {second}")

        if self.abort_on_invalid_split:
            self.abort()
            logger.info("Round aborted after invalid split")
            self.events.emit_new(EventType.ROUND_ABORTED)
        return False

    def _deal_to_hand(self, hand: Hand, n: int = 1) -> list[Card]:
        """
        Deal cards from the shoe into a hand, one CARD_DEALT event per card.

        The dealer's second card is the hole card and is dealt face down.
        """
        is_dealer = hand is self.dealer_hand
        cards = self.shoe.deal(n)

        for card in cards:
            hand.add_card(card)
            self.events.emit_new(
                EventType.CARD_DEALT,
                card=str(card),
                hand="dealer" if is_dealer else "player",
                hand_index=None if is_dealer else self._hand_index(hand),
                face_up=not (is_dealer and len(hand) == 2),
            )
        return cards

    def _hand_index(self, hand: Hand) -> int:
        """Return the position of a player hand, by identity."""
        return next(i for i, h in enumerate(self.player_hands) if h is hand)

    def _hit(self) -> bool:
        """Player hits (takes another card)."""
        hand = self.current_hand
        if hand is None:
            return False

        card = self._deal_to_hand(hand)[0]
        self.events.emit_new(
            EventType.PLAYER_HIT,
            hand_index=self.current_hand_index,
            card=str(card),
            hand_value=hand.value,
        )

        if hand.is_done:
            self._show_table()
            self._advance_to_next_hand()
            return True

        if self.state == RoundState.AWAITING_SPLIT_SECOND_DECISION:
            self.continue_split_hand()
        else:
            self.continue_hand()
        self._show_table()
        return True

    def _stand(self) -> bool:
        """Player stands (keeps current hand)."""
        hand = self.current_hand
        if hand is None:
            return False

        self.events.emit_new(
            EventType.PLAYER_STAND,
            hand_index=self.current_hand_index,
            hand_value=hand.value,
        )
        self._advance_to_next_hand()
        return True

    def _double_down(self) -> bool:
        """Player doubles down: exactly one more card, then the hand is over."""
        hand = self.current_hand
        if hand is None:
            return False

        card = self._deal_to_hand(hand)[0]
        hand.is_doubled = True
        self.events.emit_new(
            EventType.PLAYER_DOUBLE,
            hand_index=self.current_hand_index,
            card=str(card),
            hand_value=hand.value,
        )
        self._advance_to_next_hand()
        return True

    def _split(self) -> bool:
        """Player splits a pair into two hands, one level only."""
        hand = self.current_hand
        if hand is None:
            return False

        second_card = hand.cards.pop()
        new_hand = Hand(cards=[second_card], is_split_hand=True)
        hand.is_split_hand = True
        self.player_hands.append(new_hand)

        # Deal one card to each hand
        self._deal_to_hand(hand)
        self._deal_to_hand(new_hand)

        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            hand1_value=hand.value,
            hand2_value=new_hand.value,
        )

        if hand.is_done:
            self._show_table()
            self._advance_to_next_hand()
            return True

        self.continue_hand()
        self._show_table()
        return True

    def _advance_to_next_hand(self) -> None:
        """Move to the next live hand or end the player's turn."""
        self.current_hand_index += 1

        while self.current_hand_index < len(self.player_hands):
            if not self.player_hands[self.current_hand_index].is_done:
                self.next_hand()
                self._show_table()
                return
            self.current_hand_index += 1

        self._finish_player_turn()

    def _finish_player_turn(self) -> None:
        """Score the player's hands and hand over to the dealer if any survive."""
        self._reveal_hands()

        for i, hand in enumerate(self.player_hands):
            if hand.is_busted:
                self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=i, hand_value=hand.value)

        if all(hand.is_busted for hand in self.player_hands):
            self.player_busts_all()
            self._resolve_round()
            return

        self.player_done()
        self.dealer_turn()
        self._play_dealer()

    def _play_dealer(self) -> None:
        """Dealer draws until reaching 17 or more."""
        while self.dealer_hand.value < DEALER_GOAL:
            card = self._deal_to_hand(self.dealer_hand)[0]
            self.events.emit_new(
                EventType.DEALER_HITS,
                card=str(card),
                hand=str(self.dealer_hand),
                hand_value=self.dealer_hand.value,
            )

        if self.dealer_hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS, hand_value=self.dealer_hand.value)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=self.dealer_hand.value)

        self._resolve_round()

    def _resolve_round(self) -> None:
        """Decide the outcome of every player hand."""
        outcomes: list[RoundOutcome] = []

        for i, hand in enumerate(self.player_hands):
            if hand.is_busted:
                outcomes.append(RoundOutcome.BUST)
                continue

            result = evaluate_hands(hand, self.dealer_hand)
            if result == 1:
                outcome = RoundOutcome.WIN
                self.events.emit_new(EventType.PLAYER_WINS, hand_index=i, split=self.is_split)
            elif result == -1:
                outcome = RoundOutcome.LOSS
                self.events.emit_new(EventType.PLAYER_LOSES, hand_index=i, split=self.is_split)
            else:
                outcome = RoundOutcome.TIE
                self.events.emit_new(EventType.PUSH, hand_index=i, split=self.is_split)
            outcomes.append(outcome)

        self.outcomes = outcomes
        logger.info(
            "Round resolved: %s against dealer %d",
            ", ".join(outcome.name for outcome in outcomes),
            self.dealer_hand.value,
        )
        self.resolve()

    def _show_table(self) -> None:
        """Publish the table with the dealer's hole card hidden."""
        self.events.emit_new(
            EventType.TABLE_UPDATED,
            player_hands=[str(hand) for hand in self.player_hands],
            current_hand_index=self.current_hand_index,
            dealer=self.dealer_hand.masked(),
        )

    def _reveal_hands(self) -> None:
        """Publish the table with the dealer's full hand."""
        self.events.emit_new(
            EventType.HANDS_REVEALED,
            player_hands=[str(hand) for hand in self.player_hands],
            dealer=str(self.dealer_hand),
        )


class BlackjackGame:
    """
    A session of consecutive rounds against the dealer.

    Owns the shoe and the win tally for as long as the process runs.
    """

    def __init__(
        self,
        shoe: Shoe | None = None,
        rng: Random | None = None,
        abort_on_invalid_split: bool = False,
    ) -> None:
        """
        Initialize a new game.

        Args:
            shoe: Shoe to deal from (a fresh shuffled one if not provided)
            rng: Random number generator for reproducible games
            abort_on_invalid_split: Passed on to every round
        """
        self.shoe = shoe if shoe is not None else Shoe(rng=rng)
        self.tally = Tally()
        self.events = EventEmitter()
        self.abort_on_invalid_split = abort_on_invalid_split
        self.current_round: BlackjackRound | None = None

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to events from every round."""
        self.events.subscribe(handler, event_type)

    def new_round(self) -> BlackjackRound:
        """Create the next round on the shared shoe."""
        if self.current_round is not None and not self.current_round.finished:
            raise RuntimeError("Previous round is still in progress")
        self.current_round = BlackjackRound(
            self.shoe,
            events=self.events,
            abort_on_invalid_split=self.abort_on_invalid_split,
        )
        return self.current_round

    def play_round(self, read_command: CommandSource) -> RoundResult:
        """Play one full round and update the tally."""
        result = self.new_round().play(read_command)
        self.record(result)
        return result

    def record(self, result: RoundResult) -> None:
        """Add a finished round to the tally."""
        self.tally.rounds_played += 1
        self.tally.wins += result.wins
        self.events.emit_new(
            EventType.ROUND_ENDED,
            outcomes=[outcome.name for outcome in result.outcomes],
            wins=self.tally.wins,
            rounds_played=self.tally.rounds_played,
        )
