"""Adapter connecting the core round engine to a text terminal."""

import sys
from typing import Callable, Sequence, TextIO

from core.game.engine import BlackjackGame, Command
from core.game.events import EventType, GameEvent


# Labels for the primary and split hands, by hand index
HAND_LABELS = ("Player Hand", "Split Hand")

CONTINUE_PROMPT = "Press enter to continue>"


def format_expected(keys: Sequence[str]) -> str:
    """Join command keys as 'H, S, or D'."""
    if len(keys) < 2:
        return "".join(keys)
    if len(keys) == 2:
        return f"{keys[0]} or {keys[1]}"
    return f"{', '.join(keys[:-1])}, or {keys[-1]}"


def format_prompt(options: Sequence[Command]) -> str:
    """Build the decision prompt from the valid commands."""
    return ", ".join(option.label for option in options) + "> "


class ConsoleRenderer:
    """Writes engine events as lines of text.

    Table and result lines go to ``out``, rejected commands to ``err``.
    """

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None):
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self._split = False

        self._handlers: dict[EventType, Callable[[GameEvent], None]] = {
            EventType.ROUND_STARTED: self._on_round_started,
            EventType.TABLE_UPDATED: self._on_table,
            EventType.HANDS_REVEALED: self._on_table,
            EventType.PLAYER_SPLIT: self._on_split,
            EventType.PLAYER_BLACKJACK: self._on_blackjack,
            EventType.PLAYER_BUSTS: self._on_outcome,
            EventType.PLAYER_WINS: self._on_outcome,
            EventType.PLAYER_LOSES: self._on_outcome,
            EventType.PUSH: self._on_outcome,
            EventType.DEALER_HITS: self._on_dealer_hits,
            EventType.DEALER_BUSTS: self._on_dealer_busts,
            EventType.INVALID_ACTION: self._on_invalid_action,
            EventType.ROUND_ABORTED: self._on_round_aborted,
            EventType.ROUND_ENDED: self._on_round_ended,
        }

    def attach(self, game: BlackjackGame) -> None:
        """Subscribe to every event of a game."""
        game.subscribe(self.handle)

    def handle(self, event: GameEvent) -> None:
        handler = self._handlers.get(event.event_type)
        if handler is not None:
            handler(event)

    def _line(self, text: str) -> None:
        print(text, file=self.out)

    def _on_round_started(self, event: GameEvent) -> None:
        self._split = False

    def _on_split(self, event: GameEvent) -> None:
        self._split = True

    def _on_table(self, event: GameEvent) -> None:
        for label, hand in zip(HAND_LABELS, event.data["player_hands"]):
            self._line(f"{label}: {hand}")
        self._line(f"Dealer's Hand: {event.data['dealer']}")

    def _on_blackjack(self, event: GameEvent) -> None:
        self._line("Blackjack: Player Wins")

    def _on_outcome(self, event: GameEvent) -> None:
        text = {
            EventType.PLAYER_BUSTS: "Player Busts",
            EventType.PLAYER_WINS: "Player Wins",
            EventType.PLAYER_LOSES: "Dealer Wins",
            EventType.PUSH: "Tie",
        }[event.event_type]
        if self._split:
            text = f"{HAND_LABELS[event.data['hand_index']]}: {text}"
        self._line(text)

    def _on_dealer_hits(self, event: GameEvent) -> None:
        self._line(f"Dealer's Hand: {event.data['hand']}")

    def _on_dealer_busts(self, event: GameEvent) -> None:
        self._line("Dealer Busts")

    def _on_invalid_action(self, event: GameEvent) -> None:
        expected = format_expected(event.data["expected"])
        message = event.data.get("message")
        if not message:
            key = event.data["key"] or "(empty)"
            message = f"unexpected input {key}"
        print(f"Error: {message}: Expected {expected}", file=self.err)
        self.err.flush()

    def _on_round_aborted(self, event: GameEvent) -> None:
        self._line("Round abandoned, no result recorded")

    def _on_round_ended(self, event: GameEvent) -> None:
        self._line(f"Wins: {event.data['wins']} / Rounds: {event.data['rounds_played']}")


class ConsoleInput:
    """Reads player commands one line at a time.

    Instances are callable with the valid commands, so they can be handed
    straight to ``BlackjackGame.play_round``.
    """

    def __init__(self, stream: TextIO | None = None, out: TextIO | None = None):
        self.stream = stream if stream is not None else sys.stdin
        self.out = out if out is not None else sys.stdout

    def __call__(self, options: Sequence[Command]) -> str:
        return self.read_line(format_prompt(options))

    def read_line(self, prompt: str) -> str:
        """Show a prompt and block until a line arrives.

        Raises:
            EOFError: if the input stream is closed
        """
        # Prompt must be visible before the read blocks
        self.out.write(prompt)
        self.out.flush()
        line = self.stream.readline()
        if not line:
            raise EOFError("Input stream closed")
        return line.rstrip("\r\n")

    def wait_for_enter(self) -> None:
        """Pause between rounds."""
        self.read_line(CONTINUE_PROMPT + "\n")
