"""Round engine and state management."""

from core.game.events import GameEvent, EventType, EventEmitter
from core.game.state import RoundState
from core.game.engine import (
    BlackjackGame,
    BlackjackRound,
    Command,
    RoundOutcome,
    RoundResult,
    Tally,
)

__all__ = [
    "GameEvent",
    "EventType",
    "EventEmitter",
    "RoundState",
    "BlackjackGame",
    "BlackjackRound",
    "Command",
    "RoundOutcome",
    "RoundResult",
    "Tally",
]
