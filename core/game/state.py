"""Round state enumeration."""

from enum import Enum, auto


class RoundState(Enum):
    """
    Round state machine states.

    Flow: INITIAL → AWAITING_FIRST_DECISION → (BLACKJACK | STANDING | BUSTED)
    → AWAITING_DEALER_PLAY → RESOLVED
    """

    # Nothing dealt yet
    INITIAL = auto()

    # Two cards dealt, every option still open
    AWAITING_FIRST_DECISION = auto()

    # Hit/stand only, on the primary hand
    AWAITING_DECISION = auto()

    # Hit/stand only, on the hand created by a split
    AWAITING_SPLIT_SECOND_DECISION = auto()

    # Natural 21 on the first two cards
    BLACKJACK = auto()

    # Player finished with at least one live hand
    STANDING = auto()

    # Every player hand went over 21
    BUSTED = auto()

    # Round ended without a result
    ABORTED = auto()

    # Dealer completes their hand
    AWAITING_DEALER_PLAY = auto()

    # Outcomes decided
    RESOLVED = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


DECISION_STATES = (
    RoundState.AWAITING_FIRST_DECISION,
    RoundState.AWAITING_DECISION,
    RoundState.AWAITING_SPLIT_SECOND_DECISION,
)


# Valid state transitions
VALID_TRANSITIONS: dict[RoundState, list[RoundState]] = {
    RoundState.INITIAL: [RoundState.AWAITING_FIRST_DECISION],
    RoundState.AWAITING_FIRST_DECISION: [
        RoundState.BLACKJACK,
        RoundState.AWAITING_DECISION,
        RoundState.AWAITING_SPLIT_SECOND_DECISION,
        RoundState.STANDING,
        RoundState.BUSTED,
        RoundState.ABORTED,
    ],
    RoundState.AWAITING_DECISION: [
        RoundState.AWAITING_DECISION,
        RoundState.AWAITING_SPLIT_SECOND_DECISION,
        RoundState.STANDING,
        RoundState.BUSTED,
    ],
    RoundState.AWAITING_SPLIT_SECOND_DECISION: [
        RoundState.AWAITING_SPLIT_SECOND_DECISION,
        RoundState.STANDING,
        RoundState.BUSTED,
    ],
    RoundState.BLACKJACK: [RoundState.RESOLVED],
    RoundState.STANDING: [RoundState.AWAITING_DEALER_PLAY],
    RoundState.BUSTED: [RoundState.RESOLVED],
    RoundState.ABORTED: [],  # Terminal state
    RoundState.AWAITING_DEALER_PLAY: [RoundState.RESOLVED],
    RoundState.RESOLVED: [],  # Terminal state
}


def is_valid_transition(from_state: RoundState, to_state: RoundState) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Desired state

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])
