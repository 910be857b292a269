"""Tests for the round state machine definition."""

import pytest
from transitions import MachineError

from core.game.engine import BlackjackRound
from core.game.state import DECISION_STATES, RoundState, is_valid_transition


def test_every_engine_transition_is_declared_valid():
    """Test the engine's machine only moves along declared edges."""
    for transition in BlackjackRound.TRANSITIONS:
        sources = transition["source"]
        if isinstance(sources, str):
            sources = [sources]
        dest = RoundState[transition["dest"].upper()]
        for source in sources:
            assert is_valid_transition(RoundState[source.upper()], dest), transition


def test_terminal_states_have_no_exits():
    for state in (RoundState.RESOLVED, RoundState.ABORTED):
        assert not any(is_valid_transition(state, other) for other in RoundState)


def test_blackjack_skips_dealer_play():
    assert is_valid_transition(RoundState.BLACKJACK, RoundState.RESOLVED)
    assert not is_valid_transition(RoundState.BLACKJACK, RoundState.AWAITING_DEALER_PLAY)


def test_decision_states():
    assert RoundState.AWAITING_FIRST_DECISION in DECISION_STATES
    assert RoundState.AWAITING_SPLIT_SECOND_DECISION in DECISION_STATES
    assert RoundState.STANDING not in DECISION_STATES


def test_state_str():
    assert str(RoundState.AWAITING_DEALER_PLAY) == "Awaiting Dealer Play"


def test_illegal_trigger_raises(shoe):
    """Test the machine refuses transitions from the wrong state."""
    round_ = BlackjackRound(shoe)
    assert round_.state == RoundState.INITIAL
    with pytest.raises(MachineError):
        round_.resolve()
