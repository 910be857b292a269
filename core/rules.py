"""Fixed table rules for the terminal game."""

# Best possible hand total
GOAL = 21

# Dealer draws while below this total
DEALER_GOAL = 17

# Cards in one standard deck
DECK_SIZE = 52

# Shoe is rebuilt when fewer than this many cards remain
RESHUFFLE_THRESHOLD = DECK_SIZE // 3
