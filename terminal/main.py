"""Main entry point for the terminal blackjack game."""

import argparse
import sys
from random import Random

from config import config
from core.game.engine import BlackjackGame
from terminal.console import ConsoleInput, ConsoleRenderer
from terminal.logging_utils import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blackjack",
        description="Play blackjack against the dealer in the terminal.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=config.game.seed,
        help="Seed for the shuffle, for a reproducible game (env BLACKJACK_SEED)",
    )
    parser.add_argument(
        "--rounds",
        type=int,
        default=None,
        help="Stop after this many rounds (default: play until input ends)",
    )
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Diagnostic log level, written to stderr (env LOG_LEVEL)",
    )
    parser.add_argument(
        "--abort-on-invalid-split",
        action="store_true",
        default=config.game.abort_on_invalid_split,
        help="End the round when a split is asked for on an unmatched pair "
        "(env BLACKJACK_ABORT_ON_BAD_SPLIT)",
    )
    return parser


def run(
    game: BlackjackGame,
    console: ConsoleInput,
    rounds: int | None = None,
) -> None:
    """Play rounds until the limit is reached. EOFError propagates."""
    while rounds is None or game.tally.rounds_played < rounds:
        game.play_round(console)
        if rounds is None or game.tally.rounds_played < rounds:
            console.wait_for_enter()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.rounds is not None and args.rounds < 1:
        parser.error("--rounds must be at least 1")

    setup_logging(args.log_level)
    logger.info("Starting game (seed=%s)", args.seed)

    game = BlackjackGame(
        rng=Random(args.seed),
        abort_on_invalid_split=args.abort_on_invalid_split,
    )
    ConsoleRenderer().attach(game)

    try:
        run(game, ConsoleInput(), rounds=args.rounds)
    except EOFError:
        logger.error(
            "Input stream closed after %d rounds, exiting",
            game.tally.rounds_played,
        )
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
