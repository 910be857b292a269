"""Logging setup for the terminal game."""

import logging
import sys

from config import config


def setup_logging(level: str = config.log_level) -> None:
    """Call once at program start. Logs go to stderr, away from the table output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
