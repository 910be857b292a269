"""Configuration management with environment variable support."""

import os
from dataclasses import dataclass, field


def _parse_seed() -> int | None:
    """Parse BLACKJACK_SEED environment variable."""
    seed = os.getenv("BLACKJACK_SEED", "").strip()
    if not seed:
        return None
    try:
        return int(seed)
    except ValueError:
        raise ValueError(f"BLACKJACK_SEED must be an integer, got {seed!r}") from None


@dataclass(frozen=True)
class GameConfig:
    """Table behaviour that is not part of the blackjack rules."""

    seed: int | None = field(default_factory=_parse_seed)
    abort_on_invalid_split: bool = field(
        default_factory=lambda: os.getenv("BLACKJACK_ABORT_ON_BAD_SPLIT", "false").lower()
        == "true"
    )


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING").upper())
    game: GameConfig = field(default_factory=GameConfig)


# Global configuration instance
config = AppConfig()
