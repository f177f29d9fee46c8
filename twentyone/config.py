"""Configuration management with environment variable support."""

import os
import secrets
from dataclasses import dataclass, field

from twentyone.hand import Scoring
from twentyone.rules import RuleSet


def _env_flag(name: str, default: str = "false") -> bool:
    """Parse a true/false environment variable."""
    return os.getenv(name, default).lower() == "true"


def _parse_scoring() -> Scoring:
    """Parse TWENTYONE_SCORING ("standard" or "rank")."""
    value = os.getenv("TWENTYONE_SCORING", Scoring.STANDARD.value).strip().lower()
    try:
        return Scoring(value)
    except ValueError:
        raise ValueError(
            f"TWENTYONE_SCORING must be one of {[s.value for s in Scoring]}, got {value!r}"
        ) from None


@dataclass(frozen=True)
class GameConfig:
    """Default house rules."""

    scoring: Scoring = field(default_factory=_parse_scoring)
    natural_blackjack: bool = field(
        default_factory=lambda: _env_flag("TWENTYONE_NATURAL_BLACKJACK")
    )
    initial_cards: int = field(
        default_factory=lambda: int(os.getenv("TWENTYONE_INITIAL_CARDS", "1"))
    )
    strict: bool = field(default_factory=lambda: _env_flag("TWENTYONE_STRICT"))

    def to_rules(self) -> RuleSet:
        """Build the rule set these settings describe."""
        return RuleSet(
            scoring=self.scoring,
            initial_cards=self.initial_cards,
            natural_blackjack=self.natural_blackjack,
            strict=self.strict,
        )


@dataclass(frozen=True)
class SecurityConfig:
    """Security configuration."""

    # Signs saved games; set it explicitly or saves won't load in a new process
    secret_key: str = field(
        default_factory=lambda: os.getenv("TWENTYONE_SECRET_KEY", secrets.token_urlsafe(32))
    )


@dataclass(frozen=True)
class PersistenceConfig:
    """Saved game location."""

    save_path: str = field(
        default_factory=lambda: os.getenv("TWENTYONE_SAVE_PATH", "twentyone_save.dat")
    )


@dataclass(frozen=True)
class ConsoleConfig:
    """Console front-end pacing."""

    think_delay: float = field(
        default_factory=lambda: float(os.getenv("TWENTYONE_THINK_DELAY", "1.0"))
    )


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: _env_flag("DEBUG"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING").upper())

    game: GameConfig = field(default_factory=GameConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    console: ConsoleConfig = field(default_factory=ConsoleConfig)


# Global configuration instance
config = AppConfig()
