"""Game state enumeration."""

from enum import Enum, auto


class GameState(Enum):
    """
    Game state machine states.

    Flow: NOT_STARTED → PLAYING → one of the five outcome states.
    Outcome states are terminal until the next start_game.
    """

    NOT_STARTED = auto()
    PLAYING = auto()

    # Decided the instant a card pushes a total over 21
    HUMAN_BUST = auto()
    COMPUTER_BUST = auto()

    # Decided by comparing totals, or by a natural on the deal
    HUMAN_WIN = auto()
    COMPUTER_WIN = auto()
    DRAW = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def is_terminal(self) -> bool:
        """Check if the game has been decided."""
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset(
    {
        GameState.HUMAN_BUST,
        GameState.COMPUTER_BUST,
        GameState.HUMAN_WIN,
        GameState.COMPUTER_WIN,
        GameState.DRAW,
    }
)

