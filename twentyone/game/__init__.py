"""Game engine and state management."""

from twentyone.game.events import GameEvent, EventType, EventEmitter
from twentyone.game.state import GameState
from twentyone.game.engine import TwentyOneGame, format_cards

__all__ = [
    "GameEvent",
    "EventType",
    "EventEmitter",
    "GameState",
    "TwentyOneGame",
    "format_cards",
]
