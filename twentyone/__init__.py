"""Human versus computer twenty-one engine - 100% UI-agnostic."""

from twentyone.cards import Card, Deck, Rank, Suit, new_shuffled_deck
from twentyone.exceptions import (
    ExhaustedDeck,
    InvalidOperation,
    PersistenceFailure,
    TwentyOneError,
)
from twentyone.game import GameState, TwentyOneGame
from twentyone.hand import Hand, Scoring
from twentyone.player import Player
from twentyone.policy import ComputerPolicy
from twentyone.rules import RuleSet

__version__ = "1.0.0"

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "new_shuffled_deck",
    "Hand",
    "Scoring",
    "Player",
    "ComputerPolicy",
    "RuleSet",
    "GameState",
    "TwentyOneGame",
    "TwentyOneError",
    "InvalidOperation",
    "ExhaustedDeck",
    "PersistenceFailure",
]
