"""Hand evaluation under both supported scoring interpretations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator

from twentyone.cards import Card

BUST_LIMIT = 21


class Scoring(Enum):
    """How cards contribute to a hand total."""

    # 2-10 face value, J/Q/K = 10, Ace = 11 or 1
    STANDARD = "standard"
    # Every card counts its rank: Ace = 1, J = 11, Q = 12, K = 13
    RANK = "rank"

    def __str__(self) -> str:
        return self.value


def score_cards(cards: Iterable[Card], scoring: Scoring = Scoring.STANDARD) -> int:
    """
    Calculate the best total for a sequence of cards.

    Under standard scoring this returns the highest value that doesn't bust,
    or the lowest bust value.
    """
    if scoring is Scoring.RANK:
        return sum(card.rank_value for card in cards)

    total = 0
    aces = 0

    for card in cards:
        if card.is_ace:
            aces += 1
        total += card.value

    # Reduce aces from 11 to 1 as needed
    while total > BUST_LIMIT and aces > 0:
        total -= 10
        aces -= 1

    return total


@dataclass
class Hand:
    """An ordered hand of cards with value calculation."""

    cards: list[Card] = field(default_factory=list)
    scoring: Scoring = Scoring.STANDARD

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    def clear(self) -> None:
        """Remove all cards from the hand."""
        self.cards.clear()

    @property
    def value(self) -> int:
        """Calculate the hand total."""
        return score_cards(self.cards, self.scoring)

    @property
    def is_soft(self) -> bool:
        """
        Check if the hand is soft (has an ace counted as 11).

        Raw rank scoring never counts an ace as 11, so such hands are never soft.
        """
        if self.scoring is Scoring.RANK:
            return False
        if not any(card.is_ace for card in self.cards):
            return False

        total_hard = sum(1 if card.is_ace else card.value for card in self.cards)
        return total_hard + 10 <= BUST_LIMIT

    @property
    def is_natural(self) -> bool:
        """Check if the hand is a natural blackjack (21 with 2 cards)."""
        return len(self.cards) == 2 and self.value == BUST_LIMIT

    @property
    def is_busted(self) -> bool:
        """Check if the hand has busted (value > 21)."""
        return self.value > BUST_LIMIT

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.value})"
        if self.is_soft:
            value_str = f"(soft {self.value})"
        if self.is_natural:
            value_str = "(BLACKJACK)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, value={self.value})"


def evaluate_hands(human_hand: Hand, computer_hand: Hand) -> int:
    """
    Compare the human and computer hands.

    Returns:
        1 if the human wins
        -1 if the computer wins
        0 if it is a draw
    """
    if human_hand.is_busted:
        return -1
    if computer_hand.is_busted:
        return 1

    human_value = human_hand.value
    computer_value = computer_hand.value

    if human_value > computer_value:
        return 1
    if computer_value > human_value:
        return -1
    return 0
