"""Player state shared by the human and the computer."""

from dataclasses import dataclass, field

from twentyone.cards import Card
from twentyone.hand import Hand, Scoring
from twentyone.policy import HitPolicy


@dataclass
class Player:
    """
    A seat at the table.

    The human and the computer are the same type; the computer is simply
    the player that carries a decision policy.
    """

    name: str
    policy: HitPolicy | None = None
    hand_state: Hand = field(default_factory=Hand)
    standing: bool = False

    @classmethod
    def human(cls, scoring: Scoring = Scoring.STANDARD) -> "Player":
        """Create an externally driven player."""
        return cls(name="human", hand_state=Hand(scoring=scoring))

    @classmethod
    def computer(cls, policy: HitPolicy, scoring: Scoring = Scoring.STANDARD) -> "Player":
        """Create a self-driven player."""
        return cls(name="computer", policy=policy, hand_state=Hand(scoring=scoring))

    @property
    def is_computer(self) -> bool:
        """Check if this player decides for itself."""
        return self.policy is not None

    @property
    def hand(self) -> tuple[Card, ...]:
        """Return a snapshot of the cards held."""
        return tuple(self.hand_state.cards)

    @property
    def score(self) -> int:
        """Return the current hand total."""
        return self.hand_state.value

    @property
    def is_busted(self) -> bool:
        """Check if the hand total exceeds 21."""
        return self.hand_state.is_busted

    @property
    def has_natural(self) -> bool:
        """Check if the hand is a two-card 21."""
        return self.hand_state.is_natural

    def add_card(self, card: Card) -> None:
        """Add a drawn card to the hand."""
        self.hand_state.add_card(card)

    def stand(self) -> None:
        """Stop drawing for the rest of the game."""
        self.standing = True

    def wants_to_hit(self) -> bool:
        """Ask the decision policy about the current score."""
        if self.policy is None:
            raise TypeError(f"Player {self.name!r} has no decision policy")
        return self.policy.should_hit(self.score)

    def reset(self) -> None:
        """Clear the hand and standing flag for a new game."""
        self.hand_state.clear()
        self.standing = False
