"""House rule variations."""

from dataclasses import dataclass

from twentyone.hand import Scoring


@dataclass(frozen=True)
class RuleSet:
    """
    Table rules configuration.

    The known variants of the game disagree on scoring and on the
    natural-blackjack shortcut, so both are rules rather than constants.
    """

    # How card values add up
    scoring: Scoring = Scoring.STANDARD

    # Cards dealt to each player by start_game (1 or 2)
    initial_cards: int = 1

    # Two-card 21 after a deal step ends the game immediately
    natural_blackjack: bool = False

    # Raise InvalidOperation instead of returning False
    strict: bool = False

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if not isinstance(self.scoring, Scoring):
            raise ValueError(f"scoring must be a Scoring, got {self.scoring!r}")
        if self.initial_cards not in (1, 2):
            raise ValueError("initial_cards must be 1 or 2")

    @classmethod
    def console_classic(cls) -> "RuleSet":
        """Original console rules: raw rank totals, one card each, no naturals."""
        return cls(scoring=Scoring.RANK, initial_cards=1, natural_blackjack=False)

    @classmethod
    def casino_style(cls) -> "RuleSet":
        """Standard totals with two cards each and the natural-blackjack shortcut."""
        return cls(scoring=Scoring.STANDARD, initial_cards=2, natural_blackjack=True)
