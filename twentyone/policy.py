"""Decision policies for the computer player."""

from random import Random
from typing import Protocol

from twentyone.hand import BUST_LIMIT


class HitPolicy(Protocol):
    """Anything that can decide whether to take another card."""

    def should_hit(self, score: int) -> bool:
        """Return True to hit, False to stand."""
        ...


class ComputerPolicy:
    """
    Randomized threshold policy.

    The decision value is ``100 * (21 - score) / 21`` plus a uniform draw in
    [0, 100); the computer hits when it exceeds 50. Low totals almost always
    hit, totals around 16-17 hit about half the time, and 21 or more always
    stands. Only the computer's own score is consulted.
    """

    threshold: float = 50.0

    def __init__(self, rng: Random | None = None) -> None:
        """
        Initialize the policy.

        Args:
            rng: Random number generator, seed it for reproducible decisions
        """
        self._rng = rng or Random()

    def decision_value(self, score: int) -> float:
        """Compute the randomized decision value for a score."""
        return 100.0 * (BUST_LIMIT - score) / BUST_LIMIT + self._rng.uniform(0.0, 100.0)

    def should_hit(self, score: int) -> bool:
        """Decide whether to hit at the given score."""
        if score >= BUST_LIMIT:
            return False
        return self.decision_value(score) > self.threshold
