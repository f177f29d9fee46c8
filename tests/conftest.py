"""Pytest fixtures for twenty-one engine tests."""

from random import Random

import pytest

from twentyone.cards import Card, Deck, Rank, Suit
from twentyone.game import TwentyOneGame
from twentyone.hand import Hand, Scoring
from twentyone.rules import RuleSet


class StackedRandom:
    """Random source whose shuffle puts chosen cards on top, in draw order."""

    def __init__(self, top_cards: list[Card], seed: int = 0) -> None:
        self.top_cards = list(top_cards)
        self._rng = Random(seed)

    def shuffle(self, cards: list[Card]) -> None:
        self._rng.shuffle(cards)
        rest = [c for c in cards if c not in self.top_cards]
        # The top of the deck is the end of the list
        cards[:] = rest + [c for c in reversed(self.top_cards) if c in cards]

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)


class ScriptedPolicy:
    """Computer policy that replays fixed decisions, then stands."""

    def __init__(self, decisions: list[bool]) -> None:
        self.decisions = list(decisions)
        self.scores_seen: list[int] = []

    def should_hit(self, score: int) -> bool:
        self.scores_seen.append(score)
        if not self.decisions:
            return False
        return self.decisions.pop(0)


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck(rng):
    """A shuffled deck."""
    d = Deck(rng=rng)
    d.shuffle()
    return d


@pytest.fixture
def empty_hand():
    """An empty hand under standard scoring."""
    return Hand()


@pytest.fixture
def natural_hand():
    """A natural blackjack hand (A-K)."""
    hand = Hand()
    hand.add_card(Card(Rank.ACE, Suit.SPADES))
    hand.add_card(Card(Rank.KING, Suit.HEARTS))
    return hand


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    hand = Hand()
    hand.add_card(Card(Rank.ACE, Suit.SPADES))
    hand.add_card(Card(Rank.SIX, Suit.HEARTS))
    return hand


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    hand = Hand()
    hand.add_card(Card(Rank.TEN, Suit.SPADES))
    hand.add_card(Card(Rank.SIX, Suit.HEARTS))
    return hand


@pytest.fixture
def bust_hand():
    """A busted hand."""
    hand = Hand()
    hand.add_card(Card(Rank.TEN, Suit.SPADES))
    hand.add_card(Card(Rank.SIX, Suit.HEARTS))
    hand.add_card(Card(Rank.KING, Suit.CLUBS))
    return hand


@pytest.fixture
def rules():
    """Default ruleset."""
    return RuleSet()


@pytest.fixture
def two_card_rules():
    """Standard scoring, two cards each, no natural shortcut."""
    return RuleSet(scoring=Scoring.STANDARD, initial_cards=2)


@pytest.fixture
def game(rng):
    """A new game instance."""
    return TwentyOneGame(rng=rng)


@pytest.fixture
def rigged_game():
    """
    Factory for games with a known deal order and scripted computer decisions.

    Cards are listed in the order they are drawn: with two initial cards the
    deal goes human, computer, human, computer.
    """

    def make(
        cards: list[str],
        decisions: list[bool] | None = None,
        rules: RuleSet | None = None,
    ) -> TwentyOneGame:
        top = [Card.from_string(c) for c in cards]
        return TwentyOneGame(
            rules=rules or RuleSet(initial_cards=2),
            policy=ScriptedPolicy(decisions or []),
            rng=StackedRandom(top),  # type: ignore[arg-type]
        )

    return make


@pytest.fixture
def scripted_policy():
    """Factory for scripted computer policies."""
    return ScriptedPolicy

