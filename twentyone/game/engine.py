"""Twenty-one game engine with state machine."""

import logging
import threading
from functools import wraps
from random import Random
from typing import Any, Callable, Iterable, TypeVar

from transitions import Machine

from twentyone.cards import Card, Deck
from twentyone.exceptions import ExhaustedDeck, InvalidOperation
from twentyone.game.events import EventEmitter, EventType, GameEvent
from twentyone.game.state import GameState
from twentyone.hand import evaluate_hands
from twentyone.player import Player
from twentyone.policy import ComputerPolicy, HitPolicy
from twentyone.rules import RuleSet

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _exclusive(method: F) -> F:
    """Run an engine method while holding the instance lock."""

    @wraps(method)
    def wrapper(self: "TwentyOneGame", *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def format_cards(cards: Iterable[Card]) -> str:
    """Render cards separated by spaces, e.g. 'A♠ 10♥'."""
    return " ".join(str(card) for card in cards)


class TwentyOneGame:
    """
    Human versus computer twenty-one engine using a state machine.

    This is the core game logic, completely UI-agnostic.
    Communication happens through events and return values only.
    """

    # State machine states
    STATES = [s.name.lower() for s in GameState]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "deal", "source": "*", "dest": "playing"},
        {"trigger": "human_busts", "source": "playing", "dest": "human_bust"},
        {"trigger": "computer_busts", "source": "playing", "dest": "computer_bust"},
        {"trigger": "human_wins", "source": "playing", "dest": "human_win"},
        {"trigger": "computer_wins", "source": "playing", "dest": "computer_win"},
        {"trigger": "tie", "source": "playing", "dest": "draw"},
    ]

    def __init__(
        self,
        rules: RuleSet | None = None,
        policy: HitPolicy | None = None,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a new game.

        Args:
            rules: House rules (uses defaults if not provided)
            policy: Computer decision policy (a ComputerPolicy sharing rng by default)
            rng: Random number generator for reproducible games
        """
        self.rules = rules or RuleSet()
        self._rng = rng or Random()
        self.deck = Deck(rng=self._rng)

        self.human = Player.human(scoring=self.rules.scoring)
        self.computer = Player.computer(
            policy or ComputerPolicy(rng=self._rng),
            scoring=self.rules.scoring,
        )
        self.events = EventEmitter()

        self._lock = threading.RLock()
        self._pending_decision: bool | None = None

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="not_started",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> GameState:
        """Get current game state as enum."""
        return GameState[self._machine_state.upper()]  # type: ignore

    @property
    def lock(self) -> threading.RLock:
        """Lock held by every mutating operation."""
        return self._lock

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    # Queries

    def human_hand(self) -> list[Card]:
        """Return a copy of the human's cards."""
        return list(self.human.hand)

    def computer_hand(self) -> list[Card]:
        """Return a copy of the computer's cards."""
        return list(self.computer.hand)

    def human_score(self) -> int:
        """Return the human's total under the active scoring."""
        return self.human.score

    def computer_score(self) -> int:
        """Return the computer's total under the active scoring."""
        return self.computer.score

    def is_game_over(self) -> bool:
        """Check if the game is decided or waiting only for finalize_game."""
        return self.state != GameState.PLAYING or (
            self.human.standing and self.computer.standing
        )

    # Dealing

    @_exclusive
    def start_game(self) -> bool:
        """
        Start a new game from any state.

        Resets both players, builds and shuffles a fresh deck and deals the
        initial cards, human first.
        """
        self.human.reset()
        self.computer.reset()
        self._pending_decision = None

        self.deck.reset()
        self.deck.shuffle()
        self.deal()  # Trigger state transition

        for _ in range(self.rules.initial_cards):
            self._deal_card_to(self.human)
            self._deal_card_to(self.computer)

        self.events.emit_new(
            EventType.GAME_STARTED,
            human_score=self.human.score,
            initial_cards=self.rules.initial_cards,
        )
        logger.info(
            "Game started: human %s, computer dealt %d card(s)",
            format_cards(self.human.hand),
            len(self.computer.hand),
        )

        if self.rules.initial_cards == 2:
            self._check_naturals()
        return True

    @_exclusive
    def deal_second_initial_card(self) -> bool:
        """Deal the second initial card to each player, then check for naturals."""
        if self.state != GameState.PLAYING:
            return self._reject("deal_second_initial_card", "game is not in progress")
        if len(self.human.hand) != 1 or len(self.computer.hand) != 1:
            return self._reject("deal_second_initial_card", "initial deal already complete")

        self._deal_card_to(self.human)
        self._deal_card_to(self.computer)
        self._check_naturals()
        return True

    @_exclusive
    def deal_computer_second_card(self) -> bool:
        """Top the computer up to two cards, used when the human first hits."""
        if self.state != GameState.PLAYING:
            return self._reject("deal_computer_second_card", "game is not in progress")
        if len(self.computer.hand) != 1:
            return self._reject("deal_computer_second_card", "computer does not hold exactly one card")

        self._deal_card_to(self.computer)
        self._check_naturals()
        return True

    # Human actions

    @_exclusive
    def human_hit(self) -> bool:
        """Human takes another card."""
        if self.state != GameState.PLAYING:
            return self._reject("human_hit", "game is not in progress")
        if self.human.standing:
            return self._reject("human_hit", "human is standing")

        card = self._deal_card_to(self.human)
        self.events.emit_new(EventType.HUMAN_HIT, card=str(card), score=self.human.score)

        if self.human.is_busted:
            self.human_busts()
            self.events.emit_new(EventType.HUMAN_BUSTS, score=self.human.score)
            logger.info("Human busts with %d", self.human.score)
        return True

    @_exclusive
    def human_stand(self) -> bool:
        """Human stops drawing for the rest of the game."""
        if self.state != GameState.PLAYING:
            return self._reject("human_stand", "game is not in progress")

        self.human.stand()
        self.events.emit_new(EventType.HUMAN_STAND, score=self.human.score)
        return True

    # Computer actions

    @_exclusive
    def check_computer_wants_to_hit(self) -> bool:
        """
        Peek at the computer's next decision without applying it.

        The decision is remembered and used by the next computer_hit(), so a
        caller that announces the choice first always sees it carried out.
        """
        if self.state != GameState.PLAYING or self.computer.standing:
            return False
        if self._pending_decision is None:
            self._pending_decision = self.computer.wants_to_hit()
        return self._pending_decision

    @_exclusive
    def computer_hit(self) -> bool:
        """Let the computer decide, then either draw a card or stand."""
        if self.state != GameState.PLAYING:
            return self._reject("computer_hit", "game is not in progress")
        if self.computer.standing:
            return self._reject("computer_hit", "computer is standing")

        wants_to_hit = self._pending_decision
        if wants_to_hit is None:
            wants_to_hit = self.computer.wants_to_hit()
        self._pending_decision = None

        if not wants_to_hit:
            self.computer.stand()
            self.events.emit_new(EventType.COMPUTER_STAND, score=self.computer.score)
            logger.debug("Computer stands on %d", self.computer.score)
            return True

        card = self._deal_card_to(self.computer)
        self.events.emit_new(EventType.COMPUTER_HIT, card=str(card), score=self.computer.score)

        if self.computer.is_busted:
            self.computer_busts()
            self.events.emit_new(EventType.COMPUTER_BUSTS, score=self.computer.score)
            logger.info("Computer busts with %d", self.computer.score)
        return True

    # Resolution

    @_exclusive
    def finalize_game(self) -> GameState:
        """
        Decide the winner once both players stand.

        Idempotent: outside PLAYING, or while someone is still drawing, the
        state is returned unchanged.
        """
        if self.state != GameState.PLAYING:
            return self.state
        if not (self.human.standing and self.computer.standing):
            return self.state

        outcome = evaluate_hands(self.human.hand_state, self.computer.hand_state)
        if outcome == 1:
            self.human_wins()
            self.events.emit_new(EventType.HUMAN_WINS, **self._scores())
        elif outcome == -1:
            self.computer_wins()
            self.events.emit_new(EventType.COMPUTER_WINS, **self._scores())
        else:
            self.tie()
            self.events.emit_new(EventType.DRAW, **self._scores())

        logger.info(
            "Game finished: %s (human %d, computer %d)",
            self.state,
            self.human.score,
            self.computer.score,
        )
        return self.state

    # Internals

    def _scores(self) -> dict[str, int]:
        return {"human_score": self.human.score, "computer_score": self.computer.score}

    def _deal_card_to(self, player: Player) -> Card:
        """Draw a card for a player, reshuffling a fresh deck when empty."""
        try:
            card = self.deck.draw()
        except ExhaustedDeck:
            held = [*self.human.hand, *self.computer.hand]
            self.deck.reset(exclude=held)
            self.deck.shuffle()
            self.events.emit_new(EventType.DECK_RESHUFFLED, cards_remaining=len(self.deck))
            logger.warning("Deck exhausted, reshuffled %d cards not in play", len(self.deck))
            card = self.deck.draw()

        player.add_card(card)
        if player is self.computer:
            # A decision peeked at the old total no longer applies
            self._pending_decision = None
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card),
            player=player.name,
            score=player.score,
        )
        return card

    def _check_naturals(self) -> None:
        """Resolve a two-card 21 immediately when the rule is enabled."""
        if not self.rules.natural_blackjack or self.state != GameState.PLAYING:
            return

        human_bj = self.human.has_natural
        computer_bj = self.computer.has_natural
        if not (human_bj or computer_bj):
            return

        self.events.emit_new(EventType.NATURAL_BLACKJACK, human=human_bj, computer=computer_bj)
        if human_bj and computer_bj:
            self.tie()
            self.events.emit_new(EventType.DRAW, **self._scores())
        elif human_bj:
            self.human_wins()
            self.events.emit_new(EventType.HUMAN_WINS, **self._scores())
        else:
            self.computer_wins()
            self.events.emit_new(EventType.COMPUTER_WINS, **self._scores())
        logger.info("Natural blackjack on the deal: %s", self.state)

    def _reject(self, operation: str, reason: str) -> bool:
        """Handle a call whose guard fails: no-op, or raise in strict mode."""
        self.events.emit_new(
            EventType.INVALID_ACTION,
            operation=operation,
            message=reason,
            state=self.state.name,
        )
        logger.debug("Ignored %s: %s", operation, reason)
        if self.rules.strict:
            raise InvalidOperation(operation, reason)
        return False
