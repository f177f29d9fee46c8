"""Saving and loading games as signed, versioned snapshots."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from itsdangerous import BadData, URLSafeSerializer

from twentyone.cards import Card, Rank, Suit, full_deck
from twentyone.config import config
from twentyone.exceptions import PersistenceFailure
from twentyone.game.engine import TwentyOneGame
from twentyone.game.state import GameState
from twentyone.hand import BUST_LIMIT, Scoring, score_cards

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1
_SALT = "twentyone.snapshot"


@dataclass(frozen=True)
class GameSnapshot:
    """Everything needed to put an engine back where it was."""

    state: GameState
    deck: tuple[Card, ...]
    human_hand: tuple[Card, ...]
    computer_hand: tuple[Card, ...]
    human_standing: bool = False
    computer_standing: bool = False
    version: int = SNAPSHOT_VERSION

    def all_cards(self) -> list[Card]:
        """Return deck and hand cards together."""
        return [*self.deck, *self.human_hand, *self.computer_hand]


def take_snapshot(game: TwentyOneGame) -> GameSnapshot:
    """Capture the current state of a game."""
    with game.lock:
        return GameSnapshot(
            state=game.state,
            deck=game.deck.cards,
            human_hand=game.human.hand,
            computer_hand=game.computer.hand,
            human_standing=game.human.standing,
            computer_standing=game.computer.standing,
        )


def validate_snapshot(snapshot: GameSnapshot, scoring: Scoring | None = None) -> None:
    """
    Check that a snapshot describes a legal position.

    Every card of the deck must appear exactly once across the deck and both
    hands. When ``scoring`` is given, the state is also checked against the
    hand totals it implies.

    Raises:
        PersistenceFailure: On a version mismatch, a missing or duplicated
            card, or a state the hands contradict
    """
    if snapshot.version != SNAPSHOT_VERSION:
        raise PersistenceFailure(
            f"Unsupported snapshot version {snapshot.version} (expected {SNAPSHOT_VERSION})"
        )

    cards = snapshot.all_cards()
    if len(set(cards)) != len(cards):
        raise PersistenceFailure("Snapshot contains duplicate cards")
    missing = set(full_deck()) - set(cards)
    if missing:
        raise PersistenceFailure(f"Snapshot is missing {len(missing)} card(s)")

    if scoring is not None:
        _check_position(snapshot, scoring)


def _check_position(snapshot: GameSnapshot, scoring: Scoring) -> None:
    """Reject states that the hands in the snapshot could not have produced."""
    state = snapshot.state
    human_bust = score_cards(snapshot.human_hand, scoring) > BUST_LIMIT
    computer_bust = score_cards(snapshot.computer_hand, scoring) > BUST_LIMIT

    if state == GameState.NOT_STARTED:
        consistent = not snapshot.human_hand and not snapshot.computer_hand
    elif state == GameState.PLAYING:
        consistent = (
            bool(snapshot.human_hand)
            and bool(snapshot.computer_hand)
            and not human_bust
            and not computer_bust
        )
    elif state == GameState.HUMAN_BUST:
        consistent = human_bust and not computer_bust
    elif state == GameState.COMPUTER_BUST:
        consistent = computer_bust and not human_bust
    else:
        consistent = not human_bust and not computer_bust

    if not consistent:
        raise PersistenceFailure(f"Snapshot state {state} does not match the hands")


def restore_snapshot(game: TwentyOneGame, snapshot: GameSnapshot) -> None:
    """Replace a game's state with a snapshot, after validating it."""
    validate_snapshot(snapshot, game.rules.scoring)

    with game.lock:
        game.human.reset()
        game.computer.reset()
        for card in snapshot.human_hand:
            game.human.add_card(card)
        for card in snapshot.computer_hand:
            game.computer.add_card(card)
        game.human.standing = snapshot.human_standing
        game.computer.standing = snapshot.computer_standing

        game.deck.load(snapshot.deck)
        game._pending_decision = None

        # Restore state machine state
        game._machine_state = snapshot.state.name.lower()


def _encode_card(card: Card) -> dict[str, int]:
    """Serialize a card to a dict."""
    return {"rank": card.rank.value, "suit": card.suit.value}


def _decode_card(data: dict[str, int]) -> Card:
    """Deserialize a card from a dict."""
    return Card(Rank(data["rank"]), Suit(data["suit"]))


def encode_snapshot(snapshot: GameSnapshot) -> dict[str, Any]:
    """Serialize a snapshot to plain JSON-compatible data."""
    return {
        "version": snapshot.version,
        "state": snapshot.state.name,
        "deck": [_encode_card(c) for c in snapshot.deck],
        "human": {
            "hand": [_encode_card(c) for c in snapshot.human_hand],
            "standing": snapshot.human_standing,
        },
        "computer": {
            "hand": [_encode_card(c) for c in snapshot.computer_hand],
            "standing": snapshot.computer_standing,
        },
    }


def decode_snapshot(data: dict[str, Any]) -> GameSnapshot:
    """
    Deserialize and validate a snapshot.

    Raises:
        PersistenceFailure: If the data is malformed or describes an illegal position
    """
    try:
        snapshot = GameSnapshot(
            version=int(data["version"]),
            state=GameState[data["state"]],
            deck=tuple(_decode_card(c) for c in data["deck"]),
            human_hand=tuple(_decode_card(c) for c in data["human"]["hand"]),
            computer_hand=tuple(_decode_card(c) for c in data["computer"]["hand"]),
            human_standing=bool(data["human"]["standing"]),
            computer_standing=bool(data["computer"]["standing"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise PersistenceFailure(f"Malformed snapshot: {exc!r}") from exc

    validate_snapshot(snapshot)
    return snapshot


def _serializer(secret_key: str | None) -> URLSafeSerializer:
    return URLSafeSerializer(secret_key or config.security.secret_key, salt=_SALT)


def dumps(game: TwentyOneGame, secret_key: str | None = None) -> str:
    """Encode a game as a signed, URL-safe string."""
    return _serializer(secret_key).dumps(encode_snapshot(take_snapshot(game)))


def loads(game: TwentyOneGame, blob: str, secret_key: str | None = None) -> GameSnapshot:
    """
    Restore a game from a string produced by dumps().

    The game is left untouched if the blob is tampered with or malformed.

    Raises:
        PersistenceFailure: On a bad signature or invalid contents
    """
    try:
        data = _serializer(secret_key).loads(blob)
    except BadData as exc:
        raise PersistenceFailure("Saved game signature is invalid") from exc

    if not isinstance(data, dict):
        raise PersistenceFailure("Saved game payload is not an object")

    snapshot = decode_snapshot(data)
    restore_snapshot(game, snapshot)
    return snapshot


def save_game(
    game: TwentyOneGame,
    path: str | Path | None = None,
    secret_key: str | None = None,
) -> Path:
    """
    Write a game to disk.

    Args:
        game: Game to save
        path: Destination file (defaults to the configured save path)
        secret_key: Signing key (defaults to the configured secret)

    Returns:
        The path written
    """
    target = Path(path or config.persistence.save_path)
    blob = dumps(game, secret_key)
    try:
        target.write_text(blob, encoding="utf-8")
    except OSError as exc:
        raise PersistenceFailure(f"Could not write {target}: {exc}") from exc

    logger.info("Saved game to %s (%s)", target, game.state.name)
    return target


def load_game(
    game: TwentyOneGame,
    path: str | Path | None = None,
    secret_key: str | None = None,
) -> GameSnapshot:
    """Read a game saved by save_game() into an existing engine."""
    source = Path(path or config.persistence.save_path)
    try:
        blob = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PersistenceFailure(f"Could not read {source}: {exc}") from exc

    snapshot = loads(game, blob.strip(), secret_key)
    logger.info("Loaded game from %s (%s)", source, snapshot.state.name)
    return snapshot
