"""Tests for game save/load (snapshot encoding and signing)."""

import json
from random import Random

import pytest

from twentyone.cards import Card, Rank, Suit, full_deck
from twentyone.exceptions import PersistenceFailure
from twentyone.game import GameState, TwentyOneGame
from twentyone.hand import Scoring
from twentyone.persistence import (
    SNAPSHOT_VERSION,
    GameSnapshot,
    decode_snapshot,
    dumps,
    encode_snapshot,
    load_game,
    loads,
    restore_snapshot,
    save_game,
    take_snapshot,
)
from twentyone.rules import RuleSet

SECRET = "test-secret"


def position(state, human, computer, **standing):
    """Build a snapshot holding the given hands, with the rest of the deck."""
    human_hand = tuple(Card.from_string(c) for c in human)
    computer_hand = tuple(Card.from_string(c) for c in computer)
    held = set(human_hand + computer_hand)
    return GameSnapshot(
        state=state,
        deck=tuple(c for c in full_deck() if c not in held),
        human_hand=human_hand,
        computer_hand=computer_hand,
        **standing,
    )


@pytest.fixture
def played_game():
    """A game in progress with a few cards drawn."""
    game = TwentyOneGame(rng=Random(42))
    game.start_game()
    game.human_hit()
    game.computer_hit()
    return game


class TestSnapshot:
    """Tests for taking and restoring snapshots."""

    def test_take_snapshot(self, played_game):
        """Test that a snapshot captures the position."""
        snapshot = take_snapshot(played_game)
        assert snapshot.version == SNAPSHOT_VERSION
        assert snapshot.state == played_game.state
        assert list(snapshot.human_hand) == played_game.human_hand()
        assert list(snapshot.computer_hand) == played_game.computer_hand()
        assert snapshot.deck == played_game.deck.cards
        assert len(snapshot.all_cards()) == 52

    def test_restore_into_fresh_engine(self, played_game):
        """Test that restoring reproduces an equivalent engine."""
        other = TwentyOneGame(rng=Random(1))
        restore_snapshot(other, take_snapshot(played_game))

        assert other.state == played_game.state
        assert other.human_hand() == played_game.human_hand()
        assert other.computer_hand() == played_game.computer_hand()
        assert other.computer.standing == played_game.computer.standing
        assert take_snapshot(other) == take_snapshot(played_game)

    def test_restored_game_draws_the_same_cards(self, played_game):
        """Test that the deck order survives."""
        other = TwentyOneGame()
        restore_snapshot(other, take_snapshot(played_game))
        if played_game.state == GameState.PLAYING:
            played_game.human_hit()
            other.human_hit()
            assert other.human_hand() == played_game.human_hand()

    def test_restore_terminal_state(self):
        """Test restoring a decided game."""
        snapshot = position(
            GameState.HUMAN_WIN,
            ["KH", "9H"],
            ["10S", "8S"],
            human_standing=True,
            computer_standing=True,
        )
        game = TwentyOneGame()
        restore_snapshot(game, snapshot)
        assert game.state == GameState.HUMAN_WIN
        assert game.human_score() == 19
        assert game.is_game_over()
        assert not game.human_hit()

    def test_restore_rejects_duplicates(self):
        """Test the no-duplicates invariant on restore."""
        ace = Card(Rank.ACE, Suit.SPADES)
        snapshot = GameSnapshot(
            state=GameState.PLAYING,
            deck=(ace,),
            human_hand=(ace,),
            computer_hand=(),
        )
        game = TwentyOneGame()
        with pytest.raises(PersistenceFailure):
            restore_snapshot(game, snapshot)
        assert game.state == GameState.NOT_STARTED

    def test_restore_rejects_missing_cards(self, played_game):
        """Test that every card must be somewhere in the snapshot."""
        snapshot = take_snapshot(played_game)
        trimmed = GameSnapshot(
            state=snapshot.state,
            deck=snapshot.deck[:5],
            human_hand=snapshot.human_hand,
            computer_hand=snapshot.computer_hand,
        )
        game = TwentyOneGame()
        with pytest.raises(PersistenceFailure, match="missing"):
            restore_snapshot(game, trimmed)
        assert game.state == GameState.NOT_STARTED
        assert len(game.deck) == 52

    @pytest.mark.parametrize(
        "state, human, computer",
        [
            (GameState.PLAYING, ["KH", "QH", "5H"], ["10S", "8S"]),
            (GameState.PLAYING, ["KH", "9H"], ["10S", "8S", "7S"]),
            (GameState.PLAYING, [], []),
            (GameState.NOT_STARTED, ["KH"], ["10S"]),
            (GameState.HUMAN_BUST, ["KH", "9H"], ["10S", "8S"]),
            (GameState.COMPUTER_BUST, ["KH", "QH", "5H"], ["10S", "8S", "7S"]),
            (GameState.HUMAN_WIN, ["KH", "QH", "5H"], ["10S", "8S"]),
            (GameState.DRAW, ["KH", "9H"], ["10S", "8S", "7S"]),
        ],
    )
    def test_restore_rejects_state_hands_contradict(self, state, human, computer):
        """Test that the state must agree with the hand totals."""
        game = TwentyOneGame()
        with pytest.raises(PersistenceFailure, match="does not match"):
            restore_snapshot(game, position(state, human, computer))
        assert game.state == GameState.NOT_STARTED

    def test_state_checked_under_the_engine_scoring(self):
        """K-Q-A is 21 under standard scoring but 26 when counting ranks."""
        snapshot = position(GameState.PLAYING, ["KH", "QH", "AH"], ["2S", "3S"])

        standard = TwentyOneGame()
        restore_snapshot(standard, snapshot)
        assert standard.human_score() == 21

        ranked = TwentyOneGame(rules=RuleSet(scoring=Scoring.RANK))
        with pytest.raises(PersistenceFailure):
            restore_snapshot(ranked, snapshot)

    def test_restore_busted_hand(self):
        """Test restoring a game decided by a bust."""
        game = TwentyOneGame()
        restore_snapshot(game, position(GameState.HUMAN_BUST, ["KH", "QH", "5H"], ["10S"]))
        assert game.state == GameState.HUMAN_BUST
        assert game.human_score() == 25


class TestEncoding:
    """Tests for encode/decode of snapshots."""

    def test_encode_structure(self, played_game):
        """Test the encoded layout."""
        data = encode_snapshot(take_snapshot(played_game))
        assert data["version"] == SNAPSHOT_VERSION
        assert data["state"] == played_game.state.name
        assert set(data["human"]) == {"hand", "standing"}
        assert set(data["computer"]) == {"hand", "standing"}
        assert data["deck"][0].keys() == {"rank", "suit"}
        json.dumps(data)

    def test_decode_roundtrip(self, played_game):
        """Test that decode inverts encode."""
        snapshot = take_snapshot(played_game)
        assert decode_snapshot(encode_snapshot(snapshot)) == snapshot

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda d: d.pop("deck"),
            lambda d: d.update(state="WINNING"),
            lambda d: d["human"]["hand"].append({"rank": 14, "suit": 1}),
            lambda d: d["computer"].update(hand="nope"),
            lambda d: d.update(version="x"),
        ],
    )
    def test_decode_malformed(self, played_game, mutate):
        """Test that malformed data raises PersistenceFailure."""
        data = encode_snapshot(take_snapshot(played_game))
        mutate(data)
        with pytest.raises(PersistenceFailure):
            decode_snapshot(data)

    def test_decode_wrong_version(self, played_game):
        """Test version checking."""
        data = encode_snapshot(take_snapshot(played_game))
        data["version"] = SNAPSHOT_VERSION + 1
        with pytest.raises(PersistenceFailure, match="version"):
            decode_snapshot(data)

    def test_decode_duplicate_cards(self, played_game):
        """Test duplicate detection on decode."""
        data = encode_snapshot(take_snapshot(played_game))
        data["computer"]["hand"].append(data["deck"][0])
        with pytest.raises(PersistenceFailure, match="duplicate"):
            decode_snapshot(data)

    def test_decode_trimmed_deck(self, played_game):
        """Test that a deck with cards cut out is rejected."""
        data = encode_snapshot(take_snapshot(played_game))
        data["deck"] = data["deck"][:5]
        with pytest.raises(PersistenceFailure, match="missing"):
            decode_snapshot(data)

    def test_decode_empty_deck_with_cards_lost(self, played_game):
        """Test that emptying the deck cannot smuggle in a short game."""
        data = encode_snapshot(take_snapshot(played_game))
        data["deck"] = []
        with pytest.raises(PersistenceFailure, match="missing"):
            decode_snapshot(data)


class TestSignedBlobs:
    """Tests for dumps/loads."""

    def test_roundtrip(self, played_game):
        """Test save then load reproduces the game."""
        blob = dumps(played_game, SECRET)
        other = TwentyOneGame()
        snapshot = loads(other, blob, SECRET)
        assert snapshot == take_snapshot(played_game)
        assert take_snapshot(other) == take_snapshot(played_game)

    def test_tampered_blob_rejected(self, played_game):
        """Test that a modified blob fails and leaves the game alone."""
        blob = dumps(played_game, SECRET)
        tampered = blob[:-2] + ("A" if blob[-2] != "A" else "B") + blob[-1]

        other = TwentyOneGame()
        other.start_game()
        before = take_snapshot(other)
        with pytest.raises(PersistenceFailure):
            loads(other, tampered, SECRET)
        assert take_snapshot(other) == before

    def test_wrong_key_rejected(self, played_game):
        """Test that a blob signed with another key fails."""
        blob = dumps(played_game, SECRET)
        with pytest.raises(PersistenceFailure, match="signature"):
            loads(TwentyOneGame(), blob, "other-secret")

    def test_default_key_from_config(self, played_game):
        """Test signing with the configured secret."""
        other = TwentyOneGame()
        loads(other, dumps(played_game))
        assert other.human_hand() == played_game.human_hand()


class TestFiles:
    """Tests for save_game/load_game."""

    def test_save_and_load(self, played_game, tmp_path):
        """Test a file round trip."""
        path = save_game(played_game, tmp_path / "game.dat", SECRET)
        assert path.exists()

        other = TwentyOneGame()
        load_game(other, path, SECRET)
        assert take_snapshot(other) == take_snapshot(played_game)

    def test_load_missing_file(self, tmp_path):
        """Test that I/O failures surface and leave state unchanged."""
        game = TwentyOneGame()
        with pytest.raises(PersistenceFailure):
            load_game(game, tmp_path / "missing.dat", SECRET)
        assert game.state == GameState.NOT_STARTED

    def test_load_garbage_file(self, tmp_path):
        """Test a file that isn't a saved game."""
        path = tmp_path / "garbage.dat"
        path.write_text("not a saved game", encoding="utf-8")
        with pytest.raises(PersistenceFailure):
            load_game(TwentyOneGame(), path, SECRET)

    def test_save_to_directory_fails(self, played_game, tmp_path):
        """Test that write errors surface as PersistenceFailure."""
        with pytest.raises(PersistenceFailure):
            save_game(played_game, tmp_path, SECRET)
