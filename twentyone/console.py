"""Text console front-end for the twenty-one engine."""

import logging
import time
from typing import Callable

from twentyone.config import config
from twentyone.exceptions import PersistenceFailure
from twentyone.game import GameState, TwentyOneGame, format_cards
from twentyone.persistence import load_game, save_game

logger = logging.getLogger(__name__)

RESULT_MESSAGES = {
    GameState.HUMAN_BUST: "You bust! The computer wins.",
    GameState.COMPUTER_BUST: "The computer busts! You win.",
    GameState.HUMAN_WIN: "You win!",
    GameState.COMPUTER_WIN: "The computer wins!",
    GameState.DRAW: "It's a draw.",
}


def play_computer_turn(
    game: TwentyOneGame,
    on_decision: Callable[[bool], None] | None = None,
) -> None:
    """
    Let the computer draw until it stands, busts, or the game ends.

    Args:
        game: Game in progress
        on_decision: Called with each decision before it is applied
    """
    while game.state == GameState.PLAYING and not game.computer.standing:
        wants_to_hit = game.check_computer_wants_to_hit()
        if on_decision is not None:
            on_decision(wants_to_hit)
        game.computer_hit()


class ConsoleGame:
    """Interactive console loop: one prompt per human action."""

    def __init__(
        self,
        game: TwentyOneGame | None = None,
        input_fn: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
        sleep: Callable[[float], None] = time.sleep,
        think_delay: float | None = None,
    ) -> None:
        self.game = game or TwentyOneGame(rules=config.game.to_rules())
        self._input = input_fn
        self._output = output
        self._sleep = sleep
        self._think_delay = config.console.think_delay if think_delay is None else think_delay

    def run(self) -> None:
        """Play rounds until the player declines another."""
        self._output("===== Welcome to Twenty-One =====")
        try:
            while True:
                self.play_round()
                if self._ask("Play again? (1) yes (0) no > ") != "1":
                    break
        except EOFError:
            logger.debug("Input closed, leaving")
        self._output("Thanks for playing, goodbye!")

    def play_round(self) -> GameState:
        """Play one game to completion and report the result."""
        game = self.game
        game.start_game()
        self._output("New game! Dealing...")
        self._show_human()
        self._output("Computer hand: [hidden]")

        while not game.is_game_over():
            if not game.human.standing:
                self._human_turn()
                if game.state != GameState.PLAYING:
                    break

            if game.human.standing:
                self._pause()
                play_computer_turn(game, self._announce)
            elif not game.computer.standing:
                self._pause()
                self._announce(game.check_computer_wants_to_hit())
                game.computer_hit()

        game.finalize_game()
        self._show_result()
        return game.state

    def _human_turn(self) -> None:
        """Prompt until the human makes a move that changes the game."""
        while True:
            choice = self._ask("Action: (1) hit (2) stand (s) save (l) load > ")
            if choice == "1":
                self.game.human_hit()
                self._show_human()
                return
            if choice == "2":
                self.game.human_stand()
                self._output("You stand.")
                return
            if choice == "s":
                self._save()
            elif choice == "l":
                if self._load():
                    return
            else:
                self._output("Invalid input, enter 1 or 2")

    def _save(self) -> None:
        try:
            path = save_game(self.game)
        except PersistenceFailure as exc:
            self._output(f"Save failed: {exc}")
            return
        self._output(f"Game saved to {path}")

    def _load(self) -> bool:
        try:
            load_game(self.game)
        except PersistenceFailure as exc:
            self._output(f"Load failed: {exc}")
            return False
        self._output("Game loaded.")
        self._show_human()
        return True

    def _announce(self, wants_to_hit: bool) -> None:
        if wants_to_hit:
            self._output("The computer hits.")
        else:
            self._output("The computer stands.")

    def _pause(self) -> None:
        if self._think_delay > 0:
            self._output("The computer is thinking...")
            self._sleep(self._think_delay)

    def _show_human(self) -> None:
        self._output(f"Your hand: {format_cards(self.game.human_hand())}")
        self._output(f"Your score: {self.game.human_score()}")

    def _show_result(self) -> None:
        game = self.game
        self._output("\n===== Result =====")
        self._show_human()
        self._output(f"Computer hand: {format_cards(game.computer_hand())}")
        self._output(f"Computer score: {game.computer_score()}")
        message = RESULT_MESSAGES.get(game.state)
        if message:
            self._output(message)

    def _ask(self, prompt: str) -> str:
        return self._input(prompt).strip().lower()


def main() -> None:
    """Console entry point."""
    logging.basicConfig(
        level=logging.DEBUG if config.debug else config.log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    ConsoleGame().run()


if __name__ == "__main__":
    main()
