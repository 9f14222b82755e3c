"""Console entry point: set up a session and play a game of Flip 7."""

import argparse
import asyncio
import logging
from dataclasses import dataclass
from random import Random
from typing import Sequence

from cli.console import ConsoleDecisions
from config import GameConfig, config
from flip7.game import DecisionSource, Flip7Game, GameResult
from flip7.history import GameHistory
from flip7.rules import RuleSet
from flip7.strategy import AdvisorStrategy, Strategy, ThresholdStrategy

logger = logging.getLogger(__name__)

SETUP = "setup"

BANNER = "\n".join([
    "=================================",
    "     Flip 7 - card game (CLI)    ",
    "=================================",
])


@dataclass(frozen=True)
class SessionSettings:
    """Answers collected before the first round."""

    names: tuple[str, ...]
    mode: str = "interactive"
    auto_target: int = 4
    strategy: str = "threshold"

    @property
    def is_auto(self) -> bool:
        return self.mode == "auto"


async def ask_int(
    io: DecisionSource,
    prompt: str,
    low: int,
    high: int,
    default: int | None = None,
) -> int:
    """Ask until the answer is an integer in [low, high]; blank picks the default."""
    while True:
        answer = (await io.ask(prompt, SETUP)).strip()
        if not answer and default is not None:
            return default
        try:
            value = int(answer)
        except ValueError:
            value = None
        if value is not None and low <= value <= high:
            return value
        io.log(f"Invalid input. Enter a number between {low} and {high}.")


async def ask_names(io: DecisionSource, count: int) -> tuple[str, ...]:
    """Ask for ``count`` non-empty, distinct player names."""
    names: list[str] = []
    while len(names) < count:
        name = (await io.ask(f"Player {len(names) + 1} name: ", SETUP)).strip()
        if not name:
            io.log("A name cannot be empty.")
        elif name in names:
            io.log("That name is already taken. Pick another one.")
        else:
            names.append(name)
    return tuple(names)


async def setup_session(
    io: DecisionSource,
    game: GameConfig,
    mode: str | None = None,
    auto_target: int | None = None,
    strategy: str = "threshold",
) -> SessionSettings:
    """
    Collect players and play mode.

    Args:
        io: Where questions are asked
        game: Player limits and default mode
        mode: Skip the mode question when given
        auto_target: Skip the threshold question when given

    Returns:
        The session settings
    """
    count = await ask_int(
        io,
        f"Number of players ({game.min_players} to {game.max_players}): ",
        game.min_players,
        game.max_players,
    )
    names = await ask_names(io, count)

    if mode is None:
        io.log("Game modes:\n  1) Interactive (hit / stay + advice)\n  2) Auto (simple strategy)")
        default_choice = 2 if game.mode == "auto" else 1
        choice = await ask_int(io, f"Mode (1 or 2) [{default_choice}]: ", 1, 2, default=default_choice)
        mode = "auto" if choice == 2 else "interactive"

    if mode == "auto" and strategy == "threshold" and auto_target is None:
        auto_target = await ask_int(
            io,
            f"Auto mode: stay once holding how many distinct numbers? (1 to 7) [{game.auto_target}]: ",
            1,
            7,
            default=game.auto_target,
        )

    return SessionSettings(
        names=names,
        mode=mode,
        auto_target=auto_target if auto_target is not None else game.auto_target,
        strategy=strategy,
    )


def build_strategies(settings: SessionSettings) -> dict[str, Strategy]:
    """Every seat is automatic in auto mode, none otherwise."""
    if not settings.is_auto:
        return {}
    if settings.strategy == "advisor":
        return {name: AdvisorStrategy() for name in settings.names}
    return {name: ThresholdStrategy(settings.auto_target) for name in settings.names}


async def play_session(
    io: DecisionSource,
    settings: SessionSettings,
    rules: RuleSet,
    rng: Random | None = None,
    history: GameHistory | None = None,
) -> GameResult:
    """Run one full game with the given settings."""
    game = Flip7Game(
        settings.names,
        io,
        rules=rules,
        strategies=build_strategies(settings),
        rng=rng,
    )
    if history is not None:
        game.subscribe(history.record)
    return await game.play()


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Flip 7 in the terminal.")
    parser.add_argument("--mode", choices=["interactive", "auto"], help="Skip the mode question.")
    parser.add_argument("--auto-target", type=int, help="Distinct numbers an automatic player stays on (1 to 7).")
    parser.add_argument(
        "--strategy",
        choices=["threshold", "advisor"],
        default="threshold",
        help="Automatic player behaviour.",
    )
    parser.add_argument("--seed", type=int, help="Seed the shuffles for a reproducible game.")
    parser.add_argument("--no-history", action="store_true", help="Do not write the game history file.")
    args = parser.parse_args(argv)
    if args.auto_target is not None and not 1 <= args.auto_target <= 7:
        parser.error("--auto-target must be between 1 and 7")
    return args


async def main(argv: Sequence[str] | None = None) -> GameResult:
    """Set up a session on the console and play it."""
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if config.debug else logging.WARNING)

    io = ConsoleDecisions()
    io.log(BANNER)
    settings = await setup_session(
        io,
        config.game,
        mode=args.mode,
        auto_target=args.auto_target,
        strategy=args.strategy,
    )
    rules = RuleSet.from_config(config.game)
    rng = Random(args.seed) if args.seed is not None else None

    history = None
    if config.history.enabled and not args.no_history:
        history = GameHistory(config.history.path)
        logger.info("Writing game history to %s", history.path)
    try:
        return await play_session(io, settings, rules, rng=rng, history=history)
    finally:
        if history is not None:
            history.close()


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, EOFError):
        print("\nGame interrupted.")


if __name__ == "__main__":
    run()
