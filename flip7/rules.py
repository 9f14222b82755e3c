"""Flip 7 rule variations."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from config import GameConfig


@dataclass(frozen=True)
class RuleSet:
    """
    Game rules configuration.

    Defaults follow the published Flip 7 rules.
    """

    # Game ends after the round in which someone reaches this total
    victory_threshold: int = 200

    # Distinct numbers that end the round, and the bonus they pay
    flip7_size: int = 7
    flip7_bonus: int = 15

    # Ask a human whether to spend a held Second Chance on a duplicate
    confirm_second_chance: bool = False

    # Start each round's turn order with the player after the dealer
    turn_order_follows_dealer: bool = False

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.victory_threshold < 1:
            raise ValueError("victory_threshold must be positive")
        if not 1 <= self.flip7_size <= 13:
            raise ValueError("flip7_size must be between 1 and 13")
        if self.flip7_bonus < 0:
            raise ValueError("flip7_bonus cannot be negative")

    @classmethod
    def from_config(cls, game: "GameConfig") -> "RuleSet":
        """Build rules from the application game configuration."""
        return cls(
            victory_threshold=game.victory_threshold,
            confirm_second_chance=game.confirm_second_chance,
            turn_order_follows_dealer=game.turn_order_follows_dealer,
        )
