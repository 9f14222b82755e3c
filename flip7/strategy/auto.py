"""Automatic players."""

from abc import ABC, abstractmethod
from typing import Iterable, Sequence

from flip7.cards import Card
from flip7.player import Player
from flip7.rules import RuleSet
from flip7.statistics.advice import Suggestion, compute_advice


class Strategy(ABC):
    """Decides on behalf of a seat instead of asking a human."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a short label for logs."""
        ...

    @abstractmethod
    def wants_hit(self, player: Player, cards: Iterable[Card], rules: RuleSet) -> bool:
        """Return True to draw, False to stay."""
        ...

    def choose_target(self, actor: Player, candidates: Sequence[Player]) -> Player:
        """Aim actions at the first opponent, or at ourselves if alone."""
        for candidate in candidates:
            if candidate is not actor:
                return candidate
        return candidates[0]

    def use_second_chance(self, player: Player) -> bool:
        """Always cancel the bust."""
        return True


class ThresholdStrategy(Strategy):
    """Hit until holding ``target`` distinct numbers, then stay."""

    def __init__(self, target: int = 4) -> None:
        if not 1 <= target <= 7:
            raise ValueError("target must be between 1 and 7")
        self.target = target

    @property
    def name(self) -> str:
        return f"threshold>={self.target}"

    def wants_hit(self, player: Player, cards: Iterable[Card], rules: RuleSet) -> bool:
        return player.state.distinct_count < self.target


class AdvisorStrategy(Strategy):
    """Follow the one-step advisor's recommendation."""

    @property
    def name(self) -> str:
        return "advisor"

    def wants_hit(self, player: Player, cards: Iterable[Card], rules: RuleSet) -> bool:
        advice = compute_advice(player.state, cards, rules)
        return advice.suggestion is Suggestion.HIT
