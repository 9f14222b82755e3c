"""Pytest fixtures for Flip 7 tests."""

import pytest
from random import Random

from flip7.cards import Card, Deck, card_from_string
from flip7.game import DecisionSource, EventEmitter
from flip7.game.resolution import CardResolver
from flip7.player import Player
from flip7.rules import RuleSet


class ScriptedDecisions(DecisionSource):
    """
    Decision source that replays canned answers.

    Answers are consumed per player in order. When a player's script runs
    out the ``default`` answer is used, or the test fails if there is none.
    """

    def __init__(self, answers: dict[str, list[str]] | None = None, default: str | None = None) -> None:
        self.answers = {name: list(script) for name, script in (answers or {}).items()}
        self.default = default
        self.prompts: list[tuple[str, str]] = []
        self.lines: list[str] = []

    async def ask(self, prompt: str, player_name: str) -> str:
        self.prompts.append((player_name, prompt))
        script = self.answers.get(player_name)
        if script:
            return script.pop(0)
        if self.default is not None:
            return self.default
        raise AssertionError(f"Unexpected question for {player_name}: {prompt!r}")

    def log(self, text: str) -> None:
        self.lines.append(text)

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


def stacked_deck(*cards: str | Card) -> Deck:
    """A deck that deals the given cards in the order listed."""
    parsed = [card_from_string(c) if isinstance(c, str) else c for c in cards]
    return Deck(list(reversed(parsed)))


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck(rng):
    """A shuffled standard deck."""
    d = Deck(rng=rng)
    d.shuffle()
    return d


@pytest.fixture
def rules():
    """Default ruleset."""
    return RuleSet()


@pytest.fixture
def stack():
    """Factory for decks dealing cards in a fixed order."""
    return stacked_deck


@pytest.fixture
def decisions():
    """Factory for scripted decision sources."""
    return ScriptedDecisions


@pytest.fixture
def players():
    """Three fresh players in seat order."""
    return [Player("Alice"), Player("Bob"), Player("Cleo")]


@pytest.fixture
def make_resolver(players, rules):
    """Build a resolver over the given cards with the three default players."""

    def _make(*cards: str | Card, io: DecisionSource | None = None, **kwargs) -> CardResolver:
        return CardResolver(
            players,
            stacked_deck(*cards),
            io or ScriptedDecisions(),
            EventEmitter(),
            rules=kwargs.pop("rules", rules),
            **kwargs,
        )

    return _make
