"""Card variants and the Flip 7 draw pile."""

from collections import Counter
from dataclasses import dataclass
from enum import Enum, auto
from random import Random
from typing import Iterable, Iterator, Union


class CardKind(Enum):
    """The three families of cards."""

    NUMBER = auto()
    MODIFIER = auto()
    ACTION = auto()


class Modifier(Enum):
    """Score modifiers."""

    DOUBLE = auto()
    ADD = auto()


class Action(Enum):
    """Action cards."""

    FREEZE = auto()
    FLIP_THREE = auto()
    SECOND_CHANCE = auto()

    def __str__(self) -> str:
        return {
            Action.FREEZE: "Freeze",
            Action.FLIP_THREE: "FlipThree",
            Action.SECOND_CHANCE: "SecondChance",
        }[self]


MIN_NUMBER = 0
MAX_NUMBER = 12
ADD_AMOUNTS = (2, 4, 6, 8, 10)
ACTION_COPIES = 3
DECK_SIZE = 94


@dataclass(frozen=True, slots=True)
class NumberCard:
    """A number card worth its face value."""

    value: int

    def __post_init__(self) -> None:
        if not MIN_NUMBER <= self.value <= MAX_NUMBER:
            raise ValueError(f"Number card out of range: {self.value}")

    @property
    def kind(self) -> CardKind:
        return CardKind.NUMBER

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class ModifierCard:
    """A score modifier: x2 or a flat bonus."""

    modifier: Modifier
    amount: int = 0

    def __post_init__(self) -> None:
        if self.modifier is Modifier.DOUBLE and self.amount != 0:
            raise ValueError("Double modifier carries no amount")
        if self.modifier is Modifier.ADD and self.amount not in ADD_AMOUNTS:
            raise ValueError(f"Invalid bonus amount: {self.amount}")

    @property
    def kind(self) -> CardKind:
        return CardKind.MODIFIER

    def __str__(self) -> str:
        if self.modifier is Modifier.DOUBLE:
            return "[MOD: x2]"
        return f"[MOD: +{self.amount}]"


@dataclass(frozen=True, slots=True)
class ActionCard:
    """An action card resolved against a player."""

    action: Action

    @property
    def kind(self) -> CardKind:
        return CardKind.ACTION

    def __str__(self) -> str:
        return f"[ACTION: {self.action}]"


Card = Union[NumberCard, ModifierCard, ActionCard]

DOUBLE = ModifierCard(Modifier.DOUBLE)
FREEZE = ActionCard(Action.FREEZE)
FLIP_THREE = ActionCard(Action.FLIP_THREE)
SECOND_CHANCE = ActionCard(Action.SECOND_CHANCE)


def card_from_string(s: str) -> Card:
    """Create a card from a string like '7', 'x2', '+4' or 'freeze'."""
    text = s.strip().lower()
    if not text:
        raise ValueError("Empty card string")

    actions = {
        "freeze": FREEZE,
        "flipthree": FLIP_THREE,
        "flip3": FLIP_THREE,
        "secondchance": SECOND_CHANCE,
    }
    if text in actions:
        return actions[text]
    if text == "x2":
        return DOUBLE
    if text.startswith("+") and text[1:].isdigit():
        return ModifierCard(Modifier.ADD, int(text[1:]))
    if text.isdigit():
        return NumberCard(int(text))
    raise ValueError(f"Invalid card string: {s}")


def standard_cards() -> list[Card]:
    """Build the 94-card Flip 7 composition in a fixed order."""
    cards: list[Card] = []
    for value in range(MAX_NUMBER, 0, -1):
        cards.extend(NumberCard(value) for _ in range(value))
    cards.append(NumberCard(0))

    for action in Action:
        cards.extend(ActionCard(action) for _ in range(ACTION_COPIES))

    cards.append(DOUBLE)
    cards.extend(ModifierCard(Modifier.ADD, amount) for amount in ADD_AMOUNTS)
    return cards


class Deck:
    """
    The draw pile.

    Cards are drawn from the end of the list. The deck never refills itself:
    the resolver calls recycle() with its discard pile when a draw fails.
    """

    def __init__(
        self,
        cards: Iterable[Card] | None = None,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a deck.

        Args:
            cards: Explicit card order (last card is drawn first).
                Builds the standard composition when omitted.
            rng: Random number generator for shuffling
        """
        self._rng = rng or Random()
        self._cards: list[Card] = []
        if cards is None:
            self.reset()
        else:
            self._cards = list(cards)

    def reset(self) -> None:
        """Reset to the standard composition, unshuffled."""
        self._cards = standard_cards()

    def shuffle(self) -> None:
        """Shuffle the remaining cards."""
        self._rng.shuffle(self._cards)

    def draw(self) -> Card | None:
        """Draw the top card, or None when the pile is empty."""
        if not self._cards:
            return None
        return self._cards.pop()

    def recycle(self, discard_pile: list[Card]) -> None:
        """Turn the discard pile into the new draw pile and shuffle it."""
        self._cards = list(discard_pile)
        discard_pile.clear()
        self.shuffle()

    def counts(self) -> Counter[Card]:
        """Return remaining copies per distinct card."""
        return Counter(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)
