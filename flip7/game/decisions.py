"""The engine's view of whoever answers its questions."""

from abc import ABC, abstractmethod
from enum import Enum, auto


TARGET_PROMPT = "> Player number: "


def turn_prompt(player_name: str) -> str:
    """The hit/stay question for a player."""
    return f"{player_name}: (h)it / (s)tay / (a)dvice ? "


class TurnChoice(Enum):
    """Parsed answer to the hit/stay prompt."""

    HIT = auto()
    STAY = auto()
    ADVICE = auto()


class DecisionSource(ABC):
    """
    Transport for player decisions and table notifications.

    Implementations route ``ask`` to the named player only (local prompt,
    remote socket, test script) and deliver ``log`` lines to everyone.
    Exactly one question is outstanding at any time.
    """

    @abstractmethod
    async def ask(self, prompt: str, player_name: str) -> str:
        """Ask one player a question and wait for the raw answer."""
        ...

    @abstractmethod
    def log(self, text: str) -> None:
        """Publish a human-readable line. Must not block."""
        ...


def parse_turn_choice(answer: str) -> TurnChoice | None:
    """Parse a hit/stay/advice answer; None when malformed."""
    text = answer.strip().lower()
    if not text:
        return None
    for choice, word in (
        (TurnChoice.HIT, "hit"),
        (TurnChoice.STAY, "stay"),
        (TurnChoice.ADVICE, "advice"),
    ):
        if word.startswith(text):
            return choice
    return None


def parse_target_index(answer: str, count: int) -> int | None:
    """Parse a 1-based index into a zero-based one; None when invalid."""
    try:
        k = int(answer.strip())
    except ValueError:
        return None
    if 1 <= k <= count:
        return k - 1
    return None


def parse_yes(answer: str) -> bool:
    """Anything but an explicit yes means no."""
    return answer.strip().lower().startswith("y")
