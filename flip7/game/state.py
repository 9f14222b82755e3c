"""Round lifecycle states."""

from enum import Enum, auto


class RoundPhase(Enum):
    """
    Game state machine states.

    Flow: WAITING → DEALING → ACTIVE_LOOP → SCORING → DEALER_ADVANCE → WAITING | GAME_OVER
    """

    # Between rounds
    WAITING = auto()

    # One card to every player
    DEALING = auto()

    # Hit/stay passes over the active players
    ACTIVE_LOOP = auto()

    # Round scores added to totals
    SCORING = auto()

    # Dealer rotates, win condition checked
    DEALER_ADVANCE = auto()

    # Somebody crossed the victory threshold
    GAME_OVER = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()

