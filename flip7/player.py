"""Per-round player state and round scoring."""

from dataclasses import dataclass, field, replace

FLIP7_BONUS = 15


@dataclass
class PlayerRoundState:
    """
    What a player holds during one round.

    Reset at the start of every round. An eliminated player scores zero and
    is never active; a player who stayed is inactive but keeps their score.
    """

    numbers: set[int] = field(default_factory=set)
    has_doubler: bool = False
    bonus: int = 0
    has_second_chance: bool = False
    active: bool = True
    eliminated: bool = False

    def reset(self) -> None:
        """Clear everything for a new round."""
        self.numbers = set()
        self.has_doubler = False
        self.bonus = 0
        self.has_second_chance = False
        self.active = True
        self.eliminated = False

    def bust(self) -> None:
        """Eliminate from the round."""
        self.active = False
        self.eliminated = True

    def freeze(self) -> None:
        """Wipe the round contribution and eliminate."""
        self.numbers = set()
        self.has_doubler = False
        self.bonus = 0
        self.has_second_chance = False
        self.bust()

    def copy(self) -> "PlayerRoundState":
        """Return an independent copy."""
        return replace(self, numbers=set(self.numbers))

    @property
    def distinct_count(self) -> int:
        """Return the number of distinct numbers held."""
        return len(self.numbers)

    @property
    def number_sum(self) -> int:
        """Return the sum of the number cards held."""
        return sum(self.numbers)

    def round_score(self, bonus_event: bool = False, flip7_bonus: int = FLIP7_BONUS) -> int:
        """
        Calculate the round score.

        Args:
            bonus_event: True if this player ended the round with seven numbers
            flip7_bonus: Points paid for that event

        Returns:
            0 when eliminated, else numbers (doubled if x2 is held) + bonus
        """
        if self.eliminated:
            return 0
        base = self.number_sum * (2 if self.has_doubler else 1)
        return base + self.bonus + (flip7_bonus if bonus_event else 0)

    def __str__(self) -> str:
        numbers = ", ".join(str(n) for n in sorted(self.numbers))
        return (
            f"numbers=[{numbers}] | x2={self.has_doubler} | +bonus={self.bonus}"
            f" | secondChance={self.has_second_chance}"
        )


@dataclass(eq=False)
class Player:
    """A seat at the table: lifetime total plus the current round."""

    name: str
    total_score: int = 0
    state: PlayerRoundState = field(default_factory=PlayerRoundState)

    @property
    def active(self) -> bool:
        return self.state.active

    @property
    def eliminated(self) -> bool:
        return self.state.eliminated

    def status_line(self) -> str:
        """Return the per-turn status line."""
        return f"{self.name} | {self.state}"

    def __repr__(self) -> str:
        return f"Player({self.name!r}, total={self.total_score})"
