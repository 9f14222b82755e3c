"""One-step hit/stay advisor over the live draw pile."""

from collections import Counter
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable

from flip7.cards import ActionCard, Card, Modifier, ModifierCard, NumberCard
from flip7.player import PlayerRoundState
from flip7.rules import RuleSet


class Suggestion(Enum):
    """Advisor recommendation."""

    HIT = auto()
    STAY = auto()

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Advice:
    """
    Advisor output.

    The numeric fields are None when there is nothing to compute
    (inactive player or empty draw pile).
    """

    suggestion: Suggestion
    reason: str
    p_bust: float | None = None
    score_stay: int | None = None
    expected_hit: float | None = None
    remaining_cards: int | None = None

    def summary(self) -> str:
        """Return the two-line text shown to the player."""
        line = f"[ADVICE] Suggestion: {self.suggestion} | {self.reason}"
        if self.expected_hit is None:
            return line
        return (
            f"{line}\n"
            f"    P(bust)≈{self.p_bust:.3f} | stay={self.score_stay}"
            f" | E(hit)≈{self.expected_hit:.2f} | deck={self.remaining_cards}"
        )


def draw_distribution(cards: Iterable[Card]) -> dict[Card, float]:
    """
    Probability of each distinct card being the next draw.

    Every remaining card is equally likely, so the weights are
    count(c) / N and sum to 1 for a non-empty pile.
    """
    counts = Counter(cards)
    total = sum(counts.values())
    if total == 0:
        return {}
    return {card: count / total for card, count in counts.items()}


def bust_probability(state: PlayerRoundState, cards: Iterable[Card]) -> float:
    """Probability that the next card duplicates a number already held."""
    counts = Counter(cards)
    total = sum(counts.values())
    if total == 0:
        return 0.0
    duplicates = sum(counts[NumberCard(n)] for n in state.numbers)
    return duplicates / total


def score_after(state: PlayerRoundState, card: Card, rules: RuleSet | None = None) -> int:
    """
    Round score after drawing one card, then staying.

    Works on a copy of the state. Action cards are treated as score-neutral.
    A duplicate is absorbed by a held second chance, otherwise it scores 0.
    """
    rules = rules or RuleSet()
    virtual = state.copy()

    if isinstance(card, NumberCard):
        if card.value in virtual.numbers:
            if not virtual.has_second_chance:
                return 0
        else:
            virtual.numbers.add(card.value)
    elif isinstance(card, ModifierCard):
        if card.modifier is Modifier.DOUBLE:
            virtual.has_doubler = True
        else:
            virtual.bonus += card.amount

    flip7 = virtual.distinct_count >= rules.flip7_size
    return virtual.round_score(bonus_event=flip7, flip7_bonus=rules.flip7_bonus)


def compute_advice(
    state: PlayerRoundState,
    cards: Iterable[Card],
    rules: RuleSet | None = None,
) -> Advice:
    """
    Compare staying now against drawing exactly one more card.

    Args:
        state: The player's current round state (never modified)
        cards: Remaining draw pile (a Deck or any iterable of cards)
        rules: Rules for the seven-number bonus

    Returns:
        HIT when the expected score after one draw beats the current score
    """
    rules = rules or RuleSet()

    if state.eliminated or not state.active:
        return Advice(Suggestion.STAY, "Player is inactive or eliminated.")

    remaining = list(cards)
    total = len(remaining)
    if total == 0:
        return Advice(Suggestion.STAY, "No cards left in the draw pile.", remaining_cards=0)

    score_stay = state.round_score()
    p_bust = bust_probability(state, remaining)

    expected_hit = 0.0
    for card, weight in draw_distribution(remaining).items():
        if isinstance(card, ActionCard):
            expected_hit += weight * score_stay
        else:
            expected_hit += weight * score_after(state, card, rules)

    if expected_hit > score_stay:
        suggestion = Suggestion.HIT
        reason = "Expected score beats the current score."
    else:
        suggestion = Suggestion.STAY
        reason = "Risk outweighs the expected gain; staying is at least as good."

    return Advice(
        suggestion=suggestion,
        reason=reason,
        p_bust=p_bust,
        score_stay=score_stay,
        expected_hit=expected_hit,
        remaining_cards=total,
    )
