"""Probability tools for Flip 7."""

from flip7.statistics.advice import (
    Advice,
    Suggestion,
    bust_probability,
    compute_advice,
    draw_distribution,
    score_after,
)

__all__ = [
    "Advice",
    "Suggestion",
    "bust_probability",
    "compute_advice",
    "draw_distribution",
    "score_after",
]
