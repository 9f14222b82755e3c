"""Automatic playing strategies."""

from flip7.strategy.auto import AdvisorStrategy, Strategy, ThresholdStrategy

__all__ = [
    "Strategy",
    "ThresholdStrategy",
    "AdvisorStrategy",
]
