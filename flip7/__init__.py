"""Flip 7 rules engine - 100% UI-agnostic."""

from flip7.cards import (
    Action,
    ActionCard,
    Card,
    CardKind,
    Deck,
    Modifier,
    ModifierCard,
    NumberCard,
    card_from_string,
)
from flip7.player import Player, PlayerRoundState
from flip7.rules import RuleSet

__all__ = [
    "Action",
    "ActionCard",
    "Card",
    "CardKind",
    "Deck",
    "Modifier",
    "ModifierCard",
    "NumberCard",
    "card_from_string",
    "Player",
    "PlayerRoundState",
    "RuleSet",
]
