"""Game engine, card resolution and state management."""

from flip7.game.decisions import DecisionSource, TurnChoice
from flip7.game.events import EventEmitter, EventType, GameEvent
from flip7.game.resolution import ApplyResult, CardResolver, first_active_player
from flip7.game.state import RoundPhase
from flip7.game.engine import Flip7Game, GameResult, Round

__all__ = [
    "DecisionSource",
    "TurnChoice",
    "EventEmitter",
    "EventType",
    "GameEvent",
    "ApplyResult",
    "CardResolver",
    "first_active_player",
    "RoundPhase",
    "Flip7Game",
    "GameResult",
    "Round",
]
