"""Game events for the event system."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of game events."""

    # Game flow events
    GAME_STARTED = auto()
    GAME_ENDED = auto()
    ROUND_STARTED = auto()
    ROUND_ENDED = auto()
    DEALER_ADVANCED = auto()

    # Deck events
    DECK_RECYCLED = auto()
    DECK_EXHAUSTED = auto()

    # Player turn events
    PLAYER_TURN = auto()
    PLAYER_HIT = auto()
    PLAYER_STAY = auto()
    ADVICE_GIVEN = auto()
    AUTO_DECISION = auto()

    # Card resolution events
    CARD_APPLIED = auto()
    PLAYER_BUSTS = auto()
    FLIP_SEVEN = auto()
    SECOND_CHANCE_GAINED = auto()
    SECOND_CHANCE_USED = auto()
    SECOND_CHANCE_TRANSFERRED = auto()
    SECOND_CHANCE_DISCARDED = auto()
    PLAYER_FROZEN = auto()
    FLIP_THREE_STARTED = auto()
    FLIP_THREE_DRAW = auto()
    ACTION_DEFERRED = auto()
    DEFERRED_ACTION_RESOLVED = auto()
    TARGET_REQUESTED = auto()

    # Scoring events
    PLAYER_SCORED = auto()

    # Recoverable problems
    INVALID_INPUT = auto()
    NO_TARGET = auto()
    RESOLUTION_LIMIT = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable game event.

    Events are the primary communication mechanism between the engine and
    the presentation layer. ``data["message"]`` holds the human-readable line.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def message(self) -> str:
        return str(self.data.get("message", ""))

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


# Type alias for event handlers
EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Simple event emitter for game events.

    Allows subscribing to specific event types or all events.
    """

    def __init__(self) -> None:
        """Initialize the event emitter."""
        self._handlers: dict[EventType | None, list[EventHandler]] = {}
        self._event_history: list[GameEvent] = []

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Function to call when event occurs
            event_type: Specific event type to subscribe to, or None for all events
        """
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Unsubscribe a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent) -> None:
        """
        Emit an event to all subscribers.

        A failing handler is logged and skipped so that observers can never
        change the course of the game.
        """
        self._event_history.append(event)

        handlers = list(self._handlers.get(event.event_type, []))
        handlers.extend(self._handlers.get(None, []))
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler failed for %s", event.event_type.name)

    def emit_new(
        self,
        event_type: EventType,
        **data: Any,
    ) -> GameEvent:
        """
        Create and emit a new event.

        Args:
            event_type: Type of event
            **data: Event data

        Returns:
            The created event
        """
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    @property
    def history(self) -> list[GameEvent]:
        """Return the event history."""
        return self._event_history.copy()

    def of_type(self, event_type: EventType) -> list[GameEvent]:
        """Return the recorded events of one type."""
        return [e for e in self._event_history if e.event_type is event_type]

    def clear_history(self) -> None:
        """Clear the event history."""
        self._event_history.clear()
