"""Append-only game history file."""

import logging
from pathlib import Path

from flip7.game.events import EventType, GameEvent

HISTORY_FORMAT = "[%(asctime)s] %(message)s"

# A rule is drawn above these
SECTION_EVENTS = frozenset({EventType.GAME_STARTED, EventType.ROUND_STARTED, EventType.GAME_ENDED})


class GameHistory:
    """
    Writes every event line to a text file, one timestamped line each.

    Subscribe ``record`` to a game's emitter. Multi-line messages are split
    so that each written line carries its own timestamp.
    """

    def __init__(self, path: str | Path, name: str = "flip7.history") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        self._handler = logging.FileHandler(self.path, encoding="utf-8")
        self._handler.setFormatter(logging.Formatter(HISTORY_FORMAT))
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False
        self._logger.addHandler(self._handler)

    def record(self, event: GameEvent) -> None:
        """Write an event's message."""
        if event.event_type in SECTION_EVENTS:
            self.separator()
        for line in event.message.splitlines():
            self._logger.info(line)

    def separator(self) -> None:
        self._logger.info("-" * 60)

    def close(self) -> None:
        """Detach and close the file."""
        self._logger.removeHandler(self._handler)
        self._handler.close()
