"""Remote table: websocket seats wired to a shared game engine."""

import asyncio
import logging
from dataclasses import dataclass, field
from random import Random
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from api.schemas import (
    ErrorMessage,
    InputMessage,
    PlayerStatusResponse,
    PrintMessage,
    PromptMessage,
    TableStatusResponse,
)
from config import config
from flip7.game import DecisionSource, Flip7Game, GameResult
from flip7.game.decisions import TARGET_PROMPT
from flip7.history import GameHistory
from flip7.rules import RuleSet

logger = logging.getLogger(__name__)

router = APIRouter()

# Answers given on behalf of a player who is not connected
ABSENT_ANSWER = "s"
ABSENT_TARGET = "1"

# Table lines framing a game
GAME_START_LINE = "=== All players connected. Starting! ==="
GAME_OVER_LINE = "=== Game over ==="
GAME_CRASHED = "The game stopped unexpectedly."


def absent_answer(prompt: str) -> str:
    """Stay on turns, decline second chances, aim actions at the first listed player."""
    return ABSENT_TARGET if prompt == TARGET_PROMPT else ABSENT_ANSWER


class TableError(Exception):
    """A player cannot take a seat."""


@dataclass(eq=False)
class Seat:
    """One connected player and its outbound message queue."""

    name: str
    outbox: asyncio.Queue = field(default_factory=asyncio.Queue)
    pending: asyncio.Future | None = None
    prompt: str | None = None
    connected: bool = True

    def send(self, message: dict[str, Any]) -> None:
        if self.connected:
            self.outbox.put_nowait(message)


class TableManager(DecisionSource):
    """
    Seat players by name and run one game once the table is full.

    Prompts go only to the player concerned; log lines are broadcast to every
    seat. A player who leaves mid-game stays on every turn and declines any
    second chance, including a question already pending.
    """

    def __init__(
        self,
        expected_players: int = 2,
        rules: RuleSet | None = None,
        rng: Random | None = None,
        history_path: str | None = None,
    ) -> None:
        if expected_players < 1:
            raise ValueError("expected_players must be positive")
        self.expected_players = expected_players
        self.rules = rules or RuleSet()
        self.rng = rng
        self.history_path = history_path

        self._seats: dict[str, Seat] = {}
        self._game: Flip7Game | None = None
        self._task: asyncio.Task | None = None
        self.last_result: GameResult | None = None

    @property
    def started(self) -> bool:
        return self._task is not None

    @property
    def game(self) -> Flip7Game | None:
        return self._game

    @property
    def seats(self) -> list[Seat]:
        return list(self._seats.values())

    # ------------------------------------------------------------------
    # Seating
    # ------------------------------------------------------------------

    def join(self, name: str) -> Seat:
        """
        Take a seat.

        Raises:
            TableError: Empty or taken name, full table or game in progress
        """
        wanted = name.strip()
        if not wanted:
            raise TableError("Name cannot be empty")
        if wanted in self._seats:
            raise TableError(f"Name already taken: {wanted}")
        if self.started:
            raise TableError("A game is already in progress")
        if len(self._seats) >= self.expected_players:
            raise TableError("The table is full")

        seat = Seat(wanted)
        self._seats[wanted] = seat
        self.broadcast(PrintMessage(text=f"{wanted} joined ({len(self._seats)}/{self.expected_players})"))
        return seat

    def leave(self, seat: Seat) -> None:
        """Release a seat, or keep it as an absent player once the game runs."""
        if self._seats.get(seat.name) is not seat:
            return
        seat.connected = False
        if self.started:
            if seat.pending is not None and not seat.pending.done():
                seat.pending.set_result(absent_answer(seat.prompt or ""))
        else:
            del self._seats[seat.name]
        self.broadcast(PrintMessage(text=f"{seat.name} disconnected."))

    def submit(self, seat: Seat, value: str) -> bool:
        """Answer the seat's pending question. False when nothing is pending."""
        future = seat.pending
        if future is None or future.done():
            return False
        seat.pending = None
        future.set_result(value.strip().lower())
        return True

    def start_if_ready(self) -> asyncio.Task | None:
        """Start the game once every expected player has joined."""
        if self.started or len(self._seats) < self.expected_players:
            return None
        self._task = asyncio.create_task(self._run())
        return self._task

    # ------------------------------------------------------------------
    # DecisionSource
    # ------------------------------------------------------------------

    async def ask(self, prompt: str, player_name: str) -> str:
        seat = self._seats.get(player_name)
        if seat is None or not seat.connected:
            return absent_answer(prompt)

        future = asyncio.get_running_loop().create_future()
        seat.pending = future
        seat.prompt = prompt
        seat.send(PromptMessage(text=prompt).model_dump())
        try:
            return await future
        finally:
            if seat.pending is future:
                seat.pending = None

    def log(self, text: str) -> None:
        self.broadcast(PrintMessage(text=text))

    def broadcast(self, message: PrintMessage | ErrorMessage) -> None:
        payload = message.model_dump()
        for seat in self._seats.values():
            seat.send(payload)

    # ------------------------------------------------------------------
    # Game lifecycle
    # ------------------------------------------------------------------

    async def _run(self) -> GameResult | None:
        names = list(self._seats)
        history = GameHistory(self.history_path) if self.history_path else None
        result = None
        try:
            self._game = Flip7Game(names, self, rules=self.rules, rng=self.rng)
            if history is not None:
                self._game.subscribe(history.record)
            self.log(GAME_START_LINE)
            result = await self._game.play()
            self.last_result = result
            self.log(GAME_OVER_LINE)
        except Exception:
            logger.exception("Table game crashed")
            self.broadcast(ErrorMessage(message=GAME_CRASHED))
        finally:
            if history is not None:
                history.close()
            self.reset()
        return result

    def reset(self) -> None:
        """Free every seat so a new game can gather."""
        self._seats.clear()
        self._game = None
        self._task = None

    def status(self) -> TableStatusResponse:
        """Snapshot of the table for the HTTP status endpoint."""
        game = self._game
        players = []
        for seat in self._seats.values():
            player = game.player(seat.name) if game is not None else None
            players.append(
                PlayerStatusResponse(
                    name=seat.name,
                    connected=seat.connected,
                    total_score=player.total_score if player else None,
                    active=player.active if player else None,
                )
            )
        return TableStatusResponse(
            expected_players=self.expected_players,
            started=self.started,
            phase=game.state.name if game is not None else None,
            round=len(game.rounds) if game is not None else None,
            players=players,
            last_winners=[p.name for p in self.last_result.winners] if self.last_result else [],
        )


# Global table
manager = TableManager(
    expected_players=config.table.expected_players,
    rules=RuleSet.from_config(config.game),
    history_path=config.history.path if config.history.enabled else None,
)


async def _pump(websocket: WebSocket, seat: Seat) -> None:
    """Forward queued messages to the socket."""
    while True:
        message = await seat.outbox.get()
        try:
            await websocket.send_json(message)
        except Exception:
            logger.debug("Dropping messages for %s, socket closed", seat.name)
            return


@router.websocket("/table/{player_name}")
async def table_websocket(websocket: WebSocket, player_name: str) -> None:
    """
    WebSocket endpoint for one seat at the table.

    Messages from client:
    - {"type": "input", "value": "h"}

    Messages to client:
    - {"type": "prompt", "text": "..."}   question for this player only
    - {"type": "print", "text": "..."}    table log line
    - {"type": "error", "message": "..."}
    """
    await websocket.accept()
    try:
        seat = manager.join(player_name)
    except TableError as e:
        await websocket.send_json(ErrorMessage(message=str(e)).model_dump())
        await websocket.close(code=1008)
        return

    sender = asyncio.create_task(_pump(websocket, seat))
    manager.start_if_ready()

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = InputMessage.model_validate_json(data)
            except ValidationError:
                seat.send(ErrorMessage(message='Expected {"type": "input", "value": "..."}').model_dump())
                continue

            if not manager.submit(seat, message.value):
                seat.send(ErrorMessage(message="No question pending").model_dump())

    except WebSocketDisconnect:
        pass
    finally:
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        manager.leave(seat)
