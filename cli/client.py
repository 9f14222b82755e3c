"""Terminal client: take a seat at a remote Flip 7 table."""

import argparse
import asyncio
import logging
import sys
from typing import Any, Sequence
from urllib.parse import quote

from pydantic import ValidationError
from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from api.schemas import InputMessage, PrintMessage, PromptMessage, parse_server_message
from api.websocket import GAME_CRASHED, GAME_OVER_LINE
from cli.console import ConsoleDecisions
from config import config
from flip7.game import DecisionSource

logger = logging.getLogger(__name__)

MAX_ANSWER_LENGTH = 64


def table_url(host: str, name: str, port: int | None = None) -> str:
    """
    Build the websocket address of a seat.

    ``host`` may be a bare host name (``192.168.1.10``), ``host:port`` or a
    full ``ws://`` / ``wss://`` base address.
    """
    base = host.rstrip("/")
    if "://" not in base:
        if ":" not in base:
            base = f"{base}:{port or config.port}"
        base = f"ws://{base}"
    return f"{base}/ws/table/{quote(name.strip(), safe='')}"


class TableClient:
    """
    Plays one seat.

    Table lines are shown as they arrive; prompts are answered from the
    decision source and sent back as input messages. The client is done once
    the table announces the end of the game.
    """

    def __init__(self, io: DecisionSource, name: str) -> None:
        self.io = io
        self.name = name
        self.finished = False

    async def handle(self, raw: str | bytes) -> str | None:
        """Process one server message. Returns the reply to send, if any."""
        try:
            message = parse_server_message(raw)
        except ValidationError:
            logger.debug("Ignoring unreadable message %r", raw)
            return None

        if isinstance(message, PromptMessage):
            answer = await self.io.ask(message.text, self.name)
            reply = InputMessage(type="input", value=answer[:MAX_ANSWER_LENGTH])
            return reply.model_dump_json()

        if isinstance(message, PrintMessage):
            self.io.log(message.text)
            if message.text == GAME_OVER_LINE:
                self.finished = True
            return None

        self.io.log(f"[ERROR] {message.message}")
        if message.message == GAME_CRASHED:
            self.finished = True
        return None

    async def play(self, connection: Any) -> None:
        """Read messages until the game is over or the server hangs up."""
        async for raw in connection:
            reply = await self.handle(raw)
            if reply is not None:
                await connection.send(reply)
            if self.finished:
                return


async def join_table(url: str, name: str, io: DecisionSource) -> TableClient:
    """Connect to ``url`` and play until the game ends."""
    client = TableClient(io, name)
    async with connect(url) as connection:
        io.log(f"Connected to {url}")
        try:
            await client.play(connection)
        except ConnectionClosed as e:
            logger.debug("Connection closed: %s", e)
    io.log("Disconnected from the server.")
    return client


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Join a remote Flip 7 table.")
    parser.add_argument("host", help="Server address, e.g. 192.168.1.10 or ws://host:5050")
    parser.add_argument("name", help="Your player name at the table.")
    parser.add_argument("--port", type=int, help=f"Server port (default {config.port}).")
    args = parser.parse_args(argv)
    if not args.name.strip():
        parser.error("name cannot be empty")
    return args


async def main(argv: Sequence[str] | None = None) -> TableClient:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if config.debug else logging.WARNING)
    return await join_table(table_url(args.host, args.name, args.port), args.name.strip(), ConsoleDecisions())


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, EOFError):
        print("\nBye.")
    except (OSError, InvalidHandshake, InvalidURI) as e:
        print(f"Cannot reach the table: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
