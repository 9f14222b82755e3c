"""Console decision source: one keyboard shared by every seat."""

import asyncio
from typing import Callable

from flip7.game.decisions import DecisionSource


class ConsoleDecisions(DecisionSource):
    """
    Ask questions on stdin and print log lines to stdout.

    The prompt already names the player, so ``player_name`` is not needed:
    everybody sits at the same terminal.
    """

    def __init__(
        self,
        reader: Callable[[str], str] = input,
        writer: Callable[[str], None] = print,
    ) -> None:
        self._reader = reader
        self._writer = writer

    async def ask(self, prompt: str, player_name: str) -> str:
        # input() blocks, keep the event loop free while waiting
        return await asyncio.to_thread(self._reader, prompt)

    def log(self, text: str) -> None:
        self._writer(text)
