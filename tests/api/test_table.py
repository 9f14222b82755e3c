"""Tests for the remote table and its websocket endpoint."""

import asyncio
from random import Random

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.websocket import ABSENT_ANSWER, TableError, TableManager, manager
from flip7.game.decisions import TARGET_PROMPT
from flip7.rules import RuleSet


def answer_for(prompt: str) -> str:
    """Stay on every turn, aim at the first player, accept second chances."""
    if prompt == TARGET_PROMPT:
        return "1"
    if "(y/n)" in prompt:
        return "y"
    return "s"


async def autoplay(table: TableManager, seat, received: list) -> None:
    """Read a seat's messages and answer every prompt."""
    while True:
        message = await seat.outbox.get()
        received.append(message)
        if message["type"] == "prompt":
            table.submit(seat, answer_for(message["text"]))


def drain(seat) -> list[dict]:
    messages = []
    while not seat.outbox.empty():
        messages.append(seat.outbox.get_nowait())
    return messages


class TestSeating:
    """Tests for joining and leaving."""

    def test_join(self):
        """Test joining announces the seat count."""
        table = TableManager(expected_players=3)
        seat = table.join(" Ann ")

        assert seat.name == "Ann"
        assert drain(seat) == [{"type": "print", "text": "Ann joined (1/3)"}]

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name(self, name):
        """Test empty names are refused."""
        with pytest.raises(TableError):
            TableManager().join(name)

    def test_duplicate_name(self):
        """Test a taken name is refused."""
        table = TableManager(expected_players=3)
        table.join("Ann")
        with pytest.raises(TableError, match="already taken"):
            table.join("Ann")

    def test_table_full(self):
        """Test nobody joins past the expected count."""
        table = TableManager(expected_players=1)
        table.join("Ann")
        with pytest.raises(TableError):
            table.join("Ben")

    def test_leave_before_start_frees_seat(self):
        """Test a player who leaves early can be replaced."""
        table = TableManager(expected_players=2)
        ann = table.join("Ann")
        table.leave(ann)
        table.join("Ann")

        assert [s.name for s in table.seats] == ["Ann"]

    def test_invalid_expected_players(self):
        """Test the table needs at least one seat."""
        with pytest.raises(ValueError):
            TableManager(expected_players=0)

    def test_start_waits_for_everyone(self):
        """Test the game does not start with a seat missing."""
        table = TableManager(expected_players=2)
        table.join("Ann")

        assert table.start_if_ready() is None
        assert not table.started


class TestDecisions:
    """Tests for routing questions and log lines."""

    @pytest.mark.asyncio
    async def test_prompt_goes_to_one_player(self):
        """Test only the asked player sees the prompt."""
        table = TableManager(expected_players=2)
        ann, ben = table.join("Ann"), table.join("Ben")
        drain(ann)
        drain(ben)

        pending = asyncio.create_task(table.ask("Ann: (h)it / (s)tay / (a)dvice ? ", "Ann"))
        await asyncio.sleep(0)

        assert drain(ann) == [{"type": "prompt", "text": "Ann: (h)it / (s)tay / (a)dvice ? "}]
        assert drain(ben) == []
        assert not table.submit(ben, "h")
        assert table.submit(ann, " H ")
        assert await pending == "h"

    @pytest.mark.asyncio
    async def test_log_is_broadcast(self):
        """Test log lines reach every seat."""
        table = TableManager(expected_players=2)
        ann, ben = table.join("Ann"), table.join("Ben")
        drain(ann)
        drain(ben)

        table.log("[HIT] Ann draws a card.")

        expected = [{"type": "print", "text": "[HIT] Ann draws a card."}]
        assert drain(ann) == expected
        assert drain(ben) == expected

    @pytest.mark.asyncio
    async def test_unknown_player_stays(self):
        """Test questions for a missing player are answered for them."""
        table = TableManager()
        assert await table.ask("Zoe: (h)it / (s)tay / (a)dvice ? ", "Zoe") == ABSENT_ANSWER
        assert await table.ask(TARGET_PROMPT, "Zoe") == "1"

    @pytest.mark.asyncio
    async def test_disconnect_answers_pending_question(self):
        """Test leaving mid-game resolves the open question with a stay."""
        table = TableManager(expected_players=1)
        ann = table.join("Ann")
        table._task = asyncio.get_running_loop().create_future()

        pending = asyncio.create_task(table.ask("Ann: (h)it / (s)tay / (a)dvice ? ", "Ann"))
        await asyncio.sleep(0)
        table.leave(ann)

        assert await pending == "s"
        assert await table.ask("Ann: (h)it / (s)tay / (a)dvice ? ", "Ann") == "s"
        assert [s.name for s in table.seats] == ["Ann"]
        table.reset()


class TestTableGame:
    """Tests for a full game at the table."""

    @pytest.mark.asyncio
    async def test_game_runs_when_full(self):
        """Test the game starts with the last seat and frees the table at the end."""
        table = TableManager(expected_players=2, rules=RuleSet(victory_threshold=15), rng=Random(3))
        seats = [table.join("Ann"), table.join("Ben")]
        inboxes = {seat.name: [] for seat in seats}
        players = [asyncio.create_task(autoplay(table, seat, inboxes[seat.name])) for seat in seats]

        task = table.start_if_ready()
        assert table.started
        result = await asyncio.wait_for(task, timeout=10)

        for player in players:
            player.cancel()
        await asyncio.gather(*players, return_exceptions=True)
        for seat in seats:
            inboxes[seat.name].extend(drain(seat))

        assert result is not None
        assert table.last_result is result
        assert not table.started
        assert table.seats == []
        assert max(p.total_score for p in result.ranking) >= 15

        texts = [m["text"] for m in inboxes["Ann"] if m["type"] == "print"]
        assert "=== All players connected. Starting! ===" in texts
        assert texts[-1] == "=== Game over ==="
        assert any(t.startswith("[ROUND 1]") for t in texts)
        # Both players saw the same log; prompts were private
        ben_texts = [m["text"] for m in inboxes["Ben"] if m["type"] == "print"]
        assert ben_texts[-1] == "=== Game over ==="
        assert all(
            m["text"] == TARGET_PROMPT or m["text"].startswith("Ann")
            for m in inboxes["Ann"]
            if m["type"] == "prompt"
        )

    @pytest.mark.asyncio
    async def test_status_during_game(self):
        """Test the status snapshot reports scores once the game runs."""
        table = TableManager(expected_players=1, rules=RuleSet(victory_threshold=1))
        seat = table.join("Ann")
        received = []
        player = asyncio.create_task(autoplay(table, seat, received))
        task = table.start_if_ready()

        status = table.status()
        assert status.started is True
        assert status.players[0].name == "Ann"

        await asyncio.wait_for(task, timeout=10)
        player.cancel()

        status = table.status()
        assert status.started is False
        assert status.last_winners == ["Ann"]


class TestWebsocketEndpoint:
    """Tests for /ws/table/{name}."""

    @pytest.fixture(autouse=True)
    def clean_table(self):
        manager.reset()
        yield
        manager.reset()

    def test_join_and_bad_messages(self):
        """Test the welcome line and error replies."""
        with TestClient(app) as client:
            with client.websocket_connect("/ws/table/Ann") as ws:
                joined = ws.receive_json()
                assert joined["type"] == "print"
                assert joined["text"].startswith("Ann joined (1/")

                ws.send_text("not json")
                assert ws.receive_json()["type"] == "error"

                ws.send_json({"type": "input", "value": "h"})
                assert ws.receive_json() == {"type": "error", "message": "No question pending"}

    def test_duplicate_name_rejected(self):
        """Test a second connection with the same name is refused."""
        if manager.expected_players < 2:
            pytest.skip("needs a table with at least two seats")
        with TestClient(app) as client:
            with client.websocket_connect("/ws/table/Ann") as ws:
                ws.receive_json()
                with client.websocket_connect("/ws/table/Ann") as other:
                    message = other.receive_json()
                    assert message == {"type": "error", "message": "Name already taken: Ann"}
