"""Tests for the event system."""

from flip7.game.events import EventEmitter, EventType, GameEvent


class TestEventEmitter:
    """Tests for EventEmitter."""

    def test_subscribe_all(self):
        """Test a catch-all handler sees every event."""
        emitter = EventEmitter()
        seen = []
        emitter.subscribe(seen.append)

        emitter.emit_new(EventType.PLAYER_HIT, message="hit")
        emitter.emit_new(EventType.PLAYER_STAY, message="stay")

        assert [e.event_type for e in seen] == [EventType.PLAYER_HIT, EventType.PLAYER_STAY]

    def test_subscribe_one_type(self):
        """Test a typed handler only sees its type."""
        emitter = EventEmitter()
        seen = []
        emitter.subscribe(seen.append, EventType.PLAYER_BUSTS)

        emitter.emit_new(EventType.PLAYER_HIT)
        emitter.emit_new(EventType.PLAYER_BUSTS, player="Ann")

        assert len(seen) == 1
        assert seen[0].data["player"] == "Ann"

    def test_unsubscribe(self):
        """Test removed handlers are no longer called."""
        emitter = EventEmitter()
        seen = []
        emitter.subscribe(seen.append)
        emitter.unsubscribe(seen.append)
        emitter.unsubscribe(print)

        emitter.emit_new(EventType.PLAYER_HIT)

        assert seen == []

    def test_failing_handler_isolated(self, caplog):
        """Test a crashing handler does not stop the others."""
        emitter = EventEmitter()
        seen = []

        def broken(event):
            raise RuntimeError("boom")

        emitter.subscribe(broken)
        emitter.subscribe(seen.append)

        emitter.emit_new(EventType.ROUND_STARTED, message="go")

        assert len(seen) == 1
        assert "Event handler failed for ROUND_STARTED" in caplog.text

    def test_history(self):
        """Test events are recorded and filterable."""
        emitter = EventEmitter()
        emitter.emit_new(EventType.PLAYER_HIT)
        emitter.emit_new(EventType.PLAYER_STAY)
        emitter.emit_new(EventType.PLAYER_HIT)

        assert len(emitter.history) == 3
        assert len(emitter.of_type(EventType.PLAYER_HIT)) == 2

        emitter.clear_history()
        assert emitter.history == []


class TestGameEvent:
    """Tests for GameEvent."""

    def test_message(self):
        """Test the message is read from the data."""
        assert GameEvent(EventType.PLAYER_HIT, {"message": "[HIT] Ann"}).message == "[HIT] Ann"
        assert GameEvent(EventType.PLAYER_HIT).message == ""
