"""Tests for EventBus."""

from datetime import datetime, timezone

from tracelab.models import PlaybackEvent, PlaybackEventKind, Topic


def make_event(kind=PlaybackEventKind.STEP_FORWARD) -> PlaybackEvent:
    return PlaybackEvent(
        id="evt1",
        topic=Topic.PLAYBACK,
        kind=kind,
        snapshot=None,
        timestamp=datetime.now(timezone.utc),
    )


class TestEventBusSubscribe:
    """Tests for EventBus subscription."""

    def test_subscribe_single_handler(self, event_bus):
        """Test subscribing a single handler."""
        event_bus.subscribe(Topic.PLAYBACK, lambda event: None)

        assert len(event_bus._subscribers[Topic.PLAYBACK]) == 1

    def test_unsubscribe(self, event_bus):
        """Test removing a handler."""
        calls = []
        event_bus.subscribe(Topic.PLAYBACK, calls.append)
        event_bus.unsubscribe(Topic.PLAYBACK, calls.append)

        event_bus.publish(make_event())

        assert calls == []

    def test_unsubscribe_unknown_handler(self, event_bus):
        """Test removing a handler that was never added."""
        event_bus.unsubscribe(Topic.PLAYBACK, print)

        assert event_bus._subscribers[Topic.PLAYBACK] == []


class TestEventBusPublish:
    """Tests for EventBus publishing."""

    def test_publish_in_subscription_order(self, event_bus):
        """Test handlers run synchronously in order."""
        calls = []
        event_bus.subscribe(Topic.PLAYBACK, lambda e: calls.append(("h1", e.id)))
        event_bus.subscribe(Topic.PLAYBACK, lambda e: calls.append(("h2", e.id)))

        event_bus.publish(make_event())

        assert calls == [("h1", "evt1"), ("h2", "evt1")]

    def test_handler_error_isolated(self, event_bus):
        """Test a failing handler does not stop the others."""
        calls = []

        def failing(event):
            raise ValueError("bad handler")

        event_bus.subscribe(Topic.PLAYBACK, failing)
        event_bus.subscribe(Topic.PLAYBACK, calls.append)

        event_bus.publish(make_event())

        assert len(calls) == 1

    def test_clear(self, event_bus):
        """Test clear drops every subscription."""
        calls = []
        event_bus.subscribe(Topic.PLAYBACK, calls.append)
        event_bus.clear()

        event_bus.publish(make_event(PlaybackEventKind.DISPOSED))

        assert calls == []
