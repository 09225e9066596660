"""EventBus implementation for playback change notifications."""

from typing import Callable, Protocol

from ..logging_config import get_logger
from ..models import PlaybackEvent, Topic

logger = get_logger(__name__)


TopicHandler = Callable[[PlaybackEvent], None]


class IEventBus(Protocol):
    """In-memory pub/sub for PlaybackEvents."""

    def subscribe(self, topic: Topic, handler: TopicHandler) -> None:
        """Subscribe a handler to a topic."""
        ...

    def unsubscribe(self, topic: Topic, handler: TopicHandler) -> None:
        """Remove a handler from a topic."""
        ...

    def publish(self, event: PlaybackEvent) -> None:
        """Publish event: calls subscriber callbacks in subscription order."""
        ...


class EventBus:
    """In-memory pub/sub event bus.

    Handlers run synchronously, so by the time ``publish`` returns every
    subscriber has seen the new state. A failing handler is logged and
    does not stop the others.
    """

    def __init__(self):
        self._subscribers: dict[Topic, list[TopicHandler]] = {
            Topic.PLAYBACK: [],
        }

    def subscribe(self, topic: Topic, handler: TopicHandler) -> None:
        """Subscribe a handler to a topic."""
        self._subscribers[topic].append(handler)

    def unsubscribe(self, topic: Topic, handler: TopicHandler) -> None:
        """Remove a handler from a topic."""
        handlers = self._subscribers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: PlaybackEvent) -> None:
        """Publish event: calls subscriber callbacks in subscription order."""
        handlers = list(self._subscribers.get(event.topic, []))

        for i, handler in enumerate(handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error("Error in handler %s for %s: %s", i, event.kind.value, e)

    def clear(self) -> None:
        """Drop all subscriptions."""
        for handlers in self._subscribers.values():
            handlers.clear()
