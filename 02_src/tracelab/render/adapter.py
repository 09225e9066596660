"""RenderAdapter contract: what the core hands to a rendering layer.

The core guarantees that ``current_snapshot()`` is O(1) and side-effect free
and that subscribers are notified exactly once per controller transition. It
makes no claim about frame timing, easing or geometry.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

from ..models import (
    Diagnostic,
    PacketFlow,
    PlaybackEvent,
    PlaybackState,
    RaceResolution,
    Step,
)


@dataclass(frozen=True)
class Snapshot:
    """Everything a renderer needs for one frame."""

    step: Step
    flows: tuple[PacketFlow, ...]
    diagnostic: Diagnostic
    playback_state: PlaybackState
    races: tuple[RaceResolution, ...] = ()


SnapshotHandler = Callable[[PlaybackEvent], None]


class ISnapshotSource(Protocol):
    """Side of the boundary owned by the core."""

    def current_snapshot(self) -> Snapshot:
        """Return the current snapshot. O(1), no side effects."""
        ...

    def subscribe(self, handler: SnapshotHandler) -> None:
        """Receive one PlaybackEvent per transition."""
        ...

    def unsubscribe(self, handler: SnapshotHandler) -> None:
        """Stop receiving events."""
        ...


class IRenderAdapter(Protocol):
    """Side of the boundary owned by the renderer."""

    def render(self, snapshot: Snapshot) -> None:
        """Draw a snapshot."""
        ...


def attach_renderer(source: ISnapshotSource, renderer: IRenderAdapter) -> SnapshotHandler:
    """
    Render the current snapshot now and every later one on change.

    Returns:
        The subscribed handler, for ``source.unsubscribe``.
    """

    def _on_event(event: PlaybackEvent) -> None:
        renderer.render(event.snapshot)

    renderer.render(source.current_snapshot())
    source.subscribe(_on_event)
    return _on_event


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    """JSON-ready representation of a snapshot (enums as values)."""
    return _jsonable(dataclasses.asdict(snapshot))


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value
