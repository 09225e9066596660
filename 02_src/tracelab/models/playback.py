"""Playback-related data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..render import Snapshot


class Topic(str, Enum):
    """EventBus topics."""

    PLAYBACK = "playback"


class PlaybackEventKind(str, Enum):
    """Controller transitions."""

    STEP_FORWARD = "step_forward"
    STEP_BACKWARD = "step_backward"
    SEEK = "seek"
    PLAY = "play"
    PAUSE = "pause"
    AUTO_PAUSE = "auto_pause"
    LIVE_UPDATE = "live_update"
    DISPOSED = "disposed"


@dataclass(frozen=True)
class PlaybackState:
    """Read cursor over a trace."""

    trace_id: str
    current_index: int
    is_playing: bool
    auto_advance_ms: int
    length: int
    is_live: bool = False

    @property
    def at_end(self) -> bool:
        return self.current_index >= self.length - 1


@dataclass
class PlaybackEvent:
    """A notification published once per controller transition."""

    id: str
    topic: Topic
    kind: PlaybackEventKind
    snapshot: "Snapshot"
    timestamp: datetime
