"""PlaybackController module."""

from .controller import IPlaybackController, PlaybackController

__all__ = ["IPlaybackController", "PlaybackController"]
