"""RenderAdapter module."""

from .adapter import (
    IRenderAdapter,
    ISnapshotSource,
    Snapshot,
    SnapshotHandler,
    attach_renderer,
    snapshot_to_dict,
)

__all__ = [
    "Snapshot",
    "SnapshotHandler",
    "ISnapshotSource",
    "IRenderAdapter",
    "attach_renderer",
    "snapshot_to_dict",
]
