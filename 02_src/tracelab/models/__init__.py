"""Core data models for tracelab."""

from .actors import Actor, Capability, Role
from .trace import DnssecOutcome, FlowKind, PacketFlow, Step, StepFlags, Trace
from .race import RaceOutcome, RaceResolution, Verdict
from .diagnostics import (
    Diagnostic,
    Issue,
    PerformanceRating,
    Severity,
    StepCategory,
)
from .playback import PlaybackEvent, PlaybackEventKind, PlaybackState, Topic

__all__ = [
    # Actors
    "Actor",
    "Capability",
    "Role",
    # Trace
    "DnssecOutcome",
    "FlowKind",
    "PacketFlow",
    "Step",
    "StepFlags",
    "Trace",
    # Race
    "RaceOutcome",
    "RaceResolution",
    "Verdict",
    # Diagnostics
    "Diagnostic",
    "Issue",
    "PerformanceRating",
    "Severity",
    "StepCategory",
    # Playback
    "PlaybackEvent",
    "PlaybackEventKind",
    "PlaybackState",
    "Topic",
]
