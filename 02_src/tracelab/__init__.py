"""Tracelab: step-through playback and diagnostics for DNS resolution traces."""

from .actors import ActorRegistry
from .diagnostics import DiagnosticConfig, DiagnosticEngine, explain
from .errors import (
    SessionNotFoundError,
    StructuralError,
    StructuralErrorKind,
    TracelabError,
    UnknownScenarioError,
)
from .playback import PlaybackController
from .race import RaceResolver
from .render import Snapshot, attach_renderer, snapshot_to_dict
from .scenarios import build_scenario, list_scenarios, load_scenario
from .trace import load_trace, resolve_races, validate

__all__ = [
    "ActorRegistry",
    "DiagnosticConfig",
    "DiagnosticEngine",
    "explain",
    "SessionNotFoundError",
    "StructuralError",
    "StructuralErrorKind",
    "TracelabError",
    "UnknownScenarioError",
    "PlaybackController",
    "RaceResolver",
    "Snapshot",
    "attach_renderer",
    "snapshot_to_dict",
    "build_scenario",
    "list_scenarios",
    "load_scenario",
    "load_trace",
    "resolve_races",
    "validate",
]
