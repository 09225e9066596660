"""Error taxonomy."""

from enum import Enum


class TracelabError(Exception):
    """Base class for tracelab errors."""


class StructuralErrorKind(str, Enum):
    """Why a scenario was rejected at load time."""

    UNKNOWN_ACTOR = "unknown_actor"
    NON_MONOTONIC_INDEX = "non_monotonic_index"
    TIMING_REGRESSION = "timing_regression"
    MISSING_FIELD = "missing_field"
    INVALID_FIELD = "invalid_field"
    INVALID_RACE_GROUP = "invalid_race_group"


class StructuralError(TracelabError):
    """A malformed trace. Fatal at load, before any playback state exists."""

    def __init__(self, kind: StructuralErrorKind, detail: str):
        super().__init__(f"{kind.value}: {detail}")
        self.kind = kind
        self.detail = detail


class SessionNotFoundError(TracelabError):
    """No playback session with the given id."""


class UnknownScenarioError(TracelabError):
    """No scenario with the given id in the library."""
